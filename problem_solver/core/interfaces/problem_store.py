"""
Abstract interface for problem record storage
"""
from abc import ABC, abstractmethod
from typing import Optional

from problem_solver.models.problem import Problem


class ProblemStore(ABC):
    """
    Abstract base class for problem stores

    Implementations assign ids and return the stored record itself, so callers
    can attach the solution to it after creation.
    """

    @abstractmethod
    async def create(self, question: str, image_url: Optional[str] = None) -> Problem:
        """
        Store a new record with the next sequential id

        Args:
            question: Question text
            image_url: Optional data URI of the preprocessed image

        Returns:
            The stored record, with no solution attached yet
        """
        pass

    @abstractmethod
    async def get(self, problem_id: int) -> Optional[Problem]:
        """Return the record with the given id, or None"""
        pass

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored records"""
        pass
