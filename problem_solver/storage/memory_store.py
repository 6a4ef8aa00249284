"""
In-memory problem store
"""
import asyncio
from typing import Dict, Optional
from loguru import logger

from problem_solver.core.interfaces.problem_store import ProblemStore
from problem_solver.models.problem import Problem


class InMemoryProblemStore(ProblemStore):
    """
    Process-local problem store

    Records live until the process exits. Id allocation and insertion happen
    under one lock so concurrent submissions never share an id.
    """

    def __init__(self, start_id: int = 1):
        self._problems: Dict[int, Problem] = {}
        self._next_id = start_id
        self._lock = asyncio.Lock()

    async def create(self, question: str, image_url: Optional[str] = None) -> Problem:
        async with self._lock:
            problem = Problem(id=self._next_id, question=question, image_url=image_url)
            self._problems[problem.id] = problem
            self._next_id += 1

        logger.debug(f"Stored problem {problem.id} (image: {'yes' if image_url else 'no'})")
        return problem

    async def get(self, problem_id: int) -> Optional[Problem]:
        return self._problems.get(problem_id)

    async def count(self) -> int:
        return len(self._problems)
