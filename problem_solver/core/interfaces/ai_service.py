"""
Abstract base interface for solution providers
"""
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional
from pydantic import BaseModel


class AIResponse(BaseModel):
    """Standard AI response format"""
    success: bool
    content: Optional[str] = None
    error: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class SolutionProvider(ABC):
    """
    Abstract base class for services that generate problem solutions

    Provider failures (auth, quota, network, blocked output) are reported in
    the returned AIResponse rather than raised.
    """

    @abstractmethod
    async def solve(
        self,
        prompt: str,
        image_data: Optional[str] = None,
        mime_type: str = "image/jpeg",
    ) -> AIResponse:
        """
        Generate a solution for the prompt

        Args:
            prompt: Instruction followed by the question text
            image_data: Optional base64 encoded image
            mime_type: MIME type of image_data

        Returns:
            AIResponse with the solution text or error
        """
        pass

    @abstractmethod
    def get_service_name(self) -> str:
        """Return the name of the AI service"""
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the service is available/configured"""
        pass
