"""
HTTP client for the problem solver API
"""
from typing import Any, Dict, Optional
import httpx
from loguru import logger

from problem_solver.core.config import settings


class ProblemApiError(Exception):
    """The API rejected a request or could not be reached"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ProblemApiClient:
    """
    Submits problems to ``POST /api/problems`` as multipart form data

    Args:
        base_url: Server URL, defaults to ``settings.api_base_url``
        timeout: Request timeout in seconds
        client: Preconfigured ``httpx.Client`` to use instead of creating one
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 120.0,
        client: Optional[httpx.Client] = None,
    ):
        self._client = client or httpx.Client(base_url=base_url or settings.api_base_url, timeout=timeout)

    def submit_problem(self, question: str, image_jpeg: Optional[bytes] = None) -> Dict[str, Any]:
        """
        Submit a question and optional JPEG image

        Returns:
            The problem record as returned by the server

        Raises:
            ProblemApiError: On network failure or a non-2xx response
        """
        # A part without a filename is a plain form field, keeps the body multipart without an image
        files = {"question": (None, question)}
        if image_jpeg:
            files["image"] = ("image.jpg", image_jpeg, "image/jpeg")

        try:
            response = self._client.post("/api/problems", files=files)
        except httpx.HTTPError as e:
            logger.error(f"❌ Problem submission failed: {e}")
            raise ProblemApiError(f"Could not reach the server: {e}") from e

        if response.is_error:
            raise ProblemApiError(self._error_message(response), status_code=response.status_code)

        return response.json()

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"{response.status_code}: {response.reason_phrase or 'Request failed'}"
