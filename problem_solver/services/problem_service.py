"""
Problem submission service

Ties together image preprocessing, record storage and the solution provider
for a single submitted question.
"""
import asyncio
import base64
from typing import Optional
from loguru import logger

from problem_solver.core.exceptions import ProblemValidationError, ProblemNotFoundError
from problem_solver.core.interfaces.ai_service import SolutionProvider, AIResponse
from problem_solver.core.interfaces.problem_store import ProblemStore
from problem_solver.models.problem import Problem, Solution
from problem_solver.services.image.image_preprocessor import ImagePreprocessor, JPEG_MIME_TYPE, to_data_uri

SOLUTION_FAILED_TEXT = "Unable to process request"

SOLVE_INSTRUCTION = (
    "Please solve this math or science problem and provide a detailed explanation. "
    "Format mathematical expressions using LaTeX notation "
    "($...$ for inline math and $$...$$ for display math): "
)


def build_solution_prompt(question: str) -> str:
    """Instruction for the model followed by the raw question"""
    return f"{SOLVE_INSTRUCTION}{question}"


class ProblemService:
    """
    Handles problem submissions

    Flow: validate question -> preprocess image -> store record -> ask the
    solution provider -> attach solution -> return record.

    Validation and image errors are raised before anything is stored. Provider
    failures never raise; they are recorded on the solution instead.
    """

    def __init__(
        self,
        store: ProblemStore,
        solution_provider: SolutionProvider,
        image_preprocessor: ImagePreprocessor,
        solution_timeout: Optional[float] = 60.0,
    ):
        self.store = store
        self.solution_provider = solution_provider
        self.image_preprocessor = image_preprocessor
        self.solution_timeout = solution_timeout

    async def submit(
        self,
        question: Optional[str],
        image_bytes: Optional[bytes] = None,
        content_type: Optional[str] = None,
    ) -> Problem:
        """
        Store a question and attach its AI-generated solution

        Args:
            question: Question text, must not be blank
            image_bytes: Optional raw image upload
            content_type: Declared MIME type of the upload

        Returns:
            The stored record with its solution attached

        Raises:
            ProblemValidationError: If the question is blank
            ImageProcessingError: If the image cannot be preprocessed
        """
        question = (question or "").strip()
        if not question:
            raise ProblemValidationError("Question is required")

        logger.info(
            f"📝 Problem submitted: {question[:100]!r} "
            f"(image: {f'{len(image_bytes)} bytes, {content_type}' if image_bytes else 'none'})"
        )

        jpeg_bytes = None
        if image_bytes:
            # Resizing is CPU bound, keep it off the event loop
            jpeg_bytes = await asyncio.to_thread(self.image_preprocessor.process, image_bytes)

        problem = await self.store.create(
            question=question,
            image_url=to_data_uri(jpeg_bytes) if jpeg_bytes else None,
        )
        logger.info(f"🗂️ Created problem {problem.id}")

        response = await self._request_solution(
            prompt=build_solution_prompt(question),
            image_data=base64.b64encode(jpeg_bytes).decode("utf-8") if jpeg_bytes else None,
        )

        if response.success:
            problem.attach_solution(Solution(text=response.content or ""))
            logger.info(f"✅ Problem {problem.id} solved ({len(response.content or '')} chars)")
        else:
            problem.attach_solution(Solution(text=SOLUTION_FAILED_TEXT, error=response.error))
            logger.warning(f"⚠️ Problem {problem.id} could not be solved: {response.error}")

        return problem

    async def get_problem(self, problem_id: int) -> Problem:
        """
        Look up a stored problem

        Raises:
            ProblemNotFoundError: If no problem has this id
        """
        problem = await self.store.get(problem_id)
        if problem is None:
            raise ProblemNotFoundError("Problem not found")
        return problem

    async def _request_solution(self, prompt: str, image_data: Optional[str]) -> AIResponse:
        """Call the provider once, turning timeouts and exceptions into failed responses"""
        try:
            return await asyncio.wait_for(
                self.solution_provider.solve(
                    prompt=prompt,
                    image_data=image_data,
                    mime_type=JPEG_MIME_TYPE,
                ),
                timeout=self.solution_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(f"⏱️ Solution provider timed out after {self.solution_timeout}s")
            return AIResponse(
                success=False,
                error=f"Solution request timed out after {self.solution_timeout:g} seconds"
            )
        except Exception as e:
            logger.error(f"❌ Solution provider error: {e}")
            return AIResponse(success=False, error=str(e) or "Unknown error occurred while processing your request")
