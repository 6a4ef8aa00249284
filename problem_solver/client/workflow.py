"""
Client-side problem solving workflow

Keeps the form state of the problem solver UI (question, selected image,
cropped image, last result, notifications) independent of the UI toolkit.
The Streamlit app drives one instance per browser session.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from loguru import logger

from problem_solver.client.api_client import ProblemApiClient, ProblemApiError
from problem_solver.core.exceptions import ImageProcessingError
from problem_solver.services.image.cropper import CropRegion, crop_image

DEFAULT_IMAGE_QUESTION = "Please solve this math problem"


class WorkflowState(str, Enum):
    IDLE = "idle"
    IMAGE_SELECTED = "image_selected"
    CROPPING = "cropping"
    SUBMITTING = "submitting"
    SOLVED = "solved"
    ERRORED = "errored"


@dataclass
class Notification:
    """Dismissible message shown to the user"""
    title: str
    description: str
    is_error: bool = False


class ProblemSolverWorkflow:
    """
    Question form with optional image cropping

    Selecting an image opens the crop step; confirming a crop submits right
    away. Failures keep the form filled in, a clean success clears it.
    """

    def __init__(self, api_client: ProblemApiClient):
        self.api_client = api_client
        self.state = WorkflowState.IDLE
        self.question = ""
        self.selected_image: Optional[bytes] = None
        self.selected_filename: Optional[str] = None
        self.cropped_image: Optional[bytes] = None
        self.result: Optional[Dict[str, Any]] = None
        self.notifications: List[Notification] = []
        # Bumped on every reset so the UI can discard widget state tied to the old form
        self.form_generation = 0

    # ------------------------------------------------------------------
    # Image selection and cropping

    def select_image(self, image_bytes: bytes, filename: Optional[str] = None) -> None:
        """Keep the chosen file as preview and open the crop step"""
        self.selected_image = image_bytes
        self.selected_filename = filename
        self.cropped_image = None
        if not self.question.strip():
            self.question = DEFAULT_IMAGE_QUESTION
        self.state = WorkflowState.CROPPING

    def cancel_crop(self) -> None:
        if self.state is WorkflowState.CROPPING:
            self.state = WorkflowState.IMAGE_SELECTED

    def confirm_crop(self, region: CropRegion, display_size: Tuple[int, int]) -> Optional[Dict[str, Any]]:
        """
        Crop the selected image and submit it with the current question

        Args:
            region: Region selected on the displayed image
            display_size: (width, height) of the displayed image

        Returns:
            The problem record, or None if cropping or submission failed
        """
        if self.selected_image is None:
            self._notify_error("No image selected")
            return None

        try:
            cropped = crop_image(self.selected_image, region, display_size)
        except ImageProcessingError as e:
            logger.error(f"❌ Crop failed: {e.message}")
            self.state = WorkflowState.ERRORED
            self._notify_error("Failed to process image")
            return None

        self.selected_image = cropped
        self.cropped_image = cropped
        self.state = WorkflowState.IMAGE_SELECTED

        if not self.question.strip():
            self._notify_error("Please enter a question before uploading an image")
            return None

        return self.submit()

    # ------------------------------------------------------------------
    # Submission

    def submit(self) -> Optional[Dict[str, Any]]:
        """
        Send the question and cropped image, if any, to the server

        Returns:
            The problem record, or None if the request failed
        """
        question = self.question.strip()
        if not question:
            self._notify_error("Question is required")
            return None

        self.state = WorkflowState.SUBMITTING
        try:
            problem = self.api_client.submit_problem(question, self.cropped_image)
        except ProblemApiError as e:
            self.state = WorkflowState.ERRORED
            self._notify_error(e.message or "Failed to submit problem. Please try again.")
            return None

        self.result = problem
        solution = problem.get("solution") or {}
        if solution.get("error"):
            self.state = WorkflowState.ERRORED
            self.notifications.append(
                Notification(title="Error solving problem", description=solution["error"], is_error=True)
            )
            return problem

        self.state = WorkflowState.SOLVED
        self.notifications.append(Notification(title="Success", description="Problem solved successfully!"))
        self._reset_form()
        return problem

    # ------------------------------------------------------------------
    # Notifications

    def dismiss_notification(self, index: int) -> None:
        if 0 <= index < len(self.notifications):
            del self.notifications[index]

    def _notify_error(self, message: str) -> None:
        self.notifications.append(Notification(title="Error", description=message, is_error=True))

    def _reset_form(self) -> None:
        self.question = ""
        self.selected_image = None
        self.selected_filename = None
        self.cropped_image = None
        self.form_generation += 1
