"""
Problem record models
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

from problem_solver.core.exceptions import SolutionAlreadyAttachedError


class SolutionStatus(str, Enum):
    """Lifecycle of a record's solution"""
    PENDING = "pending"
    SOLVED = "solved"
    FAILED = "failed"


class Solution(BaseModel):
    """Solution text returned by the AI model, or a placeholder with the error"""
    text: str = Field(..., description="Solution text with $...$ / $$...$$ math")
    error: Optional[str] = Field(None, description="Provider error message if solving failed")

    @model_serializer(mode="wrap")
    def omit_empty_error(self, handler):
        data = handler(self)
        if data.get("error") is None:
            data.pop("error", None)
        return data


class Problem(BaseModel):
    """A submitted question and its eventual solution"""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "question": "Solve $x^2 - 4 = 0$",
                "imageUrl": None,
                "solution": {"text": "Factor: $(x-2)(x+2)=0$, so $$x = \\pm 2$$"},
                "status": "solved"
            }
        }
    )

    id: int = Field(..., ge=1, frozen=True, description="Sequential record identifier")
    question: str = Field(..., description="Question text")
    image_url: Optional[str] = Field(None, alias="imageUrl", description="JPEG data URI of the uploaded image")
    solution: Optional[Solution] = Field(None, description="Solution, absent until the model responds")
    status: SolutionStatus = Field(SolutionStatus.PENDING, description="Solution lifecycle state")

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Question is required")
        return value

    def attach_solution(self, solution: Solution) -> None:
        """
        Attach the solution, moving the record out of the pending state

        Raises:
            SolutionAlreadyAttachedError: If a solution was attached before
        """
        if self.status is not SolutionStatus.PENDING:
            raise SolutionAlreadyAttachedError(
                f"Problem {self.id} already has a solution ({self.status.value})"
            )
        self.solution = solution
        self.status = SolutionStatus.FAILED if solution.error else SolutionStatus.SOLVED
