"""
Problem submission API routes
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, UploadFile
from loguru import logger

from problem_solver.models.problem import Problem
from problem_solver.models.responses import ErrorResponse
from problem_solver.services.problem_service import ProblemService
from problem_solver.utils.dependencies import (
    get_problem_service,
    read_image_upload,
    handle_service_errors
)

router = APIRouter(prefix="/problems", tags=["Problems"])


@router.post(
    "",
    response_model=Problem,
    responses={400: {"model": ErrorResponse, "description": "Invalid question or image"}}
)
@handle_service_errors
async def submit_problem(
    question: Optional[str] = Form(None, description="Question text"),
    image: Optional[UploadFile] = File(None, description="Optional problem image (max 5MB)"),
    problem_service: ProblemService = Depends(get_problem_service)
):
    """
    Submit a math or science problem and get an AI-generated solution

    - **question**: The problem statement. Use `$...$` for inline math and `$$...$$` for block math
    - **image**: Optional photo or screenshot of the problem

    The image is resized to fit 800x800 and stored as a JPEG data URI.
    If the AI model fails, the problem is still returned with
    `solution.error` set.
    """
    image_bytes = await read_image_upload(image)

    problem = await problem_service.submit(
        question=question,
        image_bytes=image_bytes,
        content_type=image.content_type if image_bytes else None
    )

    logger.info(f"📤 Problem {problem.id} returned with status {problem.status.value}")
    return problem


@router.get(
    "/{problem_id}",
    response_model=Problem,
    responses={404: {"model": ErrorResponse, "description": "Unknown problem id"}}
)
@handle_service_errors
async def get_problem(
    problem_id: int,
    problem_service: ProblemService = Depends(get_problem_service)
):
    """
    Get a previously submitted problem and its solution
    """
    return await problem_service.get_problem(problem_id)
