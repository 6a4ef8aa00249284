"""
FastAPI dependency injection utilities

This module provides dependency injection for all services,
ensuring singleton instances and proper initialization.
"""
import functools
from functools import lru_cache
from typing import Dict, Any, Optional
from fastapi import UploadFile, status
from fastapi.responses import JSONResponse
from loguru import logger

from problem_solver.core.config import settings
from problem_solver.core.exceptions import ProblemSolverError, ProblemValidationError
from problem_solver.services.ai.gemini_service import GeminiService
from problem_solver.services.image.image_preprocessor import ImagePreprocessor
from problem_solver.services.problem_service import ProblemService
from problem_solver.storage.memory_store import InMemoryProblemStore


@lru_cache()
def get_problem_store() -> InMemoryProblemStore:
    """Get singleton problem store"""
    return InMemoryProblemStore()


@lru_cache()
def get_gemini_service() -> GeminiService:
    """Get singleton Gemini solution provider"""
    return GeminiService(
        api_keys=settings.gemini_key_list,
        model_name=settings.gemini_model,
    )


@lru_cache()
def get_image_preprocessor() -> ImagePreprocessor:
    """Get singleton image preprocessor"""
    return ImagePreprocessor(
        max_dimension=settings.max_image_dimension,
        jpeg_quality=settings.jpeg_quality,
    )


@lru_cache()
def get_problem_service() -> ProblemService:
    """Get singleton problem submission service"""
    return ProblemService(
        store=get_problem_store(),
        solution_provider=get_gemini_service(),
        image_preprocessor=get_image_preprocessor(),
        solution_timeout=settings.solution_timeout_seconds,
    )


# ============================================================================
# VALIDATION DEPENDENCIES
# ============================================================================

async def read_image_upload(image: Optional[UploadFile]) -> Optional[bytes]:
    """
    Read and validate an optional image upload

    Args:
        image: The uploaded file, if any

    Returns:
        The file bytes, or None when no file was sent

    Raises:
        ProblemValidationError: If the file is too large or not an image
    """
    if image is None or not image.filename:
        return None

    if image.size and image.size > settings.max_image_size:
        raise ProblemValidationError(_too_large_message())

    if image.content_type and not image.content_type.startswith("image/"):
        raise ProblemValidationError("Only image uploads are supported")

    # Reads at most one byte past the limit, for uploads without a declared size
    data = await image.read(settings.max_image_size + 1)
    if len(data) > settings.max_image_size:
        raise ProblemValidationError(_too_large_message())

    return data or None


def _too_large_message() -> str:
    return f"File too large. Maximum size: {settings.max_image_size / 1024 / 1024:.1f}MB"


# ============================================================================
# SERVICE HEALTH CHECKS
# ============================================================================

async def check_services_health() -> Dict[str, Dict[str, Any]]:
    """
    Check health of all services

    Returns:
        Dictionary with health status of all services
    """
    health_status = {}

    try:
        provider = get_gemini_service()
        stats = await provider.get_statistics()
        health_status["solution_provider"] = {
            "status": "healthy" if provider.is_available() else "unconfigured",
            "name": stats.get("service_name"),
            "model": stats.get("model_name"),
            "available_keys": stats.get("available_keys"),
            "total_keys": stats.get("total_keys")
        }
    except Exception as e:
        health_status["solution_provider"] = {
            "status": "unhealthy",
            "error": str(e)
        }

    try:
        store = get_problem_store()
        health_status["problem_store"] = {
            "status": "healthy",
            "problems": await store.count()
        }
    except Exception as e:
        health_status["problem_store"] = {
            "status": "unhealthy",
            "error": str(e)
        }

    return health_status


# ============================================================================
# ERROR HANDLING DECORATORS
# ============================================================================

def handle_service_errors(func):
    """
    Decorator to handle service errors

    Converts exceptions into ``{"error": message}`` JSON responses. Service
    errors use their own status code; anything else is reported as 400.
    """

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except ProblemSolverError as e:
            logger.warning(f"Request rejected in {func.__name__}: {e.message}")
            return JSONResponse(status_code=e.status_code, content={"error": e.message})
        except Exception as e:
            logger.exception(f"Unexpected error in {func.__name__}: {e}")
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": str(e) or "Invalid request"}
            )

    return wrapper


def clear_service_cache():
    """
    Clear all cached service instances

    Useful for testing or configuration reloading
    """
    get_problem_store.cache_clear()
    get_gemini_service.cache_clear()
    get_image_preprocessor.cache_clear()
    get_problem_service.cache_clear()
