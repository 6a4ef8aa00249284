"""
Pydantic models for API responses
"""
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error body returned for rejected requests"""
    error: str = Field(..., description="Human-readable error message")

    model_config = {
        "json_schema_extra": {
            "example": {"error": "Question is required"}
        }
    }


class HealthResponse(BaseModel):
    """Response model for health check"""
    status: str = Field(..., description="Overall service status")
    version: str = Field(..., description="Service version")
    timestamp: float = Field(..., description="Unix time of the check")
    services: Optional[Dict[str, Any]] = Field(None, description="Per-component health status")

    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "timestamp": 1760745600.0,
                "services": {
                    "solution_provider": {
                        "status": "healthy",
                        "name": "Google Gemini",
                        "available_keys": 2,
                        "total_keys": 2
                    },
                    "problem_store": {"status": "healthy", "problems": 3}
                }
            }
        }
    }
