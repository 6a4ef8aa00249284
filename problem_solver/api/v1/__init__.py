"""
API main router
"""
from fastapi import APIRouter
from problem_solver.api.v1.routes import problems

# Create main API router
router = APIRouter(prefix="/api")

# Include all route modules
router.include_router(problems.router)

# API root endpoint
@router.get("")
async def api_root():
    """
    API root endpoint
    """
    return {
        "message": "Problem Solver API",
        "version": "1.0.0",
        "endpoints": {
            "problems": {
                "submit": "POST /api/problems",
                "get": "GET /api/problems/{problem_id}"
            }
        },
        "docs": "/docs",
        "redoc": "/redoc"
    }
