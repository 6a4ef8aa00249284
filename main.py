"""
Problem Solver - Main FastAPI Application

An AI service for math and science homework featuring:
- Question submission with optional image upload
- Image resizing to a bounded JPEG
- Gemini-generated solutions formatted with LaTeX math
"""
import sys
import time
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
import uvicorn

from problem_solver.core.config import settings
from problem_solver.api.v1 import router as api_router
from problem_solver.models.responses import HealthResponse


# Configure logging
logger.remove()  # Remove default handler
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    level=settings.log_level
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager

    Handles startup and shutdown events for the FastAPI application
    """
    # Startup
    logger.info("🚀 Starting Problem Solver...")
    logger.info(f"🔧 Configuration: {settings.app_name} v{settings.app_version}")
    logger.info(f"🔧 Environment: Debug={settings.debug}")
    logger.info(f"🔧 Model: {settings.gemini_model}, timeout {settings.solution_timeout_seconds}s")

    from problem_solver.utils.dependencies import get_gemini_service
    if not get_gemini_service().is_available():
        logger.warning("⚠️ GEMINI_KEYS not configured, every problem will be returned with an error")

    yield

    # Shutdown
    logger.info("🛑 Shutting down Problem Solver...")


# Create FastAPI application
app = FastAPI(
    title="Problem Solver",
    description="""
## 🧮 Problem Solver

Submit a math or science question, optionally with a photo of the problem,
and get a step-by-step solution written with LaTeX math.

### 📖 Usage

```bash
curl -X POST "/api/problems" \\
  -F "question=Solve for x: \\$2x + 3 = 7\\$" \\
  -F "image=@homework.jpg"
```

Math in solutions uses `$...$` for inline and `$$...$$` for display formulas.
    """,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)


# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)


# Add trusted host middleware for production
if not settings.debug:
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts
    )


# Include API routers
app.include_router(api_router)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """
    Problem Solver root endpoint
    """
    return {
        "message": "🧮 Welcome to Problem Solver",
        "version": settings.app_version,
        "description": "AI solutions for math and science problems",
        "api_docs": "/docs",
        "endpoints": {
            "api": "/api"
        },
        "status": "🟢 Service running"
    }


# Health check endpoint
@app.get("/health", tags=["Health"], response_model=HealthResponse)
async def health_check():
    """
    Service health check

    Returns the overall health status of the service and its components.
    """
    try:
        from problem_solver.utils.dependencies import check_services_health
        health_status = await check_services_health()

        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": settings.app_version,
            "services": health_status
        }
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "unhealthy",
                "error": str(e),
                "version": settings.app_version
            }
        )


# Request validation errors use the same error body as service errors
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Report malformed requests as 400 with an ``error`` message
    """
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"Invalid {field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Invalid request"
    logger.warning(f"Request validation failed for {request.url}: {message}")

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler for unhandled errors
    """
    logger.error(f"Unhandled exception for {request.url}: {exc}")

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": str(exc) if settings.debug else "An unexpected error occurred",
            "path": str(request.url),
            "method": request.method
        }
    )


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log all HTTP requests for monitoring and debugging
    """
    start_time = time.time()

    logger.info(f"📥 {request.method} {request.url}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"📤 {request.method} {request.url} - {response.status_code} - {process_time:.2f}s")

    return response


# Run the application
if __name__ == "__main__":
    logger.info(f"🚀 Starting Problem Solver on {settings.host}:{settings.port}")

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        access_log=True,
        log_level=settings.log_level.lower()
    )
