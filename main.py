"""
TeachHub Backend API Server

FastAPI application for a single-teacher course platform.
Serves the batch/section/lesson/note catalogue, enrollments, student
administration, notifications and admin analytics.
"""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from datetime import datetime, timezone
import time

from teachhub import config
from teachhub.api.routes import (
    analytics,
    batches,
    enrollments,
    lessons,
    notes,
    notifications,
    sections,
    students,
)
from teachhub.database import AsyncSessionLocal
from teachhub.errors import ConflictError, TeachHubError, UnauthenticatedError
from teachhub.services.bootstrap import ensure_teacher_admin
from teachhub.services.scheduler import start_scheduler, stop_scheduler

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Seeds the teacher admin and runs the orphan sweep scheduler.
    """
    # Startup
    logger.info("Starting TeachHub API server...")

    async with AsyncSessionLocal() as session:
        try:
            await ensure_teacher_admin(session)
        except ConflictError as e:
            logger.error(f"Admin seeding skipped: {e.message}")

    if config.ORPHAN_SWEEP_ENABLED:
        start_scheduler()
        logger.info("Background scheduler started")

    yield

    # Shutdown
    logger.info("Shutting down TeachHub API server...")
    stop_scheduler()


# Create FastAPI application
app = FastAPI(
    title="TeachHub API",
    description="Course batches, lessons, notes and enrollments for a single teacher",
    version="1.0.0",
    debug=config.APP_DEBUG,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json"
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing"""
    start_time = time.time()

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Duration: {duration_ms:.2f}ms"
    )

    return response


# Domain error handler
@app.exception_handler(TeachHubError)
async def teachhub_exception_handler(request: Request, exc: TeachHubError):
    """Render service errors with their own status and code"""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthenticatedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_dict()),
        headers=headers,
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle all uncaught exceptions"""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An internal server error occurred",
                "details": str(exc) if app.debug else None
            }
        }
    )


# Validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
        content={
            "error": {
                "code": "VALIDATION_ERROR",
                "message": "Request validation failed",
                "details": jsonable_encoder(exc.errors())
            }
        }
    )


# Health check endpoint
@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Returns server status and version information.
    """
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": "1.0.0",
        "service": "teachhub-api"
    }


# Include routers
app.include_router(batches.router)
app.include_router(sections.router)
app.include_router(lessons.router)
app.include_router(notes.router)
app.include_router(enrollments.router)
app.include_router(students.router)
app.include_router(notifications.router)
app.include_router(analytics.router)


# Root endpoint
@app.get("/", tags=["Root"])
async def root():
    """API root endpoint"""
    return {
        "name": "TeachHub API",
        "version": "1.0.0",
        "description": "Course batches, lessons, notes and enrollments for a single teacher",
        "docs": "/api/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=config.APP_DEBUG,
        log_level=config.LOG_LEVEL.lower()
    )
