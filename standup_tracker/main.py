from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import uvicorn

from .config import settings
from .database import init_models
from .api.v1.router import api_router
from .services.report_pipeline import WeeklyReportPipeline
from .services.scheduler import WeeklyReportScheduler
from .utils.logging import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    setup_logging(settings.log_level, settings.log_file)
    logger.info("Starting Standup Tracker application")

    # Create database tables
    await init_models()

    pipeline = WeeklyReportPipeline()
    app.state.pipeline = pipeline

    scheduler = None
    if settings.enable_scheduled_tasks:
        scheduler = WeeklyReportScheduler(pipeline)
        scheduler.start()
    app.state.scheduler = scheduler

    yield

    # Shutdown
    if scheduler is not None:
        await scheduler.stop()
    logger.info("Shutting down Standup Tracker application")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Daily standup tracking with scheduled AI weekly reports",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    scheduler = getattr(app.state, "scheduler", None)
    return {
        "status": "healthy",
        "version": settings.app_version,
        "scheduler": "running" if scheduler is not None and scheduler.running else "stopped",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


if __name__ == "__main__":
    uvicorn.run(
        "standup_tracker.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
