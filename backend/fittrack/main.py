"""
Fitness Tracker API - Main Application
FastAPI backend for logging workouts, weight and birthdays, with trend analytics
and an optional AI coach.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import engine, Base, SessionLocal
from .llm.coach import InsightCoach
from .routers import birthdays, chat, dashboard, data, insights, weights, workouts
from .store import LocalStore, RemoteStore, TrackerRepository
# Import models to ensure they're registered with SQLAlchemy before create_all
from . import models  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_repository() -> TrackerRepository:
    """Repository wired from settings: hosted API (if configured), SQLite cache, demo seed."""
    Base.metadata.create_all(bind=engine)
    remote = None
    if settings.remote_url and settings.remote_api_key:
        remote = RemoteStore(
            settings.remote_url,
            settings.remote_api_key,
            timeout=settings.remote_timeout_seconds,
        )
    else:
        logger.info("Remote store not configured; using local cache only")
    return TrackerRepository(
        LocalStore(SessionLocal),
        remote=remote,
        seed_demo_data=settings.seed_demo_data,
    )


def create_app(repository: Optional[TrackerRepository] = None, coach: Optional[InsightCoach] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info("=" * 60)
        logger.info("%s v%s", settings.app_name, settings.app_version)
        if settings.git_commit:
            logger.info("Git Commit: %s", settings.git_commit[:8])
        if settings.build_date:
            logger.info("Build Date: %s", settings.build_date)
        logger.info("=" * 60)

        if app.state.repository is None:
            app.state.repository = build_repository()
        source = app.state.repository.load()
        logger.info("Tracker ready (data source: %s)", source)
        yield

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Track workouts, weight and birthdays, and see where your trends are heading",
        lifespan=lifespan,
        docs_url="/docs",  # Swagger UI
        redoc_url="/redoc",  # ReDoc
    )
    app.state.repository = repository
    app.state.coach = coach

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(weights.router)
    app.include_router(workouts.router)
    app.include_router(birthdays.router)
    app.include_router(dashboard.router)
    app.include_router(insights.router)
    app.include_router(data.router)
    app.include_router(chat.router)

    @app.get("/")
    def root():
        """Root endpoint - API status."""
        response = {
            "message": "Welcome to Fitness Tracker API",
            "version": settings.app_version,
            "status": "healthy",
            "docs": "/docs"
        }
        if settings.git_commit:
            response["git_commit"] = settings.git_commit[:8]
        if settings.build_date:
            response["build_date"] = settings.build_date
        return response

    @app.get("/health")
    def health_check():
        """Health check endpoint for monitoring."""
        status = app.state.repository.status() if app.state.repository else None
        return {"status": "healthy", "data_source": status.source if status else None}

    @app.get("/api/version")
    def version():
        """Version information endpoint."""
        response = {
            "app_name": settings.app_name,
            "version": settings.app_version,
        }
        if settings.git_commit:
            response["git_commit"] = settings.git_commit
            response["git_commit_short"] = settings.git_commit[:8]
        if settings.build_date:
            response["build_date"] = settings.build_date
        return response

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fittrack.main:app", host="0.0.0.0", port=8000, reload=True)
