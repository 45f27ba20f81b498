"""
Main application entry point for the adaptive learning engine.

Builds the FastAPI application around an AnalyticsService and an
AdaptiveDifficultyEngine sharing one in-process state.

Usage:
    - Direct: python -m adaptive_learning.main
    - ASGI server: uvicorn adaptive_learning.main:app
"""

import os
import datetime
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from adaptive_learning.common.cache import MemoryCacheBackend
from adaptive_learning.common.config import AppConfig, get_config
from adaptive_learning.common.logger import app_logger, configure_logger
from adaptive_learning.analytics.service import AnalyticsService
from adaptive_learning.api import analytics_router, difficulty_router
from adaptive_learning.curriculum import load_curriculum
from adaptive_learning.difficulty.engine import AdaptiveDifficultyEngine

# Setup module logger
logger = app_logger.getChild("main")


def create_app(
    config: Optional[AppConfig] = None,
    clock: Callable[[], datetime.datetime] = datetime.datetime.now
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        config: Application configuration (the loaded global config if not provided)
        clock: Callable returning the current time, shared by both services

    Returns:
        Configured application with services in ``app.state``
    """
    config = config or get_config()
    configure_logger(
        level=config.logging.level,
        use_json=config.logging.use_json,
        log_file=config.logging.file_path
    )

    curriculum = load_curriculum(config.difficulty.curriculum_path)
    analytics = AnalyticsService(config=config, curriculum=curriculum, clock=clock)
    engine = AdaptiveDifficultyEngine(analytics, config=config, curriculum=curriculum)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cache = app.state.analytics.cache
        if isinstance(cache, MemoryCacheBackend):
            cache.start_cleanup_task()
        logger.info("Application startup complete")
        yield
        if isinstance(cache, MemoryCacheBackend):
            await cache.stop_cleanup_task()
        if cache is not None:
            await cache.clear()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=config.app_name,
        description="Learner analytics and adaptive difficulty API",
        version=config.version,
        lifespan=lifespan
    )
    app.state.config = config
    app.state.analytics = analytics
    app.state.engine = engine

    app.include_router(analytics_router)
    app.include_router(difficulty_router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {"message": f"Welcome to the {config.app_name} API"}

    logger.info(f"Application initialized with {len(app.routes)} routes (env: {config.environment.env})")
    return app


app = create_app()

# Entry point for running the application directly
if __name__ == "__main__":
    import uvicorn

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", 8000))
    reload_enabled = os.environ.get("RELOAD", "false").lower() == "true"

    logger.info(f"Starting server on {host}:{port} (reload: {reload_enabled})")

    uvicorn.run(
        "adaptive_learning.main:app",
        host=host,
        port=port,
        reload=reload_enabled,
        log_level="info"
    )
