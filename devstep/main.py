"""DevStep API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map DevStepError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Database initialized on startup via lifespan context manager

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py: three layers, DevStepError (domain),
      RequestValidationError (Pydantic), Exception (catch-all)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from devstep.api.error_handlers import register_error_handlers
from devstep.api.routes import (
    challenges, health, map_view, statistics, steps, teams, users,
)
from devstep.config import get_settings
from devstep.infrastructure.database import init_db
from devstep.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    init_db(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
    )
    logger.info("DevStep API started")
    yield
    logger.info("DevStep API shutting down")


app = FastAPI(
    title="DevStep API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router)
app.include_router(challenges.router)
app.include_router(teams.router)
app.include_router(steps.router)
app.include_router(statistics.router)
app.include_router(map_view.router)

register_error_handlers(app)
