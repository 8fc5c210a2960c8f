# =============================================================================
# FastAPI Application — Entry Point
# =============================================================================
#
# Run locally:
#   uvicorn app.main:app --reload --port 4001
#
# STARTUP:
#   1. Configure logging (level from LOG_LEVEL)
#   2. Create the evaluation_results table if missing
#   3. Mount middleware: CORS → security headers → request logging →
#      unhandled-error envelope
#   4. Register routes and exception handlers
#
# SHUTDOWN:
#   Dispose of the database connection pool.
#
# DESIGN DECISION: create_all() on startup instead of a migration tool.
# The schema is a single append-only table; there is nothing to migrate
# yet.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.api.evaluation import ROUTES
from app.api.evaluation import router as evaluation_router
from app.api.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    UnhandledErrorMiddleware,
)
from app.config import settings
from app.db.engine import create_schema, dispose_engine

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    await create_schema()

    logger.info(
        "%s v%s started (environment=%s, prmtr=%s)",
        settings.app_name,
        settings.app_version,
        settings.environment,
        settings.prmtr_api_url,
    )
    yield

    logger.info("Shutting down, disposing database engine")
    await dispose_engine()


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # Last added is outermost: CORS → security headers → logging → errors
    app.add_middleware(UnhandledErrorMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(evaluation_router)
    register_exception_handlers(app)

    @app.get("/", tags=["Meta"], summary="Service banner")
    async def root() -> dict:
        return {
            "success": True,
            "message": "Prmtr Evaluation Agent API",
            "version": settings.app_version,
            "endpoints": ROUTES,
        }

    return app


app = create_app()
