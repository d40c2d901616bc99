"""Application factory helpers to keep app/main.py lightweight."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.api.router import api_router
from app.core.config import settings
from app.core.database import get_db
from app.core.error_handlers import register_exception_handlers
from app.core.logging_config import setup_logging
from app.core.middleware import LoggingMiddleware, limiter

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def _configure_app(app: FastAPI) -> None:
    # Outermost so every response, errors included, gets X-Request-ID.
    app.add_middleware(LoggingMiddleware)

    origins = settings.cors_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.include_router(api_router, prefix=API_PREFIX)


def _register_routes(app: FastAPI) -> None:
    @app.get("/health", tags=["Health"])
    def health():
        return {
            "status": "ok",
            "service": settings.app_name,
            "environment": settings.environment,
        }

    @app.get("/readyz", tags=["Health"])
    def readyz(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            logger.error(f"Readiness check failed (Database): {exc}")
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail="Database unavailable",
            )
        return {"status": "ready", "details": {"database": "connected"}}


def _lifespan_factory():
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application startup complete")
        yield
        logger.info("Application shutdown")

    return lifespan


def create_app() -> FastAPI:
    """
    Application Factory to create and configure the FastAPI application.
    Integrates Logging, Error Handling, Rate Limiting, and Middleware.
    """
    setup_logging(
        log_level=settings.log_level,
        log_dir=settings.log_dir,
        app_name=settings.app_name,
        max_bytes=10 * 1024 * 1024,  # 10 MB
        backup_count=5,
        use_json=settings.use_json_logs,
        use_colors=settings.environment.lower() != "production",
    )

    app = FastAPI(
        title="minisocial",
        description="REST API for a minimal social network: posts, follows, likes and comments",
        version="1.0.0",
        lifespan=_lifespan_factory(),
        default_response_class=ORJSONResponse,
    )

    app.state.environment = settings.environment
    # slowapi reads the limiter from app state when a decorated route runs.
    app.state.limiter = limiter

    _configure_app(app)
    _register_routes(app)
    register_exception_handlers(app)

    return app


__all__ = ["create_app", "API_PREFIX"]
