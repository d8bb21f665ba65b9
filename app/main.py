from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI

from app.config import get_app_settings
from app.schemas.summary_jobs import HealthResponse


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = get_app_settings().log_level
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _verify_database() -> None:
    """
    Connect to the job store and confirm every mapped table exists.

    Raises RuntimeError when the database is unreachable or a migration is
    missing. Tables are never created here.
    """
    from sqlalchemy import inspect, text

    import db.models  # noqa: F401 (registers all ORM models on Base.metadata)
    from db.base import Base
    from db.session import get_engine

    logger = logging.getLogger(__name__)
    try:
        with get_engine().connect() as connection:
            connection.execute(text("SELECT 1"))
            existing = set(inspect(connection).get_table_names())
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc
    logger.info("Database connectivity confirmed")

    missing = sorted(set(Base.metadata.tables) - existing)
    if missing:
        logger.critical("Missing tables %s; run 'alembic upgrade head'", ", ".join(missing))
        raise RuntimeError(f"Database schema is missing table(s): {', '.join(missing)}.")
    logger.info("Database schema validated")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Refuse to serve traffic until the job store is reachable and migrated."""
    _verify_database()
    yield


def create_app(*, check_database: bool = True) -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    application = FastAPI(
        title="CSV Summary API",
        version="1.0.0",
        lifespan=_lifespan if check_database else None,
    )

    from app.api.routers import summary_jobs_router

    application.include_router(summary_jobs_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(
            timestamp=datetime.now(timezone.utc),
            environment=get_app_settings().environment,
        )

    return application


app = create_app()
