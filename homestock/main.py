"""
Homestock — Application Entrypoint

Configures structlog, verifies the database, then serves the HTTP API and
runs the price fetch scheduler side by side.

Run via:
    python -m homestock.main
"""

from __future__ import annotations

import asyncio
import logging
import sys

import structlog
import uvicorn
from sqlalchemy import text

from homestock.api.dependencies import get_engine, get_session_factory
from homestock.api.main import app
from homestock.config import settings
from homestock.pipeline.scheduler import Scheduler


# ---------------------------------------------------------------------------
# Structlog Configuration
# ---------------------------------------------------------------------------


def _configure_logging(log_level: str = "INFO") -> None:
    """
    Set up structured logging with JSON output.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
    """
    level = getattr(logging, log_level.upper())

    # Configure stdlib logging first (for uvicorn and SQLAlchemy)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Application Startup
# ---------------------------------------------------------------------------


async def main() -> None:
    """
    Application entrypoint.

    Execution order:
    1. Configure logging (structlog JSON)
    2. Create async database engine and session factory
    3. Verify database connection (health check)
    4. Serve the API and, if enabled, run the scheduler until shutdown
    """
    _configure_logging(log_level=settings.LOG_LEVEL)
    logger = structlog.get_logger(__name__)

    logger.info("homestock_startup_begin", version="0.1.0")

    engine = get_engine()
    session_factory = get_session_factory()

    try:
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
        logger.info("database_health_check_passed")
    except Exception as e:
        logger.error(
            "database_health_check_failed",
            error=str(e),
            error_type=type(e).__name__,
        )
        await engine.dispose()
        raise

    server = uvicorn.Server(
        uvicorn.Config(
            app,
            host=settings.API_HOST,
            port=settings.API_PORT,
            log_config=None,
        )
    )

    scheduler: Scheduler | None = None
    scheduler_task: asyncio.Task[None] | None = None
    if settings.ENABLE_PRICE_SCHEDULER:
        scheduler = Scheduler(session_factory)
        scheduler_task = asyncio.create_task(scheduler.run())

    logger.info(
        "homestock_startup_complete",
        host=settings.API_HOST,
        port=settings.API_PORT,
        price_scheduler_enabled=settings.ENABLE_PRICE_SCHEDULER,
    )

    try:
        # uvicorn owns SIGINT/SIGTERM; serve() returns once it shuts down
        await server.serve()
    except Exception as e:
        logger.error(
            "homestock_fatal_error",
            error=str(e),
            error_type=type(e).__name__,
        )
        raise
    finally:
        if scheduler is not None and scheduler_task is not None:
            await scheduler.shutdown()
            await scheduler_task
        await engine.dispose()
        logger.info("homestock_shutdown_complete")


# ---------------------------------------------------------------------------
# CLI Entry
# ---------------------------------------------------------------------------


if __name__ == "__main__":
    asyncio.run(main())
