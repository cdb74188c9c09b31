"""Logfire cloud observability initialization and instrumentation."""

import logging

import logfire
from fastapi import FastAPI

from prophet import __version__
from prophet.config import Settings

logger = logging.getLogger(__name__)

_initialized = False


def initialize_logfire(settings: Settings) -> bool:
    """
    Initialize Logfire and instrument the libraries Prophet calls into.

    Must be called ONCE at startup, before the app serves requests or the
    arbitrator runs. Instruments:
    - PydanticAI agents (Arbitrator)
    - SQLAlchemy engine (bets, stakes, ledger queries)
    - Python logging (bridges to Logfire)

    Returns:
        True when Logfire is active.
    """
    global _initialized

    if _initialized:
        return True

    if not settings.logfire_token:
        logger.warning("Logfire token not set - observability disabled")
        return False

    try:
        logfire.configure(
            token=settings.logfire_token,
            service_name="prophet",
            service_version=__version__,
            environment=settings.environment,
        )

        logfire.instrument_pydantic_ai()

        # Imported here so the engine is built with the configured URL
        from prophet.database.session import _get_async_engine

        logfire.instrument_sqlalchemy(engine=_get_async_engine().sync_engine)

        root_logger = logging.getLogger()
        root_logger.addHandler(logfire.LogfireLoggingHandler())

        _initialized = True
        logger.info("Logfire cloud tracking initialized")
        return True

    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")
        # Continue running - observability is optional
        return False


def instrument_app(app: FastAPI) -> None:
    """Trace HTTP requests once Logfire is active."""
    if not _initialized:
        return
    try:
        logfire.instrument_fastapi(app)
    except Exception as e:
        logger.warning(f"FastAPI instrumentation skipped: {e}")
