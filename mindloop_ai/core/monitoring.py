"""
Monitoring and Tracing Configuration Module.

Integration with Pydantic Logfire for the think-cycle loop:

- cycle start / completion events with durations
- error tracking with context
- optional Pydantic AI, SQLAlchemy, HTTPX and FastAPI instrumentation

Everything here is best-effort: a monitoring failure is logged at DEBUG and
never propagates into the cycle.
"""

import logging
import os
from typing import Any, Dict, Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)

LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "mindloop-ai")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.0.0")

LOGFIRE_TRACE_PYDANTIC_AI = os.getenv("LOGFIRE_TRACE_PYDANTIC_AI", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_SQLALCHEMY = os.getenv("LOGFIRE_TRACE_SQLALCHEMY", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")

_initialized = False


def initialize_logfire(app: Optional[FastAPI] = None) -> bool:
    """
    Configure Logfire when ``LOGFIRE_ENABLED`` is set.

    Args:
        app: FastAPI application to instrument (optional).

    Returns:
        True when Logfire was configured.
    """
    global _initialized
    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False
    if not LOGFIRE_TOKEN:
        logger.warning("Logfire is enabled but LOGFIRE_TOKEN is not set. Monitoring will not work.")
        return False

    try:
        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False

    instrumentations = (
        (LOGFIRE_TRACE_PYDANTIC_AI, "Pydantic AI", logfire.instrument_pydantic_ai),
        (LOGFIRE_TRACE_SQLALCHEMY, "SQLAlchemy", logfire.instrument_sqlalchemy),
        (LOGFIRE_TRACE_HTTPX, "HTTPX", logfire.instrument_httpx),
    )
    for enabled, label, instrument in instrumentations:
        if not enabled:
            continue
        try:
            instrument()
            logger.info(f"Logfire: {label} instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument {label}: {e}")

    if LOGFIRE_TRACE_FASTAPI and app is not None:
        try:
            logfire.instrument_fastapi(app=app)
            logger.info("Logfire: FastAPI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")

    _initialized = True
    logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")
    return True


def log_cycle_started(context_id: str, engine: str) -> None:
    """
    Log the start of a think-cycle.

    Args:
        context_id: The active context identifier
        engine: The engine registry key used for generation
    """
    if not _initialized:
        return
    try:
        logfire.info("Think cycle started", context_id=context_id, engine=engine)
    except Exception:
        logger.debug(f"Could not log cycle start to Logfire: context_id={context_id}")


def log_cycle_completed(context_id: str, role: str, duration_ms: float, commands: int = 0) -> None:
    """
    Log the completion of a think-cycle.

    Args:
        context_id: The active context identifier
        role: Role of the message the cycle persisted
        duration_ms: Cycle duration in milliseconds
        commands: Number of commands executed
    """
    if not _initialized:
        return
    try:
        logfire.info(
            "Think cycle completed",
            context_id=context_id,
            role=role,
            duration_ms=duration_ms,
            commands=commands,
        )
    except Exception:
        logger.debug(f"Could not log cycle completion to Logfire: context_id={context_id}")


def log_error(error_type: str, error_message: str, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    if not _initialized:
        return
    try:
        logfire.error(f"{error_type}: {error_message}", **(context or {}))
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")
