"""Logging and observability configuration using Pydantic Logfire.

Modules log through the standard library (``logging.getLogger(__name__)``)
with structured ``extra={...}`` fields; Logfire ships them when
``LOGFIRE_TOKEN`` is set and stays local otherwise.

Service operations are wrapped in spans:
    with span("completion_service.create", task_id=task_id):
        ...
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings


logger = logging.getLogger(__name__)

# Liveness probes would otherwise dominate the request traces
_UNTRACED_URLS = "/health.*"


def configure_logfire() -> None:
    """Configure Logfire for the payskill service."""
    logfire.configure(
        token=settings.logfire_token,
        service_name="payskill",
        service_version="0.1.0",
        send_to_logfire="if-token-present",
    )
    logger.info("Logfire configured", extra={"remote": bool(settings.logfire_token)})


def instrument_fastapi(app: FastAPI) -> None:
    """Trace every request except the health endpoints."""
    logfire.instrument_fastapi(app, excluded_urls=_UNTRACED_URLS)
    logger.info("FastAPI instrumentation configured")


def span(name: str, **attributes: object) -> logfire.LogfireSpan:
    """Open a Logfire span named after the service operation."""
    return logfire.span(name, **attributes)
