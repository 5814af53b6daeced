"""
Structured logging configuration using structlog.

This module provides centralized logging configuration for the API and the
analysis pipeline. It supports both development (human-readable) and
production (JSON) formats.
"""

import logging
import sys
from typing import Any, Dict, Optional

import structlog
from structlog.types import Processor

from review_pulse.core.config import settings


SECRET_KEYS = frozenset({"auth_token", "token", "authorization", "api_token"})


def redact_secrets(_logger: Any, _method: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Mask API tokens that end up in log fields."""
    for key in SECRET_KEYS.intersection(event_dict):
        if event_dict[key]:
            event_dict[key] = "***"
    return event_dict


def configure_logging() -> None:
    """
    Configure structured logging for the API, the CLI script and the pipeline.

    Development environments get coloured console output; anything else gets
    one JSON object per line. Token-bearing fields are masked in both.
    """
    is_development = settings.APP_ENV.lower() in ("development", "dev", "local")

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    )

    processors: list[Processor] = [
        redact_secrets,
        structlog.processors.TimeStamper(fmt="ISO"),
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO,
            ]
        ),
    ]

    if is_development:
        processors.extend(
            [
                structlog.dev.set_exc_info,
                structlog.dev.ConsoleRenderer(colors=True),
            ]
        )
    else:
        processors.extend(
            [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def add_analysis_context(analysis_id: str, review_length: Optional[int] = None) -> Dict[str, Any]:
    """Add analysis-specific context to logs."""
    context: Dict[str, Any] = {"analysis_id": analysis_id}
    if review_length is not None:
        context["review_length"] = review_length
    return context


def add_endpoint_context(endpoint_index: Optional[int], endpoint_kind: str) -> Dict[str, Any]:
    """Add inference endpoint context to logs."""
    return {"endpoint_index": endpoint_index, "endpoint_kind": endpoint_kind}
