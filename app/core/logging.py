"""Structured logging with request IDs and data URI redaction.

Every log line carries the request_id of the HTTP request that produced it.
Inline asset payloads (base64 data URIs) are shortened before rendering so a
single image upload cannot flood the log stream.
"""

import contextvars
import logging
import sys
from typing import Any, Dict, List, Optional
from uuid import uuid4

import structlog

# Data URIs longer than this are cut down to a short prefix in log output
DATA_URI_LOG_LIMIT = 64
DATA_URI_LOG_PREFIX = 48

request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "request_id", default=None
)


def add_request_id(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """structlog processor copying the current request_id into the event."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def truncate_data_uris(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """
    structlog processor replacing long data URIs with a short summary

    The summary keeps the media type prefix and the original length, e.g.
    ``data:image/png;base64,AAAA...(5022 chars)``.
    """
    for key, value in event_dict.items():
        if (
            isinstance(value, str)
            and value.startswith("data:")
            and len(value) > DATA_URI_LOG_LIMIT
        ):
            event_dict[key] = f"{value[:DATA_URI_LOG_PREFIX]}...({len(value)} chars)"
    return event_dict


def _build_processors(log_format: str) -> List[Any]:
    processors: List[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_request_id,
        truncate_data_uris,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())
    return processors


def configure_logging(log_level: str = "INFO", log_format: str = "json") -> None:
    """
    Configure structlog on top of the stdlib logging module

    Args:
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: "json" for production, "console" for local development
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    structlog.configure(
        processors=_build_processors(log_format),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_id(request_id: Optional[str] = None) -> str:
    """
    Bind a request_id to the current context

    Args:
        request_id: ID received from the caller; a ``req_`` prefixed one is
            generated when omitted

    Returns:
        The request_id now in effect
    """
    if request_id is None:
        request_id = f"req_{uuid4().hex[:12]}"
    request_id_var.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_var.get()


def clear_request_id() -> None:
    request_id_var.set(None)
