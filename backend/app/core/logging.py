"""Structured logging baseline and event taxonomy.

Event taxonomy (minimum set)::

    app_start              - application process starting
    config_loaded          - settings resolved successfully
    upstream_request       - outbound GET issued to the upstream API
    upstream_response      - upstream replied (any status)
    upstream_call_failure  - upstream call wrapped into a DomainError
    domain_error           - DomainError reached the request boundary
    status_code_unmapped   - DomainError status could not be mapped, 500 used
    request_rejected       - local request error (bad method, bad parameter)
    unexpected_error       - unclassified error (with traceback)

Rules:
    - Never log secrets.
    - Log upstream body *lengths*, not raw content, unless body logging
      is explicitly enabled.

Usage::

    from backend.app.core.logging import log_event
    log_event(logger, "info", "upstream_request",
              method="GET", url="https://example.test/posts")
"""

import logging
import sys

# Canonical event names for grep-ability and observability.
EVENT_APP_START = "app_start"
EVENT_CONFIG_LOADED = "config_loaded"
EVENT_UPSTREAM_REQUEST = "upstream_request"
EVENT_UPSTREAM_RESPONSE = "upstream_response"
EVENT_UPSTREAM_CALL_FAILURE = "upstream_call_failure"
EVENT_DOMAIN_ERROR = "domain_error"
EVENT_STATUS_CODE_UNMAPPED = "status_code_unmapped"
EVENT_REQUEST_REJECTED = "request_rejected"
EVENT_UNEXPECTED_ERROR = "unexpected_error"


_HANDLER_ATTR = "_posts_gateway"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logger with a simple structured format.

    Safe to call multiple times - only adds the handler once.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in root.handlers:
        if getattr(h, _HANDLER_ATTR, False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def log_event(
    logger: logging.Logger,
    level: str,
    event_name: str,
    **kwargs: object,
) -> None:
    """Emit a structured log line with consistent ``event_name: key=value`` format.

    Parameters
    ----------
    logger:
        The logger instance (provides the component via ``logger.name``).
    level:
        Log level name - ``"info"``, ``"warning"``, ``"error"``, or ``"exception"``.
        ``"exception"`` attaches the active traceback, so it must be called
        from inside an ``except`` block or with ``exc_info`` supplied.
    event_name:
        Canonical event name (e.g. ``"domain_error"``).
    **kwargs:
        Arbitrary key-value pairs appended as ``key=value``. The special key
        ``exc_info`` is forwarded to the logger instead of being rendered.
    """
    exc_info = kwargs.pop("exc_info", None)
    parts = " ".join(f"{k}={v}" for k, v in kwargs.items())
    message = f"{event_name}: {parts}" if parts else event_name
    log_fn = getattr(logger, level, logger.info)
    if exc_info is not None:
        log_fn(message, exc_info=exc_info)
    else:
        log_fn(message)
