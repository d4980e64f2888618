"""Structured logging configuration using structlog."""

import logging
import sys

import structlog

# Event keys whose values must never reach a log sink.
REDACTED_KEYS = frozenset({"signature", "svix_signature", "webhook_secret", "secret"})

NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpx")


def redact_secrets(logger, method_name: str, event_dict: dict) -> dict:
    """Mask signing material that callers pass as log context."""
    for key in REDACTED_KEYS.intersection(event_dict):
        event_dict[key] = "***"
    return event_dict


def configure_logging(log_level: str = "info", json_output: bool = False) -> None:
    """Route stdlib and structlog records through one structlog formatter.

    Args:
        log_level: Logging level string (debug/info/warning/error).
        json_output: JSON lines for production, colored console for local runs.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
    ]

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            # stdlib records carry their context in `extra=`; lift it before redaction
            foreign_pre_chain=[structlog.stdlib.ExtraAdder(), *shared_processors],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def bind_request_context(trace_id: str, delivery_id: str | None = None) -> None:
    """Bind the trace id (and provider delivery id, when known) to the current context."""
    ctx = {"trace_id": trace_id}
    if delivery_id:
        ctx["delivery_id"] = delivery_id
    structlog.contextvars.bind_contextvars(**ctx)


def bind_event_type(event_type: str) -> None:
    structlog.contextvars.bind_contextvars(event_type=event_type)


def clear_request_context() -> None:
    """Clear bound context variables after a request."""
    structlog.contextvars.clear_contextvars()
