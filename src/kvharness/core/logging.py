# src/kvharness/core/logging.py
"""Structured logging for kvharness.

structlog is routed through stdlib logging with ProcessorFormatter, so the
Azure SDK's stdlib loggers and the harness's structlog loggers end up in one
stream with one format (console or JSON).

Two harness-specific pieces sit in the shared processor chain:
- every string value has its vault host replaced by REDACTED, the same
  redaction recordings get, so CI logs of a live run never name the vault
- the running test and mode, bound with bind_test_context(), are merged
  into every event through structlog's contextvars
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import ProcessorFormatter

from kvharness.core.redaction import redact_text

# Loggers pinned to WARNING or above whatever the root level. The Azure SDK
# logs every request and response at DEBUG.
_NOISY_LOGGERS: tuple[str, ...] = (
    "azure",
    "azure.core.pipeline.policies.http_logging_policy",
    "azure.identity",
    "azure.keyvault",
    "urllib3",
)


def _redact_vault_hosts(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace vault host labels in string values (event text included)."""
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = redact_text(value)
    return event_dict


def _drop_formatter_fields(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    # ProcessorFormatter always adds both keys; a KeyError means the wiring broke
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def _shared_processors() -> list[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        _redact_vault_hosts,
        structlog.processors.StackInfoRenderer(),
    ]


def configure_logging(*, json_output: bool = False, level: str = "INFO") -> None:
    """Configure structlog and stdlib logging for a harness run.

    Args:
        json_output: Emit one JSON object per line instead of console output
        level: Root log level name (DEBUG, INFO, WARNING, ERROR)
    """
    log_level = getattr(logging, level.upper())
    shared = _shared_processors()

    renderer: list[Any]
    if json_output:
        renderer = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    structlog.configure(
        processors=[*shared, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests call configure_logging repeatedly; cached loggers would keep the old chain
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ProcessorFormatter(processors=[_drop_formatter_fields, *renderer], foreign_pre_chain=shared))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))


def bind_test_context(test_name: str, mode: str) -> None:
    """Attach test_name and mode to every event logged until cleared."""
    structlog.contextvars.bind_contextvars(test_name=test_name, mode=mode)


def clear_test_context() -> None:
    structlog.contextvars.unbind_contextvars("test_name", "mode")


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Bound structlog logger for a module (pass __name__)."""
    logger: structlog.stdlib.BoundLogger = structlog.get_logger(name)
    return logger
