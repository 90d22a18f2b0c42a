"""Structured logging configuration with structlog.

Environment variables:
- LOG_FORMAT: "json" for machine-readable build logs, "console" or unset for
  human-readable output.
- LOG_LEVEL: "DEBUG", "INFO" (default), "WARNING", "ERROR", or "CRITICAL".

Build hooks share stdout with the build tool, so records go to stderr.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

_VALID_LOG_FORMATS = {"json", "console", ""}
_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _resolve_json_mode() -> bool:
    value = os.environ.get("LOG_FORMAT", "").lower()
    if value not in _VALID_LOG_FORMATS:
        msg = f"Invalid LOG_FORMAT={value!r}. Must be 'json', 'console', or unset."
        raise ValueError(msg)
    return value == "json"


def _resolve_log_level() -> int:
    """Resolve log level from LOG_LEVEL env var. Defaults to INFO."""
    value = os.environ.get("LOG_LEVEL", "INFO").upper()
    if value not in _VALID_LOG_LEVELS:
        msg = f"Invalid LOG_LEVEL={value!r}. Must be one of {', '.join(sorted(_VALID_LOG_LEVELS))}."
        raise ValueError(msg)
    return getattr(logging, value)


def _build_stdlib_formatter(*, json_mode: bool, colors: bool = False) -> logging.Formatter:
    """Build a stdlib ProcessorFormatter for handler output."""
    if json_mode:
        return structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
        )
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
    )


def configure_structlog() -> None:
    """Route structlog events through stdlib logging.

    Rendering is left to the handler's ProcessorFormatter, so the same chain
    serves the stderr handler and pytest's caplog.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def setup_logging(level: int | None = None) -> None:
    """Configure structlog to render through a single stderr handler.

    Log level is resolved from the LOG_LEVEL env var (default: INFO).
    Repeated calls replace the previous handler.
    """
    json_mode = _resolve_json_mode()

    if level is None:
        level = _resolve_log_level()

    configure_structlog()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_build_stdlib_formatter(json_mode=json_mode, colors=sys.stderr.isatty()))
    root_logger.addHandler(handler)
