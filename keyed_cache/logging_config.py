from __future__ import annotations

import logging
import sys

import structlog


def _stderr_logger(*args) -> structlog.PrintLogger:
    # resolve sys.stderr per call so redirected streams are honoured
    return structlog.PrintLogger(sys.stderr)


# Configure structlog for the CLI: level filter, timestamps, console or JSON output.
def configure_logging(level: str = "INFO", json_output: bool = False, verbose: bool = False) -> None:
    if verbose:
        level = "DEBUG"
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
