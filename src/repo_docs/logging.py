"""Structured JSON logging shared by every repo_docs module.

Records go to stderr until the CLI receives `--log-file`, at which point the
stdlib root handler is swapped for a file handler. The structlog pipeline itself
is configured only once per process.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAME = "repo_docs"

_STRUCTLOG_CONFIGURED = False


def _route_records(filename: str | Path | None) -> None:
    handler: logging.Handler
    if filename:
        handler = logging.FileHandler(str(filename), encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    # force=True closes and replaces the handler of a previous call
    logging.basicConfig(level=logging.INFO, handlers=[handler], format="%(message)s", force=True)


def setup_logging(filename: str | Path | None = None) -> structlog.BoundLogger:
    """Set up structured logging for repo_docs.

    The first call configures structlog and sends records to stderr. Calling it
    again with a `filename` (the CLI does so for `--log-file`) redirects every
    logger, including the module-level `logger` already imported elsewhere, to
    that file. A later call without a filename keeps the current destination.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.

    Returns:
        A structlog logger named `repo_docs`.
    """
    global _STRUCTLOG_CONFIGURED  # noqa: PLW0603
    if filename or not _STRUCTLOG_CONFIGURED:
        _route_records(filename)
    if not _STRUCTLOG_CONFIGURED:
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _STRUCTLOG_CONFIGURED = True

    return structlog.get_logger(LOGGER_NAME)


logger = setup_logging()
