"""
functions/utils/logging_config.py

Process-wide structlog setup.

Every log line is a single JSON object on stdout carrying:
- level, timestamp (ISO, UTC), logger name
- the event name (snake_case identifier) and its key/value context
- any context vars bound for the current request (e.g. correlation_id)

configure_logging() is idempotent and is called once from create_app().
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_logging(log_level: str = "INFO") -> None:
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    # stdlib handlers (uvicorn, httpx) share stdout and the same level
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )
