"""
Logging
"""

# pyright: basic

import logging

from asgi_correlation_id.context import correlation_id
from loguru import logger

from codeheal.core.config import settings
from codeheal.schema.log_entry import LogEntry

__all__ = (
    "log_serializer",
    "logger",
    "sink",
)


class InterceptHandler(logging.Handler):
    def emit(self, record):
        # Get corresponding Loguru level
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller to get correct stack depth
        frame, depth = logging.currentframe(), 2
        while frame.f_back and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def log_serializer(record) -> str:
    """
    Custom log serializer for loguru.

    The correlation id carries the healing session id, so interleaved
    lines from concurrent sessions stay attributable.
    """

    cid = correlation_id.get() or ""
    message = record["message"]
    if len(message) > settings.LOG_MESSAGE_MAX_LEN:
        message = message[: settings.LOG_MESSAGE_MAX_LEN - 3] + "..."

    log_entry = LogEntry(
        asctime=record["time"],
        levelname=record["level"].name,
        message=f"{cid} - {record['name']} - {message}",
    )

    return log_entry.model_dump_json()


def sink(message) -> None:
    """
    Custom sink for loguru
    """
    print(log_serializer(message.record))


logger.remove()

logger.add(
    sink,
    level="DEBUG" if settings.DEBUG else "INFO",
)


logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO)
