"""
Logging configuration.

All output goes through loguru. Records emitted by the standard library
``logging`` module (uvicorn, SQLAlchemy) are forwarded to loguru by
``InterceptHandler`` so the service writes a single stream.
"""

import json
import logging
import sys
from typing import Any, Dict, cast

from loguru import logger

from auction.core.config import settings

_STDLIB_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi", "sqlalchemy.engine.Engine")

HUMAN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message} | {extra}"


class InterceptHandler(logging.Handler):
    """
    Forward standard logging records to loguru, keeping the level name when
    loguru knows it.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: Any = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def _service_fields() -> Dict[str, str]:
    return {"service": settings.PROJECT_NAME, "environment": settings.ENVIRONMENT}


def serialize_record(record: Dict[str, Any]) -> str:
    """
    Render a loguru record as one JSON line.

    Bound context (``item_id``, ``bidder_id``, ``trace_id`` and so on) is
    flattened into the top level; keys starting with ``_`` are dropped.
    """
    try:
        line: Dict[str, Any] = {
            "timestamp": record["time"].isoformat(),
            "level": record["level"].name,
            "message": record["message"],
            **_service_fields(),
        }
        for source, target in (("name", "module"), ("function", "function"), ("line", "line")):
            if source in record:
                line[target] = record[source]

        extra = record.get("extra")
        if isinstance(extra, dict):
            line.update({key: value for key, value in extra.items() if not key.startswith("_")})

        if record.get("exception"):
            line["exception"] = str(record["exception"])

        return json.dumps(line)
    except Exception as e:
        when = record.get("time")
        return json.dumps(
            {
                "timestamp": when.isoformat() if hasattr(when, "isoformat") else str(when),
                "level": "ERROR",
                "message": f"Error serializing log: {e}",
                "original_message": str(record.get("message", "")),
                **_service_fields(),
            }
        )


def _json_sink(message: Any) -> None:
    print(serialize_record(cast(Dict[str, Any], message.record)), file=sys.stderr)


def configure_logging() -> None:
    """
    Configure loguru and route stdlib logging through it.
    """
    logger.remove()

    if settings.JSON_LOGS:
        logger.add(_json_sink, level=settings.LOG_LEVEL, backtrace=True, diagnose=False)
    else:
        logger.add(sys.stderr, level=settings.LOG_LEVEL, format=HUMAN_FORMAT, backtrace=True, diagnose=True)

    logging.getLogger().handlers = [InterceptHandler()]
    for name in _STDLIB_LOGGERS:
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False

    logger.bind(level=settings.LOG_LEVEL, json=settings.JSON_LOGS).info("Logging configured successfully.")
