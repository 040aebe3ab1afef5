# sportshub/core/logger.py
from __future__ import annotations

"""
SportsHub — Logging (Loguru)
----------------------------
Library modules log through `logging.getLogger(__name__)`; the worker calls
`configure_logging()` once and every stdlib record is re-emitted by Loguru
with a `component` field (the originating stdlib logger, e.g.
`sportshub.services.retention_sweep`).

Knobs live on `settings`: `LOG_LEVEL`, `LOG_JSON`, `LOG_FILE` (rotating file
sink when set), `LOG_ROTATION`, `APP_DEBUG`.
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger

from sportshub.core.config import settings

INTERCEPTED_LOGGERS = ("sportshub", "apscheduler", "botocore", "redis", "worker", "alembic")


def _fmt_pretty(record) -> str:
    component = str(record["extra"].get("component", record["name"])).replace("<", "[")
    return (
        f"<green>{record['time']:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
        f"<level>{record['level']:<8}</level> | "
        f"<cyan>{component}</cyan>:<cyan>{record['line']}</cyan> - "
        "<level>{message}</level>\n{exception}"
    )


def _fmt_json(record) -> str:
    payload: Dict[str, Any] = {
        "time": record["time"].strftime("%Y-%m-%dT%H:%M:%S.%f%z"),
        "level": record["level"].name,
        "component": record["extra"].get("component", record["name"]),
        "line": record["line"],
        "message": record["message"],
    }
    if record["exception"] is not None:
        payload["exception"] = repr(record["exception"].value)
    record["extra"]["serialized"] = json.dumps(payload, ensure_ascii=False, default=str)
    return "{extra[serialized]}\n"


class InterceptHandler(logging.Handler):
    """Route standard logging records into Loguru, tagged with their logger name."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.bind(component=record.name).opt(depth=6, exception=record.exc_info).log(
            level, record.getMessage()
        )


_configured = False


def configure_logging(*, level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """Install Loguru sinks and route stdlib loggers through them (idempotent)."""
    global _configured
    if _configured:
        return

    lvl = (level or settings.LOG_LEVEL).upper()
    fmt = _fmt_json if (settings.LOG_JSON if json_logs is None else json_logs) else _fmt_pretty

    logger.remove()
    logger.add(
        sys.stdout,
        level=lvl,
        format=fmt,
        enqueue=True,
        backtrace=settings.APP_DEBUG,
        diagnose=settings.APP_DEBUG,
    )
    if settings.LOG_FILE:
        path = Path(settings.LOG_FILE)
        path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(str(path), rotation=settings.LOG_ROTATION, level=lvl, format=fmt, enqueue=True)

    for name in INTERCEPTED_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.setLevel(lvl)
        std_logger.propagate = False
    if not settings.APP_DEBUG:
        logging.getLogger("botocore").setLevel(logging.WARNING)

    _configured = True


__all__ = ["configure_logging", "InterceptHandler", "logger"]
