# medialytics/core/logger.py
from __future__ import annotations

"""
Medialytics: Logging (Loguru)
------------------------------
`configure_logging(cfg)` owns every loguru sink this service writes to. It is
called by `create_app` and may be called again with other settings; each call
replaces the sinks installed by the previous one and leaves foreign sinks
(e.g. a test's list sink) alone.

Settings
--------
LOG_LEVEL     minimum level for all sinks and bridged stdlib loggers
LOG_JSON      one JSON object per line (loguru `serialize`) instead of colors
LOG_TO_FILE   add a rotating file sink at `LOG_DIR/LOG_FILE`
LOG_ROTATION  loguru rotation spec for the file sink, e.g. "10 MB"

Every record carries `extra.request_id` ("-" outside a request);
`RequestIDMiddleware` binds the real value with `logger.contextualize`.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from medialytics.core.config import Settings, settings

# stdlib loggers routed into loguru
BRIDGED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "sqlalchemy.engine",
    "slowapi",
)

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "rid={extra[request_id]} - <level>{message}</level>"
)
PLAIN_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{line} | rid={extra[request_id]} - {message}"

_installed: List[int] = []
_default_removed = False


class StdlibBridge(logging.Handler):
    """Re-emit a stdlib `LogRecord` through loguru at the caller's frame."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        logger.opt(depth=6, exception=record.exc_info).log(level, record.getMessage())


def _bridge_stdlib(level: str) -> None:
    for name in BRIDGED_LOGGERS:
        std = logging.getLogger(name)
        std.handlers = [StdlibBridge()]
        std.setLevel(level)
        std.propagate = False


def configure_logging(cfg: Optional[Settings] = None) -> List[int]:
    """Install console (and optional file) sinks for `cfg`; returns their ids."""
    global _default_removed
    cfg = cfg or settings

    if not _default_removed:
        # loguru ships a stderr sink with id 0
        logger.remove()
        _default_removed = True
    for handler_id in _installed:
        logger.remove(handler_id)
    _installed.clear()

    logger.configure(extra={"request_id": "-"})

    if cfg.LOG_JSON:
        _installed.append(logger.add(sys.stdout, level=cfg.LOG_LEVEL, format="{message}", serialize=True))
    else:
        debug = cfg.ENV == "development"
        _installed.append(
            logger.add(sys.stdout, level=cfg.LOG_LEVEL, format=CONSOLE_FORMAT, backtrace=debug, diagnose=debug)
        )

    if cfg.LOG_TO_FILE:
        log_dir = Path(cfg.LOG_DIR)
        log_dir.mkdir(parents=True, exist_ok=True)
        _installed.append(
            logger.add(
                str(log_dir / cfg.LOG_FILE),
                level=cfg.LOG_LEVEL,
                format="{message}" if cfg.LOG_JSON else PLAIN_FORMAT,
                serialize=cfg.LOG_JSON,
                rotation=cfg.LOG_ROTATION,
                enqueue=True,
                backtrace=False,
                diagnose=False,
            )
        )

    _bridge_stdlib(cfg.LOG_LEVEL)
    return list(_installed)


__all__ = ["configure_logging", "StdlibBridge", "BRIDGED_LOGGERS"]
