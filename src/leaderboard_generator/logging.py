"""Logging setup for the leaderboard generator.

The CLI calls :func:`configure_logging` once per invocation; library modules
only ever create module loggers with ``logging.getLogger(__name__)``.

Functions
---------
* :func:`configure_logging` - install one stderr handler (and optionally a
  log file) on the root logger.
* :func:`get_logging_config` - report the active level, log file and format.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_FORMAT = "%(asctime)s %(name)-32s %(levelname)-8s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# LogRecord attributes that are not user supplied ``extra`` fields
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line.

    Fields passed through ``extra=`` (for example ``leaderboard_id``) are
    included next to the standard time, logger, level and message keys.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "name": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in _RESERVED and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _formatter(fmt: Optional[str], structured: bool) -> logging.Formatter:
    if structured:
        return JsonFormatter(datefmt=DATE_FORMAT)
    return logging.Formatter(fmt or DEFAULT_FORMAT, datefmt=DATE_FORMAT)


def configure_logging(
    level: str = "INFO",
    fmt: Optional[str] = None,
    file: Optional[str] = None,
    structured: bool = False,
) -> None:
    """Replace the root logger's handlers.

    Parameters
    ----------
    level : str, default="INFO"
        Level name; unknown names fall back to ``INFO``.
    fmt : str, optional
        ``logging.Formatter`` format string. Ignored when ``structured``.
    file : str, optional
        Also append log lines to this file, creating parent directories.
    structured : bool, default=False
        Emit JSON lines via :class:`JsonFormatter`.
    """
    lvl = logging.getLevelName(str(level).upper())
    if not isinstance(lvl, int):
        lvl = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    handlers: list = [logging.StreamHandler()]
    if file:
        path = Path(file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(_formatter(fmt, structured))
        handler.setLevel(lvl)
        root.addHandler(handler)
    root.setLevel(lvl)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(lvl, logging.WARNING))


def get_logging_config() -> Dict[str, Any]:
    """Return ``{"level", "file", "structured"}`` for the root logger."""
    root = logging.getLogger()
    file_path = None
    structured = False
    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler):
            file_path = handler.baseFilename
        if isinstance(handler.formatter, JsonFormatter):
            structured = True
    return {"level": logging.getLevelName(root.level), "file": file_path, "structured": structured}


__all__ = ["configure_logging", "get_logging_config", "JsonFormatter"]
