"""Logging setup shared by the console runner, the HTTP app and the scripts.

Usage:
    from timesaver.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Solve finished", extra={"status": "solved", "steps": 412})
"""
from __future__ import annotations

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Any, MutableMapping, Optional, Tuple

DEFAULT_FORMAT = "[%(asctime)s] [%(levelname)-8s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class KeyValueFormatter(logging.Formatter):
    """Appends the structured ``extra_info`` of a record as ``k=v`` pairs."""

    def __init__(self) -> None:
        super().__init__(fmt=DEFAULT_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extra_info = getattr(record, "extra_info", None)
        if extra_info:
            message += " | " + " | ".join(f"{k}={v}" for k, v in extra_info.items())
        return message


class StructuredLogger(logging.LoggerAdapter):
    def process(self, msg: str, kwargs: MutableMapping[str, Any]) -> Tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.get("extra", {})
        if extra:
            kwargs["extra"] = {"extra_info": extra}
        return msg, kwargs


def setup_logging(level: int | str = logging.INFO, log_file: Optional[Path] = None) -> None:
    """Configure the root logger with a console handler and an optional rotating file."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    # avoid duplicate handlers when called twice
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(KeyValueFormatter())
    root.addHandler(console)

    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(KeyValueFormatter())
        root.addHandler(file_handler)

    get_logger("timesaver.logging_config").debug(
        "Logging configured", extra={"level": logging.getLevelName(level), "log_file": log_file}
    )


def get_logger(name: str) -> StructuredLogger:
    return StructuredLogger(logging.getLogger(name), {})
