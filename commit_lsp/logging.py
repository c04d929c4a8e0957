"""Structured JSON logging for commit-lsp.

stdout carries the LSP stream, so records go to stderr or, when configured,
to a rotating log file (1MB, 2 backups).
"""

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

_MAX_BYTES = 1024 * 1024
_BACKUP_COUNT = 2


class _JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "stage"):
            entry["stage"] = record.stage
        if hasattr(record, "tracker"):
            entry["tracker"] = record.tracker
        if hasattr(record, "error"):
            entry["error"] = record.error
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> logging.Logger:
    """Attach a JSON handler to the ``commit_lsp`` logger.

    Calling this again replaces the previous handler, so the CLI can switch
    targets without duplicating output.
    """
    logger = logging.getLogger("commit_lsp")
    for h in logger.handlers[:]:
        logger.removeHandler(h)
        h.close()

    handler: logging.Handler
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(str(log_file), maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    return logger
