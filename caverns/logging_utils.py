"""caverns.logging_utils
========================

Logging helpers: a logger factory shared by every module, one-shot console
configuration for the CLI, and a JSONL audit log of runs that found no answer
(unreachable targets, maps where no boost keeps every elf alive).
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Mapping, Optional

from .constants import FAIL_LOG

LOG_FORMAT = "[%(asctime)s] - [%(name)s] - [%(levelname)s] - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str) -> logging.Logger:
    """Return the logger for ``name``; modules call this with ``__name__``."""

    return logging.getLogger(name)


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Attach a console handler to the package logger (idempotent)."""

    logger = logging.getLogger("caverns")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    return logger


def log_unsolved(run_id: str, payload: Mapping[str, Any], path: Optional[str] = None) -> None:
    """Append a JSON line describing an unsolved run to :data:`FAIL_LOG`."""

    entry = {"run_id": run_id}
    entry.update(payload)
    with Path(path or FAIL_LOG).open("a") as handle:
        handle.write(json.dumps(entry, sort_keys=True) + "\n")


__all__ = ["get_logger", "configure_logging", "log_unsolved", "LOG_FORMAT"]
