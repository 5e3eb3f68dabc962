"""Structured JSON logging for navigation and completion.

Writes JSON-lines to disk so an interactive front end can be debugged
after the fact. Each log entry is a single JSON object on one line.
Nothing is written until ``configure_logging`` attaches a handler.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

_logger = logging.getLogger("kvnav")


def configure_logging(
    log_dir: str | Path, level: int = logging.DEBUG
) -> None:
    """Set up kvnav logging to write JSON-lines to a file.

    Args:
        log_dir: Directory to write ``kvnav.log`` into.
        level: Logging level (default: DEBUG).
    """
    log_path = Path(log_dir) / "kvnav.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(str(log_path))
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    _logger.addHandler(handler)
    _logger.setLevel(level)


def _log(event: dict[str, Any], level: int = logging.INFO) -> None:
    if _logger.isEnabledFor(level):
        _logger.log(level, json.dumps(event, default=str))


def log_resolve(path: str, kind: str, error: str | None = None) -> None:
    _log(
        {"event": "resolve", "path": path, "kind": kind, "error": error},
        logging.DEBUG,
    )


def log_completion(text: str, base: str, partial: str, count: int) -> None:
    _log(
        {
            "event": "completion",
            "input": text,
            "base": base,
            "partial": partial,
            "count": count,
        },
        logging.DEBUG,
    )


def log_probe_fallback(text: str, reason: str) -> None:
    _log(
        {"event": "probe_fallback", "input": text, "reason": reason},
        logging.DEBUG,
    )


def log_registry_load(engine: str, count: int, categories: int) -> None:
    _log({
        "event": "registry_load",
        "engine": engine,
        "functions": count,
        "categories": categories,
    })


def log_registry_supplement(added: int, skipped: int) -> None:
    _log({"event": "registry_supplement", "added": added, "skipped": skipped})


def log_engine_swap(old: str, new: str) -> None:
    _log({"event": "engine_swap", "from": old, "to": new})


def log_error(operation: str, error: str) -> None:
    _log({"event": "error", "operation": operation, "error": error}, logging.ERROR)
