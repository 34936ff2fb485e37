"""
Logging helpers.

Nothing here touches process-wide state: a debug session is a dedicated
logger with its own file handler, which callers inject into the client.
"""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from contextlib import contextmanager
from datetime import datetime
from enum import Enum
from typing import Any, Iterator, Optional

__all__ = ["log_json", "open_debug_log", "DEBUG_LOG_FORMAT"]

DEBUG_LOG_FORMAT = "[%(asctime)s.%(msecs)03d] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def log_json(logger: logging.Logger, prefix: str, data: Any) -> None:
    """Log ``data`` as indented JSON at DEBUG level."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    try:
        rendered = json.dumps(_jsonable(data), indent=2, default=str)
    except (TypeError, ValueError) as exc:
        logger.debug("%s: failed to marshal JSON: %s", prefix, exc)
        return
    logger.debug("=== %s ===\n%s", prefix, rendered)


@contextmanager
def open_debug_log(
    directory: str = "logs",
    *,
    name: str = "llm_toolchat.debug",
    session_id: Optional[str] = None,
) -> Iterator[logging.Logger]:
    """
    Open a per-session debug log file and yield a logger writing to it.

    The file is ``<directory>/toolchat-debug-<session_id>.log`` where the
    session id defaults to the current ``YYYYmmdd-HHMMSS`` timestamp.
    Session start and end markers frame the entries. The logger does not
    propagate to the root logger.
    """
    os.makedirs(directory, exist_ok=True)
    session_id = session_id or datetime.now().strftime("%Y%m%d-%H%M%S")
    path = os.path.join(directory, f"toolchat-debug-{session_id}.log")

    logger = logging.getLogger(f"{name}.{session_id}")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter(DEBUG_LOG_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)

    started = datetime.now().strftime(_DATE_FORMAT)
    handler.stream.write(f"=== Session Started: {started} ===\n\n")
    try:
        yield logger
    finally:
        ended = datetime.now().strftime(_DATE_FORMAT)
        handler.stream.write(f"\n=== Session Ended: {ended} ===\n")
        logger.removeHandler(handler)
        handler.close()
