"""Logging helpers for the quality gate package."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

LOGGER_NAME = "quality_gate"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"

_LEVEL_ALIASES = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "NOTSET": logging.NOTSET,
}


def resolve_level(level: Optional[str | int], default: int = logging.INFO) -> int:
    """Map a level name or number onto a ``logging`` level, falling back to ``default``."""

    if level is None:
        return default

    if isinstance(level, int):
        return level

    normalized = level.strip().upper()
    if normalized.isdigit():
        return int(normalized)
    return _LEVEL_ALIASES.get(normalized, default)


def _find_stream_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, logging.FileHandler
        ):
            return handler
    return None


def _find_file_handler(logger: logging.Logger, log_path: Path) -> logging.Handler | None:
    for handler in logger.handlers:
        if (
            isinstance(handler, logging.FileHandler)
            and Path(handler.baseFilename).resolve() == log_path
        ):
            return handler
    return None


def configure_logging(
    level: Optional[str | int] = None,
    *,
    log_file: Optional[str | Path] = None,
    file_level: Optional[str | int] = None,
    verbose: bool = False,
) -> logging.Logger:
    """Configure and return the package logger.

    Parameters
    ----------
    level:
        Console level. Defaults to ``INFO`` (``DEBUG`` when ``verbose``).
    log_file:
        Optional file receiving the full step transcript. Parent directories
        are created on demand.
    file_level:
        Level for the file handler; ``DEBUG`` when omitted.
    verbose:
        Lowers the default console level so raw command output is shown.

    Calling this repeatedly reuses the existing handlers instead of stacking
    new ones.
    """

    logger = logging.getLogger(LOGGER_NAME)
    formatter = logging.Formatter(fmt=LOG_FORMAT)

    stream_level = resolve_level(level, logging.DEBUG if verbose else logging.INFO)
    stream_handler = _find_stream_handler(logger)
    if stream_handler is None:
        stream_handler = logging.StreamHandler()
        logger.addHandler(stream_handler)
    stream_handler.setLevel(stream_level)
    stream_handler.setFormatter(formatter)

    effective_level = stream_level
    if log_file is not None:
        log_path = Path(log_file).expanduser().resolve()
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = _find_file_handler(logger, log_path)
        if file_handler is None:
            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            logger.addHandler(file_handler)

        resolved_file_level = resolve_level(file_level, logging.DEBUG)
        file_handler.setLevel(resolved_file_level)
        file_handler.setFormatter(formatter)
        effective_level = min(stream_level, resolved_file_level)

    logger.setLevel(effective_level)
    logger.propagate = False
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a child logger under the package root."""

    if name:
        return logging.getLogger(f"{LOGGER_NAME}.{name}")
    return logging.getLogger(LOGGER_NAME)


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    /,
    **fields: Any,
) -> None:
    """Emit a structured log entry encoded as JSON."""

    payload = {"event": event, **fields}
    try:
        message = json.dumps(payload, default=str, sort_keys=True)
    except (TypeError, ValueError):
        message = json.dumps({"event": event}, sort_keys=True)
    logger.log(level, message)
