"""
Logging helpers for tiny-qce.

All package loggers live under the ``tiny_qce`` namespace, write to stderr
in the form ``[LEVEL] name: message`` and default to ``WARNING``.

Example
-------
>>> from tiny_qce.logging import get_logger, set_log_level
>>> logger = get_logger(__name__)
>>> set_log_level("DEBUG")
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

_loggers: dict[str, logging.Logger] = {}


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get or create a cached logger for a tiny-qce module.

    Parameters
    ----------
    name : str, optional
        Usually ``__name__`` of the calling module. Names outside the
        ``tiny_qce`` namespace are prefixed with ``tiny_qce.``.

    Returns
    -------
    logging.Logger
        Logger with a single stderr handler, not propagating to the root.
    """
    if name is None:
        name = "tiny_qce"
    if name != "tiny_qce" and not name.startswith("tiny_qce."):
        name = f"tiny_qce.{name}"

    if name in _loggers:
        return _loggers[name]

    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_DEFAULT_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    _loggers[name] = logger
    return logger


def set_log_level(level: int | str) -> None:
    """Set the level of every tiny-qce logger, existing and future."""
    global _DEFAULT_LEVEL
    level = _resolve_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: int | str = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[IO[str]] = None,
) -> None:
    """
    Replace the handlers of all tiny-qce loggers.

    Parameters
    ----------
    level : int or str
        Logging level, e.g. ``logging.DEBUG`` or ``"INFO"``.
    format_string : str, optional
        Record format. Defaults to ``[LEVEL] name: message``.
    stream : file-like, optional
        Output stream. Defaults to ``sys.stderr``.
    """
    global _DEFAULT_LEVEL
    level = _resolve_level(level)
    formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _DEFAULT_LEVEL = level
