"""Root logger setup for the board client.

Level precedence, highest first:
  1. ``BBOARD_LOG_LEVEL`` (level name or number)
  2. ``BBOARD_DEBUG`` truthy -> DEBUG
  3. the persisted ``debug_logging`` client setting
  4. INFO
"""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LEVEL_ENV = "BBOARD_LOG_LEVEL"
DEBUG_ENV = "BBOARD_DEBUG"
# Third-party loggers that only matter when debugging the wire.
_CHATTY_LOGGERS = ("urllib3",)


def _parse_level(text: Optional[str]) -> Optional[int]:
    text = (text or "").strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        pass
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else None


def env_level(environ: Optional[Mapping[str, str]] = None) -> Optional[int]:
    """Level forced by the environment, or ``None`` when it is silent."""
    env = os.environ if environ is None else environ
    level = _parse_level(env.get(LEVEL_ENV))
    if level is not None:
        return level
    if (env.get(DEBUG_ENV) or "").strip().lower() in {"1", "true", "yes", "on"}:
        return logging.DEBUG
    return None


def resolve_level(debug_logging: bool = False, environ: Optional[Mapping[str, str]] = None) -> int:
    level = env_level(environ)
    if level is not None:
        return level
    return logging.DEBUG if debug_logging else logging.INFO


def configure_root(debug_logging: bool = False, environ: Optional[Mapping[str, str]] = None) -> int:
    """Install the compact handler once and apply the resolved level.

    Safe to call again after settings load; only levels change on later calls.

    Returns:
        The effective root level.
    """
    level = resolve_level(debug_logging, environ)
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    root.setLevel(level)
    for name in _CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
    return level


__all__ = ["configure_root", "env_level", "resolve_level"]
