"""Runtime configuration and logging setup.

Settings are read from ``LOTUS_*`` environment variables so that an
application can be tuned (or put into dev mode) without code changes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

DEFAULT_CACHE_SIZE = 4096

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class RuntimeConfig:
    """Options for a mounted application."""

    dev: bool = False
    state_path: str = ""
    log_file: str = ""
    log_level: str = "info"
    cache_size: int = DEFAULT_CACHE_SIZE
    alt_screen: bool = True

    @classmethod
    def from_env(cls) -> RuntimeConfig:
        return cls(
            dev=_env_flag("LOTUS_DEV"),
            state_path=os.environ.get("LOTUS_STATE_PATH", ""),
            log_file=os.environ.get("LOTUS_LOG_FILE", ""),
            log_level=os.environ.get("LOTUS_LOG_LEVEL", "info"),
            cache_size=_env_int("LOTUS_CACHE_SIZE", DEFAULT_CACHE_SIZE),
            alt_screen=_env_flag("LOTUS_ALT_SCREEN", True),
        )


def configure_logging(config: RuntimeConfig) -> logging.Handler | None:
    """Route ``lotus`` log records to ``config.log_file``.

    Stdout belongs to the UI, so nothing is installed when no log file is
    configured. Returns the installed handler (or ``None``).
    """
    if not config.log_file:
        return None

    level = getattr(logging, config.log_level.upper(), logging.INFO)
    handler = logging.FileHandler(config.log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))

    root = logging.getLogger("lotus")
    root.setLevel(level)
    root.addHandler(handler)
    return handler
