from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class Settings:
    max_input_chars: int
    max_depth: int
    decimal_fractions: bool
    strict: bool
    log_level: str


def _env(name: str, default: str) -> str:
    raw = (os.environ.get(name) or default).strip()
    # Users often set env vars with quotes (e.g. cmd.exe: set TUTORMARK_STRICT="1").
    if (raw.startswith('"') and raw.endswith('"')) or (raw.startswith("'") and raw.endswith("'")):
        raw = raw[1:-1].strip()
    return raw or default


def _env_flag(name: str, default: bool = False) -> bool:
    raw = _env(name, "1" if default else "0").lower()
    return raw in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    raw = _env(name, str(default))
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default


def _env_log_level(name: str, default: str = "WARNING") -> str:
    level = _env(name, default).upper()
    if level not in _LOG_LEVELS:
        logger.warning("Ignoring %s=%r: unknown log level, using %s", name, level, default)
        return default
    return level


def load_settings() -> Settings:
    max_input_chars = _env_int("TUTORMARK_MAX_INPUT_CHARS", 20000)
    max_depth = _env_int("TUTORMARK_MAX_DEPTH", 16)
    return Settings(
        max_input_chars=max(1, max_input_chars),
        max_depth=max(1, max_depth),
        decimal_fractions=_env_flag("TUTORMARK_DECIMAL_FRACTIONS"),
        strict=_env_flag("TUTORMARK_STRICT"),
        log_level=_env_log_level("TUTORMARK_LOG_LEVEL"),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings; call ``get_settings.cache_clear()`` after changing the env."""
    return load_settings()
