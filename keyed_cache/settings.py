from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from keyed_cache.errors import ConfigurationError
from keyed_cache.hashing import DEFAULT_ALGORITHMS

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _flag(name: str) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _algorithms(name: str) -> tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return DEFAULT_ALGORITHMS
    names = tuple(part.strip().lower() for part in raw.split(",") if part.strip())
    if not names:
        raise ConfigurationError(f"{name} must list at least one algorithm")
    return names


def _level(name: str) -> str:
    raw = os.getenv(name, "INFO").strip().upper()
    if not isinstance(logging.getLevelName(raw), int):
        raise ConfigurationError(f"{name} is not a log level: {raw!r}")
    return raw


# Cache defaults and logging options, read from KEYED_CACHE_* variables.
@dataclass(frozen=True)
class CacheSettings:
    cache_dir: Path | None = None
    prefix: str = ""
    suffix: str = ""
    hash_algorithms: tuple[str, ...] = DEFAULT_ALGORITHMS
    verify_keys: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "CacheSettings":
        cache_dir = os.getenv("KEYED_CACHE_DIR")
        return cls(
            cache_dir=Path(cache_dir) if cache_dir else None,
            prefix=os.getenv("KEYED_CACHE_PREFIX", ""),
            suffix=os.getenv("KEYED_CACHE_SUFFIX", ""),
            hash_algorithms=_algorithms("KEYED_CACHE_HASH_ALGORITHMS"),
            verify_keys=_flag("KEYED_CACHE_VERIFY_KEYS"),
            log_level=_level("KEYED_CACHE_LOG_LEVEL"),
            log_json=_flag("KEYED_CACHE_LOG_JSON"),
        )
