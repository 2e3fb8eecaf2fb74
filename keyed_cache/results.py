from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any


class LookupStatus(str, Enum):
    HIT = "hit"
    MISS = "miss"
    FAILED = "failed"
    COLLISION = "collision"


# Outcome of a read: tells a miss apart from an entry that exists but could not be read.
@dataclass(frozen=True)
class LookupResult:
    status: LookupStatus
    path: Path
    value: Any = None
    error: Exception | None = None
    stored_key: str | None = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.HIT


# Outcome of a write; error holds the OSError when the entry could not be written.
@dataclass(frozen=True)
class StoreResult:
    path: Path
    error: OSError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
