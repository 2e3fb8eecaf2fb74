from __future__ import annotations

import hashlib
from typing import Iterable

import structlog

from keyed_cache.errors import NoHashAlgorithmError

DEFAULT_ALGORITHMS = ("sha256", "sha1", "md5")

logger = structlog.get_logger(__name__)


# Return the first algorithm from the preference list that hashlib can build.
def select_algorithm(preferences: Iterable[str] = DEFAULT_ALGORITHMS) -> str:
    tried = []
    for name in preferences:
        tried.append(name)
        try:
            candidate = hashlib.new(name)
        except ValueError:
            # unknown name, or blocked by the OpenSSL policy (FIPS and md5)
            logger.warning("Hash algorithm unavailable", algorithm=name)
            continue
        # shake_* digests have no fixed size, so they cannot name files
        if candidate.digest_size == 0:
            logger.warning("Hash algorithm has variable length", algorithm=name)
            continue
        return name
    raise NoHashAlgorithmError(tried)


# Fixed-width lowercase hex digest of the key's string form.
# A new hash object per call: nothing is shared between callers.
def key_digest(algorithm: str, key) -> str:
    return hashlib.new(algorithm, str(key).encode("utf-8")).hexdigest()
