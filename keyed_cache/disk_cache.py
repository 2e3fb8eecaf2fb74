from __future__ import annotations

import struct
from pathlib import Path
from typing import BinaryIO, Generic, Iterable, TypeVar

import structlog

from keyed_cache.codecs import Codec
from keyed_cache.errors import CacheDirectoryError, CodecError, CorruptEntryError
from keyed_cache.hashing import DEFAULT_ALGORITHMS, key_digest, select_algorithm
from keyed_cache.results import LookupResult, LookupStatus, StoreResult
from keyed_cache.settings import CacheSettings

K = TypeVar("K")
V = TypeVar("V")

# 4-byte big-endian length of the UTF-8 key that precedes the payload
_KEY_HEADER = struct.Struct(">I")

logger = structlog.get_logger(__name__)


# File-per-entry cache keyed by a hash of str(key). No locking, writes are not atomic.
class DiskCache(Generic[K, V]):
    def __init__(
        self,
        base_dir: Path | str,
        codec: Codec,
        prefix: str | None = None,
        suffix: str | None = None,
        algorithms: Iterable[str] = DEFAULT_ALGORITHMS,
        verify_keys: bool = False,
    ) -> None:
        self._base_dir = Path(base_dir)
        self._prefix = prefix or ""
        self._suffix = suffix or ""
        self._algorithm = select_algorithm(algorithms)
        self._verify_keys = verify_keys
        self.codec = codec

    @classmethod
    def from_settings(cls, codec: Codec, settings: CacheSettings | None = None, base_dir: Path | str | None = None) -> "DiskCache":
        settings = settings or CacheSettings.from_env()
        base_dir = base_dir or settings.cache_dir
        if base_dir is None:
            raise ValueError("no cache directory given and KEYED_CACHE_DIR is not set")
        return cls(
            base_dir,
            codec,
            prefix=settings.prefix,
            suffix=settings.suffix,
            algorithms=settings.hash_algorithms,
            verify_keys=settings.verify_keys,
        )

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @property
    def prefix(self) -> str:
        return self._prefix

    @property
    def suffix(self) -> str:
        return self._suffix

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def verify_keys(self) -> bool:
        return self._verify_keys

    def filename_for(self, key: K) -> Path:
        return self._base_dir / f"{self._prefix}{key_digest(self._algorithm, key)}{self._suffix}"

    # I/O failures are logged, never raised
    def put(self, key: K, value: V) -> None:
        self.store(key, value)

    # Like put, but reports whether the file was written. Codec bugs raise CodecError.
    def store(self, key: K, value: V) -> StoreResult:
        path = self.filename_for(key)
        try:
            with path.open("wb") as sink:
                if self._verify_keys:
                    self._write_key_header(sink, key)
                self._encode(key, value, sink)
        except OSError as e:
            logger.error("Cache write failed", key=str(key), path=str(path), error=str(e))
            return StoreResult(path, error=e)
        logger.debug("Cache entry written", key=str(key), path=str(path))
        return StoreResult(path)

    # default for a miss and for an unreadable entry alike; lookup() tells them apart
    def get(self, key: K, default: V | None = None) -> V | None:
        result = self.lookup(key)
        return result.value if result.found else default

    def lookup(self, key: K) -> LookupResult:
        path = self.filename_for(key)
        if not path.exists():
            return LookupResult(LookupStatus.MISS, path)

        try:
            with path.open("rb") as source:
                if self._verify_keys:
                    stored_key = self._read_key_header(source)
                    if stored_key != str(key):
                        logger.warning("Cache key collision", key=str(key), stored_key=stored_key, path=str(path))
                        return LookupResult(LookupStatus.COLLISION, path, stored_key=stored_key)
                value = self._decode(key, source)
        except (OSError, CorruptEntryError) as e:
            logger.error("Cache read failed", key=str(key), path=str(path), error=str(e))
            return LookupResult(LookupStatus.FAILED, path, error=e)

        logger.debug("Cache hit", key=str(key), path=str(path))
        return LookupResult(LookupStatus.HIT, path, value=value)

    # False means "possibly partially cleared": a failed delete does not stop the rest
    def clear(self) -> bool:
        success = True
        for path in self.entries():
            try:
                path.unlink()
            except OSError as e:
                logger.error("Error deleting cache file", path=str(path), error=str(e))
                success = False
        return success

    def size(self) -> int:
        return len(self.entries())

    def __len__(self) -> int:
        return self.size()

    # Matching files directly under base_dir, sorted by name. No recursion.
    def entries(self) -> list[Path]:
        try:
            return sorted(p for p in self._base_dir.iterdir() if self._matches(p.name) and p.is_file())
        except OSError as e:
            # also covers is_file() on a readable but non-traversable directory
            raise CacheDirectoryError(self._base_dir, e) from e

    def _matches(self, name: str) -> bool:
        return name.startswith(self._prefix) and name.endswith(self._suffix)

    def _encode(self, key: K, value: V, sink: BinaryIO) -> None:
        try:
            self.codec.encode(key, value, sink)
        except OSError:
            raise
        except Exception as e:
            raise CodecError(key, "encode", e) from e

    def _decode(self, key: K, source: BinaryIO) -> V:
        try:
            return self.codec.decode(key, source)
        except OSError:
            raise
        except Exception as e:
            raise CodecError(key, "decode", e) from e

    @staticmethod
    def _write_key_header(sink: BinaryIO, key: K) -> None:
        raw = str(key).encode("utf-8")
        sink.write(_KEY_HEADER.pack(len(raw)))
        sink.write(raw)

    @staticmethod
    def _read_key_header(source: BinaryIO) -> str:
        head = source.read(_KEY_HEADER.size)
        if len(head) != _KEY_HEADER.size:
            raise CorruptEntryError("truncated key header")
        (length,) = _KEY_HEADER.unpack(head)
        raw = source.read(length)
        if len(raw) != length:
            raise CorruptEntryError("truncated key in header")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CorruptEntryError(f"key header is not UTF-8: {e}") from e
