from __future__ import annotations


# Base class for every error raised by the cache.
class CacheError(Exception):
    pass


# Raised at construction time and never caught internally: without a hash the cache cannot name entries.
class NoHashAlgorithmError(CacheError):
    def __init__(self, algorithms) -> None:
        self.algorithms = tuple(algorithms)
        names = ", ".join(self.algorithms) or "<none>"
        super().__init__(f"No available hashing algorithm (tried: {names})")


class CacheDirectoryError(CacheError):
    def __init__(self, base_dir, cause: OSError) -> None:
        self.base_dir = base_dir
        self.cause = cause
        super().__init__(f"Cannot list cache directory {base_dir}: {cause}")


# The caller-supplied encode/decode raised a non-I/O error.
class CodecError(CacheError):
    def __init__(self, key, operation: str, cause: BaseException) -> None:
        self.key = key
        self.operation = operation
        self.cause = cause
        super().__init__(f"[{operation}] codec failed for key {key!r}: {cause}")


# Key header truncated or not valid UTF-8.
class CorruptEntryError(CacheError):
    pass


class ConfigurationError(CacheError):
    pass
