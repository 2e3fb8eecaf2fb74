from __future__ import annotations

import json
from typing import Any, BinaryIO, Callable, Protocol, runtime_checkable

import joblib
import numpy as np
import pandas as pd


# Serialization boundary of the cache. Neither method may close the stream; the cache owns it.
@runtime_checkable
class Codec(Protocol):
    def encode(self, key: Any, value: Any, sink: BinaryIO) -> None:
        ...

    def decode(self, key: Any, source: BinaryIO) -> Any:
        ...


# Adapts a plain (encode, decode) pair of callables to the Codec protocol.
class FunctionCodec:
    def __init__(self, encode: Callable[[Any, Any, BinaryIO], None], decode: Callable[[Any, BinaryIO], Any]):
        self._encode = encode
        self._decode = decode

    def encode(self, key, value, sink: BinaryIO) -> None:
        self._encode(key, value, sink)

    def decode(self, key, source: BinaryIO):
        return self._decode(key, source)


class BytesCodec:
    def encode(self, key, value: bytes, sink: BinaryIO) -> None:
        sink.write(bytes(value))

    def decode(self, key, source: BinaryIO) -> bytes:
        return source.read()


class TextCodec:
    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def encode(self, key, value: str, sink: BinaryIO) -> None:
        sink.write(value.encode(self.encoding))

    def decode(self, key, source: BinaryIO) -> str:
        return source.read().decode(self.encoding)


# JSON documents, UTF-8, non-ASCII kept as is.
class JsonCodec:
    def __init__(self, indent: int | None = None):
        self.indent = indent

    def encode(self, key, value, sink: BinaryIO) -> None:
        text = json.dumps(value, ensure_ascii=False, indent=self.indent)
        sink.write(text.encode("utf-8"))

    def decode(self, key, source: BinaryIO):
        return json.loads(source.read().decode("utf-8"))


# Arbitrary Python objects (models, sparse matrices, tuples of them) via joblib.
class JoblibCodec:
    def __init__(self, compress: int = 0):
        self.compress = compress

    def encode(self, key, value, sink: BinaryIO) -> None:
        joblib.dump(value, sink, compress=self.compress)

    def decode(self, key, source: BinaryIO):
        return joblib.load(source)


# numpy arrays in .npy format; object arrays are refused.
class NumpyCodec:
    def encode(self, key, value, sink: BinaryIO) -> None:
        np.save(sink, np.asarray(value), allow_pickle=False)

    def decode(self, key, source: BinaryIO) -> np.ndarray:
        return np.load(source, allow_pickle=False)


class DataFrameCodec:
    def encode(self, key, value: pd.DataFrame, sink: BinaryIO) -> None:
        value.to_pickle(sink, compression=None)

    def decode(self, key, source: BinaryIO) -> pd.DataFrame:
        return pd.read_pickle(source, compression=None)
