import os
from pathlib import Path

import pytest

from keyed_cache.codecs import TextCodec
from keyed_cache.disk_cache import DiskCache


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch):
    for name in list(os.environ):
        if name.startswith("KEYED_CACHE_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    d = tmp_path / "cache"
    d.mkdir()
    return d


@pytest.fixture
def text_cache(cache_dir: Path) -> DiskCache:
    return DiskCache(cache_dir, TextCodec())
