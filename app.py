import json
from enum import Enum
from pathlib import Path
from typing import Optional

import typer

from keyed_cache.codecs import BytesCodec, JsonCodec, TextCodec
from keyed_cache.disk_cache import DiskCache
from keyed_cache.errors import CacheDirectoryError, CodecError, ConfigurationError
from keyed_cache.logging_config import configure_logging
from keyed_cache.results import LookupStatus
from keyed_cache.settings import CacheSettings


app = typer.Typer(help="Keyed disk cache maintenance")


class CodecName(str, Enum):
    bytes = "bytes"
    text = "text"
    json = "json"


# Codec plus the conversions between raw command-line input and cached values.
_CODECS = {
    CodecName.bytes: (BytesCodec, lambda raw: raw, lambda v: v),
    CodecName.text: (TextCodec, lambda raw: raw.decode("utf-8"), lambda v: v),
    CodecName.json: (JsonCodec, json.loads, lambda v: json.dumps(v, ensure_ascii=False, indent=2)),
}


def _cache(ctx: typer.Context) -> DiskCache:
    return ctx.obj["cache"]


# Build the cache once per invocation from options, falling back to KEYED_CACHE_* settings.
@app.callback()
def main(
    ctx: typer.Context,
    directory: Optional[Path] = typer.Option(None, "--dir", help="Cache base directory"),
    prefix: Optional[str] = typer.Option(None, "--prefix", help="Entry filename prefix"),
    suffix: Optional[str] = typer.Option(None, "--suffix", help="Entry filename suffix"),
    codec: CodecName = typer.Option(CodecName.bytes, "--codec", help="Value serialization"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    try:
        settings = CacheSettings.from_env()
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)

    configure_logging(settings.log_level, json_output=settings.log_json, verbose=verbose)

    base_dir = directory or settings.cache_dir
    if base_dir is None:
        typer.echo("No cache directory: pass --dir or set KEYED_CACHE_DIR", err=True)
        raise typer.Exit(code=2)
    if not base_dir.is_dir():
        typer.echo(f"Cache directory does not exist: {base_dir}", err=True)
        raise typer.Exit(code=2)

    codec_cls, parse, render = _CODECS[codec]
    cache = DiskCache(
        base_dir,
        codec_cls(),
        prefix=settings.prefix if prefix is None else prefix,
        suffix=settings.suffix if suffix is None else suffix,
        algorithms=settings.hash_algorithms,
        verify_keys=settings.verify_keys,
    )
    ctx.obj = {"cache": cache, "parse": parse, "render": render}


# Print the entry filename for KEY (whether or not it exists)
@app.command()
def path(ctx: typer.Context, key: str = typer.Argument(..., help="Cache key")):
    typer.echo(str(_cache(ctx).filename_for(key)))


@app.command()
def put(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Cache key"),
    value: Optional[str] = typer.Option(None, "--value", help="Value as text"),
    file: Optional[Path] = typer.Option(None, "--file", exists=True, dir_okay=False, help="Read value from file"),
):
    if (value is None) == (file is None):
        typer.echo("Pass exactly one of --value or --file", err=True)
        raise typer.Exit(code=2)

    raw = value.encode("utf-8") if value is not None else file.read_bytes()
    try:
        parsed = ctx.obj["parse"](raw)
    except ValueError as e:
        # UnicodeDecodeError and JSONDecodeError both land here
        typer.echo(f"Cannot parse value: {e}", err=True)
        raise typer.Exit(code=2)

    try:
        result = _cache(ctx).store(key, parsed)
    except CodecError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    if not result.ok:
        typer.echo(f"Write failed: {result.error}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Stored {key} -> {result.path}")


# Print the value for KEY; exit code 1 when it is missing or unreadable
@app.command()
def get(ctx: typer.Context, key: str = typer.Argument(..., help="Cache key")):
    try:
        result = _cache(ctx).lookup(key)
    except CodecError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    if result.status is LookupStatus.MISS:
        typer.echo(f"Not cached: {key}", err=True)
        raise typer.Exit(code=1)
    if not result.found:
        typer.echo(f"Unreadable entry ({result.status.value}): {result.path}", err=True)
        raise typer.Exit(code=1)
    out = ctx.obj["render"](result.value)
    # raw bytes go out untouched, without a trailing newline
    typer.echo(out, nl=not isinstance(out, bytes))


@app.command()
def size(ctx: typer.Context):
    try:
        typer.echo(str(_cache(ctx).size()))
    except CacheDirectoryError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)


@app.command("list")
def list_entries(ctx: typer.Context):
    try:
        entries = _cache(ctx).entries()
    except CacheDirectoryError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)
    for entry in entries:
        typer.echo(entry.name)


# Delete matching entries; stray files in the directory are left alone
@app.command()
def clear(ctx: typer.Context):
    cache = _cache(ctx)
    try:
        before = cache.size()
        ok = cache.clear()
    except CacheDirectoryError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2)
    if not ok:
        typer.echo(f"Cache partially cleared, {cache.size()} entries remain", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Cleared {before} entries from {cache.base_dir}")


if __name__ == "__main__":
    app()
