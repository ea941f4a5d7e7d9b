from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, NoReturn, Optional

import typer
from prometheus_client import CollectorRegistry

from .app.core.logging import setup_logging
from .app.settings import BlobSettings
from .exceptions import JsonBlobError
from .manager import BlobManager
from .obs.metrics import BlobMetrics
from .store.easy import easy_store

app = typer.Typer(no_args_is_help=True, add_completion=False, help="jsonblob store administration")

# Settings problems (missing URLs, bad durations) surface as ValueError.
_CLI_ERRORS = (JsonBlobError, ValueError)


def _manager(ttl_days: Optional[float] = None) -> BlobManager:
    settings = BlobSettings() if ttl_days is None else BlobSettings(blob_access_ttl=ttl_days * 86400)
    return BlobManager(easy_store(), settings, metrics=BlobMetrics(CollectorRegistry()))


def _fail(exc: Exception) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    status = getattr(exc, "status_code", 400)
    raise typer.Exit(code=1 if status >= 500 else 2)


@contextmanager
def _managed(ttl_days: Optional[float] = None) -> Iterator[BlobManager]:
    try:
        mgr = _manager(ttl_days)
    except _CLI_ERRORS as exc:
        _fail(exc)
    try:
        yield mgr
    except _CLI_ERRORS as exc:
        _fail(exc)
    finally:
        mgr.store.close()


@app.callback()
def main(
        log_level: Optional[str] = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    setup_logging(level=log_level)


@app.command("sweep")
def sweep(
        ttl_days: Optional[float] = typer.Option(None, help="Override JSONBLOB_BLOB_ACCESS_TTL, in days"),
):
    """Remove blobs not accessed within the TTL once and print the counts."""
    with _managed(ttl_days) as mgr:
        result = mgr.sweeper.sweep()
    typer.echo(
        f"scanned={result.scanned} removed={result.removed} "
        f"skipped={result.skipped} failed={result.failed}"
    )


@app.command("count")
def count():
    """Print the number of stored blobs."""
    with _managed() as mgr:
        typer.echo(str(mgr.refresh_blob_count()))


@app.command("create")
def create(json: str = typer.Argument(..., help="JSON document to store")):
    """Store a JSON document and print its id."""
    with _managed() as mgr:
        typer.echo(mgr.create_blob(json))


@app.command("show")
def show(blob_id: str = typer.Argument(..., help="Blob id")):
    """Print a stored JSON document and record the access."""
    with _managed() as mgr:
        typer.echo(mgr.get_blob(blob_id))
        mgr.flush_access_times()


@app.command("delete")
def delete(blob_id: str = typer.Argument(..., help="Blob id")):
    """Delete a stored JSON document."""
    with _managed() as mgr:
        mgr.delete_blob(blob_id)
    typer.echo(f"deleted {blob_id}")
