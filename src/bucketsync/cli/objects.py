"""Object commands for the bucketsync CLI.

Commands:
- ls: List objects below a location
- get: Download objects into a local directory
- cat: Write object contents to stdout
- rm: Remove objects from a location
"""

from __future__ import annotations

import sys

import click

from bucketsync.cli.options import build_s3_config, build_sync_config, echo_report
from bucketsync.core.errors import EnumerationError
from bucketsync.stores import LocalStore, Store, StoreObject, open_store
from bucketsync.stores.base import DIRECTORY_SEPARATOR
from bucketsync.sync import SyncAction, TransferScheduler

CAT_BLOCK_SIZE = 1024 * 1024  # 1 MB


def _open_or_exit(ctx: click.Context, location: str, missing_ok: bool = True) -> Store:
    """Open the store for a location, exiting with status 1 on a bad location."""
    try:
        return open_store(location, build_s3_config(ctx, None, False), missing_ok=missing_ok)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _select(
    store: Store,
    paths: tuple[str, ...],
    prefixes: bool = False,
) -> tuple[list[StoreObject], list[str]]:
    """Find the objects named by relative paths in one listing.

    Args:
        store: Store to enumerate.
        paths: Relative paths to look for.
        prefixes: Also match everything below a path ending in "/".

    Returns:
        (objects in listing order, paths that matched nothing).

    Raises:
        EnumerationError: If the listing failed.
    """
    wanted = set(paths)
    matched: set[str] = set()
    objects: list[StoreObject] = []

    listing = store.files()
    try:
        for obj in listing:
            name = obj.relative_path
            hits = {
                path for path in wanted
                if name == path
                or (prefixes and path.endswith(DIRECTORY_SEPARATOR) and name.startswith(path))
            }
            if hits:
                matched |= hits
                objects.append(obj)
        listing.result().raise_for_error()
    finally:
        listing.close()

    return objects, [path for path in paths if path not in matched]


@click.command()
@click.argument("location")
@click.pass_context
def ls(ctx: click.Context, location: str) -> None:
    """List objects below LOCATION with their size."""
    store = _open_or_exit(ctx, location)

    listing = store.files()
    try:
        for obj in listing:
            click.echo(f"{obj.size:>12}  {obj.relative_path}")
        listing.result().raise_for_error()
    except EnumerationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        listing.close()


@click.command()
@click.argument("location")
@click.argument("paths", nargs=-1, required=True)
@click.option(
    "--directory", "-d",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Download directory.",
)
@click.option("--ignore-errors", is_flag=True, help="Keep going after a failed download.")
@click.option(
    "--parallel", "-p",
    type=click.IntRange(min=1),
    default=8,
    show_default=True,
    help="Number of downloads to run in parallel.",
)
@click.pass_context
def get(
    ctx: click.Context,
    location: str,
    paths: tuple[str, ...],
    directory: str,
    ignore_errors: bool,
    parallel: int,
) -> None:
    """Download PATH... (relative to LOCATION) into a local directory.

    Objects keep their path relative to LOCATION. A PATH ending in "/"
    downloads everything below it.
    """
    store = _open_or_exit(ctx, location)

    try:
        objects, missing = _select(store, paths, prefixes=True)
    except EnumerationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for path in missing:
        click.echo(f"Error: {path}: no such object", err=True)
    if missing and not ignore_errors:
        sys.exit(1)

    config = build_sync_config(parallel=parallel, ignore_errors=ignore_errors)
    report = TransferScheduler(LocalStore(directory), config).run(
        SyncAction.copy(obj) for obj in objects
    )
    if echo_report(report) or missing:
        sys.exit(1)


@click.command()
@click.argument("location")
@click.argument("paths", nargs=-1, required=True)
@click.pass_context
def cat(ctx: click.Context, location: str, paths: tuple[str, ...]) -> None:
    """Write the contents of PATH... (relative to LOCATION) to stdout."""
    store = _open_or_exit(ctx, location)

    try:
        objects, missing = _select(store, paths)
    except EnumerationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if missing:
        for path in missing:
            click.echo(f"Error: {path}: no such object", err=True)
        sys.exit(1)

    by_path = {obj.relative_path: obj for obj in objects}
    stdout = click.get_binary_stream("stdout")
    for path in paths:
        try:
            with by_path[path].open() as body:
                for block in iter(lambda: body.read(CAT_BLOCK_SIZE), b""):
                    stdout.write(block)
        except OSError as e:
            click.echo(f"Error: {path}: {e}", err=True)
            sys.exit(1)
    stdout.flush()


@click.command()
@click.argument("location")
@click.argument("paths", nargs=-1, required=True)
@click.option("--ignore-errors", is_flag=True, help="Keep going after a failed delete.")
@click.option(
    "--parallel", "-p",
    type=click.IntRange(min=1),
    default=8,
    show_default=True,
    help="Number of deletes to run in parallel.",
)
@click.pass_context
def rm(
    ctx: click.Context,
    location: str,
    paths: tuple[str, ...],
    ignore_errors: bool,
    parallel: int,
) -> None:
    """Remove PATH... (relative to LOCATION).

    A missing local file is an error; S3 does not report missing keys.
    Local directories emptied by the removal are removed too.
    """
    store = _open_or_exit(ctx, location, missing_ok=False)

    config = build_sync_config(parallel=parallel, ignore_errors=ignore_errors)
    report = TransferScheduler(store, config).run(SyncAction.delete(p) for p in paths)
    if echo_report(report):
        sys.exit(1)
