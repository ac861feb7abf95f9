"""Transfer commands for the bucketsync CLI.

Commands:
- sync: Make a destination match a source
- put: Copy local files or directories into a destination
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from pathlib import Path

import click

from bucketsync.cli.options import (
    build_s3_config,
    build_sync_config,
    echo_report,
    transfer_options,
)
from bucketsync.stores import LocalStore, open_store
from bucketsync.sync import SyncEngine


@click.command()
@click.argument("source")
@click.argument("dest")
@transfer_options
@click.option("--delete", is_flag=True, help="Delete destination objects missing from the source.")
@click.pass_context
def sync(
    ctx: click.Context,
    source: str,
    dest: str,
    parallel: int,
    dry_run: bool,
    ignore_errors: bool,
    part_size: int,
    retries: int,
    acl: str | None,
    public: bool,
    delete: bool,
) -> None:
    """Synchronize DEST with SOURCE.

    SOURCE and DEST are local paths or s3://bucket/prefix URLs. Objects
    whose size or content differ are copied; identical ones are skipped.
    """
    s3_config = build_s3_config(ctx, acl, public)
    config = build_sync_config(parallel, dry_run, ignore_errors, delete, part_size, retries)

    try:
        source_store = open_store(source, s3_config)
        dest_store = open_store(dest, s3_config)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    report = SyncEngine(config).sync(source_store, dest_store)
    if echo_report(report):
        sys.exit(1)


@click.command()
@click.argument("paths", nargs=-1, required=True)
@transfer_options
@click.pass_context
def put(
    ctx: click.Context,
    paths: tuple[str, ...],
    parallel: int,
    dry_run: bool,
    ignore_errors: bool,
    part_size: int,
    retries: int,
    acl: str | None,
    public: bool,
) -> None:
    """Copy local files or directories into a destination.

    Usage: put SOURCE... DEST. A file lands as DEST/<name>, a directory as
    DEST/<dirname>/... and a directory given with a trailing slash
    (dir/) has its contents copied straight into DEST. Nothing is deleted
    from DEST.
    """
    if len(paths) < 2:
        click.echo("Error: put requires at least one SOURCE and a DEST", err=True)
        sys.exit(1)

    *sources, dest = paths
    s3_config = build_s3_config(ctx, acl, public)
    config = build_sync_config(parallel, dry_run, ignore_errors, False, part_size, retries)

    try:
        dest_store = open_store(dest, s3_config)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    engine = SyncEngine(config)
    failed = False
    for source in sources:
        source_path = Path(source)
        if not source_path.exists():
            click.echo(f"Error: {source}: no such file or directory", err=True)
            failed = True
            if not ignore_errors:
                break
            continue

        path_map = None
        if source_path.is_dir() and not source.endswith(("/", os.sep)):
            path_map = _under(source_path.resolve().name)

        report = engine.sync(LocalStore(source_path), dest_store, path_map=path_map)
        if echo_report(report):
            failed = True
            if not ignore_errors:
                break

    if failed:
        sys.exit(1)


def _under(prefix: str) -> Callable[[str], str]:
    """Map relative paths below a directory name."""
    return lambda relative_path: f"{prefix}/{relative_path}"
