"""Command-line interface for bucketsync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- sync: Make a destination match a source
- put: Copy local files or directories into a destination
- ls: List objects below a location
- get: Download objects into a local directory
- cat: Write object contents to stdout
- rm: Remove objects from a location
"""

from __future__ import annotations

import click

from bucketsync.cli.objects import cat, get, ls, rm
from bucketsync.cli.options import setup_logging, teardown_logging
from bucketsync.cli.sync import put, sync
from bucketsync.core.config import DEFAULT_REGION


@click.group()
@click.version_option(package_name="bucketsync")
@click.option(
    "--region",
    envvar="AWS_REGION",
    default=DEFAULT_REGION,
    show_default=True,
    help="AWS region.",
)
@click.option(
    "--endpoint",
    envvar="AWS_ENDPOINT",
    default=None,
    help="Custom S3 endpoint URL.",
)
@click.option("--quiet", "-q", is_flag=True, help="Only report warnings and errors.")
@click.option("--verbose", "-v", is_flag=True, help="Also report skipped objects and part progress.")
@click.pass_context
def cli(ctx: click.Context, region: str, endpoint: str | None, quiet: bool, verbose: bool) -> None:
    """bucketsync - synchronize local directories and S3 buckets."""
    ctx.ensure_object(dict)
    ctx.obj["region"] = region
    ctx.obj["endpoint"] = endpoint or None
    setup_logging(quiet=quiet, verbose=verbose)
    ctx.call_on_close(teardown_logging)


# Transfer commands
cli.add_command(sync)
cli.add_command(put)

# Object commands
cli.add_command(ls)
cli.add_command(get)
cli.add_command(cat)
cli.add_command(rm)


def main() -> None:
    """Console script entry point."""
    cli(obj={})
