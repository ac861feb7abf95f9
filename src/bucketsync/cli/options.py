"""Shared option handling for bucketsync CLI commands.

This module provides:
- setup_logging / teardown_logging: Route bucketsync log records to stderr
- transfer_options: Decorator adding the transfer options to a command
- build_s3_config / build_sync_config: Turn CLI options into config objects
- echo_report: Print the outcome of a run
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click

from bucketsync.core.config import (
    DEFAULT_PARALLEL,
    DEFAULT_PART_RETRIES,
    DEFAULT_PART_SIZE,
    S3Config,
    SyncConfig,
)

if TYPE_CHECKING:
    from bucketsync.sync.types import SyncReport

_handler: logging.Handler | None = None


def setup_logging(quiet: bool = False, verbose: bool = False) -> None:
    """Install a plain stderr handler on the bucketsync logger.

    Args:
        quiet: Only show warnings and errors.
        verbose: Show debug messages (skips, part progress).
    """
    global _handler

    logger = logging.getLogger("bucketsync")
    if _handler is not None:
        logger.removeHandler(_handler)

    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(_handler)
    logger.propagate = False

    if quiet:
        logger.setLevel(logging.WARNING)
    elif verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)


def teardown_logging() -> None:
    """Remove the handler installed by setup_logging."""
    global _handler

    logger = logging.getLogger("bucketsync")
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler = None
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def transfer_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Add the options shared by commands that copy objects."""
    options = [
        click.option(
            "--parallel", "-p",
            type=click.IntRange(min=1),
            default=DEFAULT_PARALLEL,
            show_default=True,
            help="Number of actions to run in parallel.",
        ),
        click.option("--dry-run", "-n", is_flag=True, help="Show what would be done, change nothing."),
        click.option("--ignore-errors", is_flag=True, help="Keep going after a failed action."),
        click.option(
            "--part-size",
            type=click.IntRange(min=1),
            default=DEFAULT_PART_SIZE,
            show_default=True,
            help="Multipart threshold and part size in bytes.",
        ),
        click.option(
            "--retries",
            type=click.IntRange(min=0),
            default=DEFAULT_PART_RETRIES,
            show_default=True,
            help="Retries per multipart part.",
        ),
        click.option("--acl", default=None, help="Canned ACL for created objects (e.g. private, public-read)."),
        click.option("--public", "-P", is_flag=True, help="Shorthand for --acl public-read."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_s3_config(ctx: click.Context, acl: str | None, public: bool) -> S3Config:
    """Build S3 connection settings from the group and command options.

    Exits with status 1 on an invalid ACL.
    """
    if public:
        acl = "public-read"
    try:
        return S3Config(
            region=ctx.obj["region"],
            endpoint_url=ctx.obj["endpoint"],
            acl=acl,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def build_sync_config(
    parallel: int = DEFAULT_PARALLEL,
    dry_run: bool = False,
    ignore_errors: bool = False,
    delete: bool = False,
    part_size: int = DEFAULT_PART_SIZE,
    retries: int = DEFAULT_PART_RETRIES,
) -> SyncConfig:
    """Build the sync policy from command options."""
    return SyncConfig(
        parallel=parallel,
        dry_run=dry_run,
        ignore_errors=ignore_errors,
        delete_extraneous=delete,
        part_size=part_size,
        part_retries=retries,
    )


def echo_report(report: SyncReport) -> bool:
    """Print the tally of a SyncReport.

    Returns:
        True if the run must exit with status 1.
    """
    tally = report.tally()
    prefix = "(dry run) " if report.dry_run else ""
    click.echo(
        f"{prefix}{tally['applied']} applied, {tally['skipped']} skipped, "
        f"{tally['failed']} failed"
    )
    if report.fatal_error is not None:
        click.echo(f"Error: {report.fatal_error}", err=True)
    return report.failed_run
