"""Sync engine coordinating one source → destination run.

This module provides:
- SyncEngine: Wires listings, the diff engine, the multipart uploader and
  the transfer scheduler together for a pair of stores
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from bucketsync.core.config import SyncConfig
from bucketsync.stores.base import MultipartStore
from bucketsync.sync.diff import DiffEngine
from bucketsync.sync.multipart import MultipartUploader
from bucketsync.sync.scheduler import TransferScheduler

if TYPE_CHECKING:
    from bucketsync.stores.base import Store
    from bucketsync.sync.diff import PathMap
    from bucketsync.sync.types import SyncReport

logger = logging.getLogger(__name__)


class SyncEngine:
    """Makes a destination store match a source store.

    Usage:
        engine = SyncEngine(SyncConfig(parallel=8, delete_extraneous=True))
        report = engine.sync(LocalStore("photos"), S3Store("bucket", "photos"))
        if report.failed_run:
            ...
    """

    def __init__(self, config: SyncConfig | None = None) -> None:
        """Initialize the sync engine.

        Args:
            config: Sync configuration. Defaults to SyncConfig().
        """
        self._config = config or SyncConfig()

    @property
    def config(self) -> SyncConfig:
        """Get the sync configuration."""
        return self._config

    def sync(
        self,
        source: Store,
        destination: Store,
        path_map: PathMap | None = None,
    ) -> SyncReport:
        """Perform a full sync operation.

        Args:
            source: Store to read from.
            destination: Store to write to.
            path_map: Optional mapping from source to destination relative
                paths, applied before comparison.

        Returns:
            SyncReport with per-action results and the fatal error, if any.
        """
        config = self._config
        logger.info(
            f"Syncing {source.location} -> {destination.location}"
            + (" (dry run)" if config.dry_run else "")
        )

        uploader = None
        if isinstance(destination, MultipartStore):
            uploader = MultipartUploader(
                destination,
                part_size=config.part_size,
                max_retries=config.part_retries,
                initial_backoff=config.retry_backoff,
            )

        diff_engine = DiffEngine(
            delete_extraneous=config.delete_extraneous,
            path_map=path_map,
        )
        scheduler = TransferScheduler(destination, config, uploader)

        source_listing = source.files()
        destination_listing = destination.files()
        try:
            report = scheduler.run(diff_engine.diff(source_listing, destination_listing))
        finally:
            source_listing.close()
            destination_listing.close()

        tally = report.tally()
        summary = (
            f"{tally['applied']} applied, {tally['skipped']} skipped, "
            f"{tally['failed']} failed"
        )
        if report.failed_run:
            logger.error(f"Sync of {source.location} failed: {summary}")
        else:
            logger.info(f"Sync of {source.location} complete: {summary}")
        return report
