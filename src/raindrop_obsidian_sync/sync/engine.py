"""Reconciliation engine orchestrating one full sync run."""

from __future__ import annotations

import time
from collections.abc import Callable
from datetime import datetime

from raindrop_obsidian_sync.config_settings import Config
from raindrop_obsidian_sync.domain.interfaces.bookmark_service import IBookmarkService
from raindrop_obsidian_sync.domain.interfaces.document_store import IDocumentStore
from raindrop_obsidian_sync.exceptions import RaindropSyncError, SyncError
from raindrop_obsidian_sync.models import Collection, FailedItem
from raindrop_obsidian_sync.sync.bookmark_writer import BookmarkWriter
from raindrop_obsidian_sync.sync.cleanup import prune_empty_folders, remove_orphans, undo_all
from raindrop_obsidian_sync.sync.indexer import build_local_index
from raindrop_obsidian_sync.sync.pushback import AnnotationPusher
from raindrop_obsidian_sync.sync.report import RunReport, write_status_document
from raindrop_obsidian_sync.sync.run_context import RunContext, StatusCallback
from raindrop_obsidian_sync.utils.logging import get_logger
from raindrop_obsidian_sync.utils.timestamps import utc_now
from raindrop_obsidian_sync.vault.collection_paths import resolve_collection_path

logger = get_logger(__name__)


class SyncEngine:
    """Runs reconciliation passes between the remote service and the local tree.

    A run is: reverse push (when bidirectional), fetch collections and
    bookmarks, forward pass per record, orphan cleanup, status document.
    Fetch failures abort the run; per-record failures are recorded and the
    run continues.
    """

    def __init__(
        self,
        config: Config,
        store: IDocumentStore,
        service: IBookmarkService | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.store = store
        self._service = service
        self.clock = clock
        self.last_sync_time: datetime | None = None
        self.writer = BookmarkWriter(
            store,
            resource_folder=config.resource_folder,
            use_collection_folders=config.use_collection_folders,
            edit_grace_seconds=config.edit_grace_seconds,
            clock=clock,
        )
        self.pusher: AnnotationPusher | None = None
        if service is not None:
            self.pusher = AnnotationPusher(
                store,
                service,
                edit_grace_seconds=config.edit_grace_seconds,
                clock=clock,
            )

    @property
    def service(self) -> IBookmarkService:
        if self._service is None:
            msg = "No bookmark service configured for this engine"
            raise SyncError(msg)
        return self._service

    def _new_context(self, on_status: StatusCallback | None) -> RunContext:
        context = RunContext(started_at=self.clock(), clock=self.clock)
        if on_status is not None:
            context.on_status = on_status
        context.last_sync_time = self.last_sync_time
        return context

    async def run(self, on_status: StatusCallback | None = None) -> RunReport:
        """Execute one reconciliation pass and return its report.

        Raises:
            MissingCredentialError: Raised by the caller's config before any I/O
            RaindropApiError: If collections or bookmarks cannot be fetched
        """
        context = self._new_context(on_status)
        report = context.report
        root = self.config.resource_folder
        start = time.perf_counter()

        logger.info(
            "sync_started",
            folder=root,
            test_mode=self.config.test_mode,
            limit=self.config.effective_limit,
        )

        try:
            await self.store.ensure_folder(root)
            index = await build_local_index(self.store, root)

            if self.config.bidirectional_sync and self.pusher is not None:
                context.set_status("Syncing notes to Raindrop...")
                push = await self.pusher.push(index)
                report.pushed = push.pushed
                report.push_failed = push.failed
                logger.info("push_summary", pushed=push.pushed, failed=push.failed)

            context.set_status("Fetching collections...")
            collections = {c.id: c for c in await self.service.fetch_collections()}

            context.set_status("Fetching bookmarks...")
            limit = self.config.effective_limit
            records = await self.service.fetch_bookmarks(limit=limit)
        except RaindropSyncError as e:
            logger.error("sync_failed", error=e.message, error_code=e.error_code)
            context.set_status("Sync failed")
            raise

        report.total = len(records)
        for position, record in enumerate(records, start=1):
            context.set_status(f"Syncing {position}/{report.total}...")
            try:
                outcome = await self.writer.apply(record, collections, index)
            except RaindropSyncError as e:
                report.record_failure(
                    FailedItem(record.id, record.title or "Untitled", e.message)
                )
                logger.error(
                    "bookmark_sync_failed",
                    raindrop_id=record.id,
                    title=record.title,
                    error=str(e),
                )
                continue
            except Exception as e:
                report.record_failure(
                    FailedItem(record.id, record.title or "Untitled", str(e))
                )
                logger.error(
                    "bookmark_sync_failed_unexpected",
                    raindrop_id=record.id,
                    title=record.title,
                    error=str(e),
                    exc_info=True,
                )
                continue
            report.record(outcome)

        if report.failures:
            logger.warning(
                "failed_items_warning",
                failed=report.failed,
                ids=[item.raindrop_id for item in report.failures],
            )

        context.set_status("Cleaning up deleted bookmarks...")
        if limit is not None and len(records) >= limit:
            # A capped fetch is not the full remote set
            logger.info("orphan_cleanup_skipped", reason="test_mode", limit=limit)
        else:
            report.deleted = await remove_orphans(
                self.store, index, {record.id for record in records}
            )
        folders = await prune_empty_folders(self.store, root)
        logger.info("cleanup_summary", deleted=report.deleted, folders_removed=folders)

        context.finish()
        self.last_sync_time = context.last_sync_time
        await write_status_document(self.store, report, self.config, context.now())

        logger.info(
            "sync_summary",
            total=report.total,
            created=report.created,
            updated=report.updated,
            skipped=report.skipped,
            failed=report.failed,
            pushed=report.pushed,
        )
        if report.count_mismatch:
            logger.warning(
                "count_mismatch_warning",
                total=report.total,
                processed=report.processed,
            )
        logger.info(
            "sync_completed",
            duration_seconds=round(time.perf_counter() - start, 2),
            created=report.created,
            updated=report.updated,
            deleted=report.deleted,
        )
        return report

    async def test_connection(self) -> str:
        """Verify the credential; returns the account's display name."""
        user = await self.service.get_user()
        name = user.get("fullName") or user.get("email") or "unknown user"
        logger.info("connection_verified", user=name)
        return name

    async def undo(self) -> int:
        """Delete every synced bookmark document and prune empty folders."""
        deleted = await undo_all(self.store, self.config.resource_folder)
        self.last_sync_time = None
        logger.info("undo_completed", deleted=deleted)
        return deleted

    async def list_collections(self) -> list[tuple[Collection, str]]:
        """Every collection with the folder its bookmarks are written to."""
        collections = {c.id: c for c in await self.service.fetch_collections()}
        rows = []
        for collection in collections.values():
            segments = resolve_collection_path(collection.id, collections)
            rows.append((collection, "/".join(segments)))
        return sorted(rows, key=lambda row: row[1].lower())
