"""Reverse pass: push locally edited annotations back to the remote service."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from raindrop_obsidian_sync.domain.interfaces.bookmark_service import IBookmarkService
from raindrop_obsidian_sync.domain.interfaces.document_store import IDocumentStore
from raindrop_obsidian_sync.domain.services.tag_service import TagService
from raindrop_obsidian_sync.exceptions import RaindropSyncError
from raindrop_obsidian_sync.models import LocalDocument
from raindrop_obsidian_sync.sync.edit_detection import is_locally_edited
from raindrop_obsidian_sync.sync.indexer import LocalIndex
from raindrop_obsidian_sync.utils.logging import get_logger
from raindrop_obsidian_sync.utils.timestamps import utc_now
from raindrop_obsidian_sync.vault.header_writer import set_last_synced

logger = get_logger(__name__)


@dataclass
class PushResult:
    pushed: int = 0
    failed: int = 0
    unchanged: int = 0


class AnnotationPusher:
    """Sends the annotation and tags of edited documents to the remote service.

    A document qualifies when its modification time is later than its
    ``last_synced`` value (epoch when absent) plus the grace period and its
    annotation is not empty. After a successful push only the ``last_synced``
    header line is rewritten. A failed push is logged and counted; the batch
    continues.
    """

    def __init__(
        self,
        store: IDocumentStore,
        service: IBookmarkService,
        edit_grace_seconds: float = 0.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.service = service
        self.edit_grace_seconds = edit_grace_seconds
        self.clock = clock

    def needs_push(self, document: LocalDocument) -> bool:
        if not is_locally_edited(
            document.modified, document.metadata.last_synced, self.edit_grace_seconds
        ):
            return False
        return bool(document.annotation.strip())

    async def _push_one(self, document: LocalDocument) -> None:
        raindrop_id = document.raindrop_id
        assert raindrop_id is not None
        tags = TagService.remote_tags(document.metadata.tags)
        await self.service.update_bookmark(raindrop_id, document.annotation, tags)

        synced_at = self.clock()
        content = set_last_synced(document.content, synced_at)
        await self.store.write(document.path, content)

        entry = await self.store.stat(document.path)
        document.content = content
        document.metadata.last_synced = synced_at
        document.modified = entry.modified if entry else synced_at

    async def push(self, index: LocalIndex) -> PushResult:
        result = PushResult()
        # Duplicate copies are removed by the forward pass, never pushed
        for document in index.by_id.values():
            if not self.needs_push(document):
                result.unchanged += 1
                continue
            try:
                await self._push_one(document)
            except RaindropSyncError as e:
                result.failed += 1
                logger.error(
                    "annotation_push_failed",
                    raindrop_id=document.raindrop_id,
                    path=document.path,
                    error=str(e),
                )
                continue
            except Exception as e:
                result.failed += 1
                logger.error(
                    "annotation_push_failed_unexpected",
                    raindrop_id=document.raindrop_id,
                    path=document.path,
                    error=str(e),
                    exc_info=True,
                )
                continue
            result.pushed += 1
            logger.info(
                "annotation_pushed", raindrop_id=document.raindrop_id, path=document.path
            )
        return result
