"""Forward pass: materialise one remote bookmark as a local document."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime

from raindrop_obsidian_sync.domain.interfaces.document_store import IDocumentStore
from raindrop_obsidian_sync.domain.services.filename_service import FilenameService
from raindrop_obsidian_sync.models import (
    UNSORTED_TITLE,
    BookmarkRecord,
    Collection,
    SyncOutcome,
)
from raindrop_obsidian_sync.sync.edit_detection import is_locally_edited
from raindrop_obsidian_sync.sync.filename_resolver import resolve_unique_filename
from raindrop_obsidian_sync.sync.indexer import LocalIndex
from raindrop_obsidian_sync.utils.logging import get_logger
from raindrop_obsidian_sync.utils.timestamps import utc_now
from raindrop_obsidian_sync.vault.codec import decode, encode
from raindrop_obsidian_sync.vault.collection_paths import resolve_collection_path
from raindrop_obsidian_sync.vault.paths import document_path, join_path

logger = get_logger(__name__)


@dataclass(frozen=True)
class Placement:
    """Where a record's document lives and the collection title it shows."""

    folder: str
    collection_title: str


class BookmarkWriter:
    """Creates, updates, relocates or skips the document for one record.

    Decision order per record:

    1. resolve the target folder and a free file name in it;
    2. delete every indexed copy of the record that lives elsewhere;
    3. if a document exists at the target and was edited after its last
       sync, rewrite it around the existing annotation ("updated");
    4. otherwise compare it with the canonical rendering: identical is
       "skipped", different is overwritten ("updated");
    5. with nothing at the target, write a new document ("created").
    """

    def __init__(
        self,
        store: IDocumentStore,
        resource_folder: str,
        use_collection_folders: bool = True,
        edit_grace_seconds: float = 0.0,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.store = store
        self.resource_folder = resource_folder
        self.use_collection_folders = use_collection_folders
        self.edit_grace_seconds = edit_grace_seconds
        self.clock = clock

    def placement(
        self, record: BookmarkRecord, collections: Mapping[int, Collection]
    ) -> Placement:
        collection = (
            collections.get(record.collection_id)
            if record.collection_id is not None
            else None
        )
        title = collection.title if collection and collection.title else UNSORTED_TITLE

        if not self.use_collection_folders:
            return Placement(self.resource_folder, title)

        segments = []
        if collection is not None and collection.title:
            segments = resolve_collection_path(record.collection_id, collections)
        if not segments:
            segments = [UNSORTED_TITLE]
        return Placement(join_path(self.resource_folder, *segments), title)

    async def _remove_stale_copies(
        self, record: BookmarkRecord, target: str, index: LocalIndex
    ) -> str | None:
        """Delete copies of ``record`` not at ``target``.

        Returns the annotation of the authoritative copy when it carries a
        local edit that would otherwise be lost.
        """
        carried: str | None = None
        authoritative = index.by_id.get(record.id)
        for copy in index.copies(record.id):
            if copy.path == target:
                continue
            if (
                copy is authoritative
                and copy.annotation
                and is_locally_edited(
                    copy.modified, copy.metadata.last_synced, self.edit_grace_seconds
                )
            ):
                carried = copy.annotation
            if await self.store.exists(copy.path):
                await self.store.delete(copy.path)
                logger.info(
                    "bookmark_relocated",
                    raindrop_id=record.id,
                    old_path=copy.path,
                    new_path=target,
                )
        return carried

    async def apply(
        self,
        record: BookmarkRecord,
        collections: Mapping[int, Collection],
        index: LocalIndex,
    ) -> SyncOutcome:
        place = self.placement(record, collections)
        await self.store.ensure_folder(place.folder)

        base_name = FilenameService.bookmark_base_name(record.title, record.id)
        name = await resolve_unique_filename(self.store, place.folder, base_name, record.id)
        target = document_path(place.folder, name)

        carried = await self._remove_stale_copies(record, target, index)
        synced_at = self.clock()

        if not await self.store.exists(target):
            await self.store.write(
                target, encode(record, place.collection_title, synced_at, annotation=carried)
            )
            logger.debug("bookmark_created", raindrop_id=record.id, path=target)
            return SyncOutcome.CREATED

        current = await self.store.read(target)
        parsed = decode(current)
        last_synced = parsed.metadata.last_synced if parsed else None
        entry = await self.store.stat(target)
        modified = entry.modified if entry else None

        if (
            parsed is not None
            and last_synced is not None
            and is_locally_edited(modified, last_synced, self.edit_grace_seconds)
        ):
            await self.store.write(
                target,
                encode(
                    record,
                    place.collection_title,
                    synced_at,
                    annotation=parsed.annotation,
                ),
            )
            logger.info(
                "bookmark_local_edit_preserved", raindrop_id=record.id, path=target
            )
            return SyncOutcome.UPDATED

        # Rendered with the document's own last_synced so only real changes differ
        reference = encode(record, place.collection_title, last_synced or synced_at)
        if reference == current:
            return SyncOutcome.SKIPPED

        await self.store.write(target, encode(record, place.collection_title, synced_at))
        logger.debug("bookmark_updated", raindrop_id=record.id, path=target)
        return SyncOutcome.UPDATED
