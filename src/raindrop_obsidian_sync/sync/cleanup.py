"""Orphan removal, undo-all and empty-folder pruning."""

from __future__ import annotations

from collections.abc import Collection as AbstractSet

from raindrop_obsidian_sync.domain.interfaces.document_store import IDocumentStore
from raindrop_obsidian_sync.exceptions import DocumentError
from raindrop_obsidian_sync.models import BOOKMARK_DOCUMENT_TYPE
from raindrop_obsidian_sync.sync.indexer import LocalIndex, iter_document_paths
from raindrop_obsidian_sync.utils.logging import get_logger
from raindrop_obsidian_sync.vault.codec import document_type

logger = get_logger(__name__)


async def prune_empty_folders(store: IDocumentStore, folder: str) -> int:
    """Remove empty subfolders of ``folder`` bottom-up; ``folder`` itself stays.

    A subfolder is re-listed after its own children were processed, so a
    folder that only becomes empty through pruning is removed too.
    """
    removed = 0
    for entry in await store.list(folder):
        if not entry.is_folder:
            continue
        removed += await prune_empty_folders(store, entry.path)
        if await store.list(entry.path):
            continue
        try:
            await store.delete(entry.path)
        except DocumentError as e:
            logger.warning("empty_folder_delete_failed", path=entry.path, error=str(e))
            continue
        removed += 1
        logger.debug("empty_folder_deleted", path=entry.path)
    return removed


async def remove_orphans(
    store: IDocumentStore, index: LocalIndex, remote_ids: AbstractSet[int]
) -> int:
    """Delete indexed bookmark documents whose id is not in ``remote_ids``."""
    deleted = 0
    for document in index.documents:
        if document.raindrop_id in remote_ids:
            continue
        try:
            if not await store.exists(document.path):
                logger.warning("orphan_already_gone", path=document.path)
                continue
            await store.delete(document.path)
        except DocumentError as e:
            logger.warning(
                "orphan_delete_failed",
                path=document.path,
                raindrop_id=document.raindrop_id,
                error=str(e),
            )
            continue
        deleted += 1
        logger.info(
            "orphan_deleted", path=document.path, raindrop_id=document.raindrop_id
        )
    return deleted


async def undo_all(store: IDocumentStore, root: str) -> int:
    """Delete every bookmark document under ``root``, then prune empty folders.

    Only the header ``type`` marker is checked, so documents with a damaged
    id are removed as well. Other documents are left alone.
    """
    deleted = 0
    async for path in iter_document_paths(store, root):
        try:
            if document_type(await store.read(path)) != BOOKMARK_DOCUMENT_TYPE:
                continue
            await store.delete(path)
        except DocumentError as e:
            logger.warning("undo_document_skipped", path=path, error=str(e))
            continue
        deleted += 1
        logger.debug("undo_document_deleted", path=path)

    await prune_empty_folders(store, root)
    return deleted
