"""Pick a free document name inside a folder."""

from __future__ import annotations

from raindrop_obsidian_sync.domain.interfaces.document_store import IDocumentStore
from raindrop_obsidian_sync.exceptions import DocumentError
from raindrop_obsidian_sync.utils.logging import get_logger
from raindrop_obsidian_sync.vault.codec import decode
from raindrop_obsidian_sync.vault.paths import document_path

logger = get_logger(__name__)

MAX_SUFFIX_ATTEMPTS = 1000


async def _owned_by(store: IDocumentStore, path: str, raindrop_id: int) -> bool:
    """True when the document at ``path`` already represents ``raindrop_id``."""
    try:
        parsed = decode(await store.read(path))
    except DocumentError as e:
        logger.debug("filename_collision_unreadable", path=path, error=str(e))
        return False
    return parsed is not None and parsed.metadata.raindrop_id == raindrop_id


async def resolve_unique_filename(
    store: IDocumentStore,
    folder: str,
    base_name: str,
    raindrop_id: int,
    max_attempts: int = MAX_SUFFIX_ATTEMPTS,
) -> str:
    """Return a document name (without extension) in ``folder`` for the record.

    Tries ``base_name``, then ``base_name-2``, ``base_name-3`` and so on. A
    name whose document already carries ``raindrop_id`` is reused. After
    ``max_attempts`` candidates the id-keyed ``base_name-<id>`` is returned.
    """
    for attempt in range(1, max_attempts + 1):
        candidate = base_name if attempt == 1 else f"{base_name}-{attempt}"
        path = document_path(folder, candidate)
        if not await store.exists(path):
            return candidate
        if await _owned_by(store, path, raindrop_id):
            return candidate

    fallback = f"{base_name}-{raindrop_id}"
    logger.warning(
        "filename_attempts_exhausted",
        folder=folder,
        base_name=base_name,
        raindrop_id=raindrop_id,
        fallback=fallback,
    )
    return fallback
