"""Resolve the folder path of a collection from its parent links."""

from __future__ import annotations

from collections.abc import Mapping

from raindrop_obsidian_sync.domain.services.filename_service import FilenameService
from raindrop_obsidian_sync.models import Collection
from raindrop_obsidian_sync.utils.logging import get_logger

logger = get_logger(__name__)


def resolve_collection_path(
    collection_id: int | None, collections: Mapping[int, Collection]
) -> list[str]:
    """Sanitised collection titles from the root down to ``collection_id``.

    Parent links are followed until a collection has no parent, the parent is
    unknown, or a collection is visited twice. A cycle truncates the path at
    the first repeated collection (it is treated as the root) and is logged.

    Returns:
        Path segments; empty when ``collection_id`` is None or unknown
    """
    segments: list[str] = []
    visited: set[int] = set()
    current = collection_id

    while current is not None:
        if current in visited:
            logger.warning(
                "collection_cycle_detected",
                collection_id=collection_id,
                repeated_id=current,
                path="/".join(segments),
            )
            break
        collection = collections.get(current)
        if collection is None:
            break
        visited.add(current)
        segments.insert(0, FilenameService.sanitize(collection.title))
        current = collection.parent_id

    return segments
