"""Local index: one scan of the document tree, keyed by remote id."""

from __future__ import annotations

from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from raindrop_obsidian_sync.domain.interfaces.document_store import IDocumentStore
from raindrop_obsidian_sync.exceptions import DocumentError
from raindrop_obsidian_sync.models import LocalDocument
from raindrop_obsidian_sync.utils.logging import get_logger
from raindrop_obsidian_sync.vault.codec import decode
from raindrop_obsidian_sync.vault.paths import is_document

logger = get_logger(__name__)


@dataclass
class LocalIndex:
    """Bookmark documents found under the resource folder.

    ``documents`` holds every decoded bookmark document in path order.
    ``by_id`` maps each remote id to its authoritative copy: the first one in
    path order. Later copies of the same id stay in ``documents`` so the
    forward pass can remove them.
    """

    documents: list[LocalDocument] = field(default_factory=list)
    by_id: dict[int, LocalDocument] = field(default_factory=dict)
    skipped: int = 0

    def add(self, document: LocalDocument) -> None:
        self.documents.append(document)
        raindrop_id = document.raindrop_id
        if raindrop_id is None:
            return
        if raindrop_id in self.by_id:
            logger.warning(
                "duplicate_bookmark_document",
                raindrop_id=raindrop_id,
                kept=self.by_id[raindrop_id].path,
                duplicate=document.path,
            )
            return
        self.by_id[raindrop_id] = document

    def copies(self, raindrop_id: int) -> list[LocalDocument]:
        """Every indexed document carrying ``raindrop_id``."""
        return [doc for doc in self.documents if doc.raindrop_id == raindrop_id]

    def __len__(self) -> int:
        return len(self.documents)


async def iter_document_paths(store: IDocumentStore, folder: str) -> AsyncIterator[str]:
    """Yield document paths below ``folder`` depth-first in lexicographic order."""
    for entry in await store.list(folder):
        if entry.is_folder:
            async for path in iter_document_paths(store, entry.path):
                yield path
        elif is_document(entry.path):
            yield entry.path


async def build_local_index(store: IDocumentStore, root: str) -> LocalIndex:
    """Scan ``root`` and decode every bookmark document.

    Unreadable, vanished or malformed documents are logged and skipped.
    Documents without a header, and headers of other types (such as the
    status document), are ignored.
    """
    index = LocalIndex()
    async for path in iter_document_paths(store, root):
        try:
            content = await store.read(path)
            parsed = decode(content)
        except DocumentError as e:
            index.skipped += 1
            logger.warning("document_skipped", path=path, error=str(e))
            continue

        if parsed is None or not parsed.metadata.is_bookmark:
            continue

        entry = await store.stat(path)
        index.add(
            LocalDocument(
                path=path,
                metadata=parsed.metadata,
                annotation=parsed.annotation,
                content=content,
                modified=entry.modified if entry else None,
            )
        )

    logger.info(
        "local_index_built",
        root=root,
        documents=len(index.documents),
        unique_ids=len(index.by_id),
        skipped=index.skipped,
    )
    return index
