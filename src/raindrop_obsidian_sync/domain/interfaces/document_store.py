"""Interface for the storage that holds the local document tree."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class StoreEntry:
    """A file or folder in the document store.

    Paths are vault-relative, forward-slash separated, with no leading or
    trailing slash (see ``vault.paths.normalize_path``).
    """

    path: str
    is_folder: bool
    modified: datetime | None = None

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def extension(self) -> str:
        name = self.name
        return name.rsplit(".", 1)[-1].lower() if "." in name else ""


class IDocumentStore(ABC):
    """Storage capability consumed by the reconciliation engine.

    Implementations may be backed by a real filesystem, an in-memory map
    (tests) or another document store. All operations are coroutines so the
    engine can run them as one cooperative sequence.
    """

    @abstractmethod
    async def read(self, path: str) -> str:
        """Return the text of the document at ``path``.

        Raises:
            DocumentStoreError: If the document is missing or unreadable
        """

    @abstractmethod
    async def write(self, path: str, content: str) -> None:
        """Create or replace the document at ``path``, creating parent folders.

        Raises:
            DocumentStoreError: If the document cannot be written
        """

    @abstractmethod
    async def delete(self, path: str) -> None:
        """Delete the document, or the folder if it is empty.

        Raises:
            DocumentStoreError: If nothing exists at ``path`` or it cannot be removed
        """

    @abstractmethod
    async def list(self, folder: str) -> list[StoreEntry]:
        """Return the direct children of ``folder`` sorted by path.

        A missing folder yields an empty list.
        """

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Return True if a file or folder exists at ``path``."""

    @abstractmethod
    async def stat(self, path: str) -> StoreEntry | None:
        """Return the entry for ``path`` (with modification time) or None."""

    @abstractmethod
    async def ensure_folder(self, path: str) -> None:
        """Create ``path`` and its parents; an existing folder is a no-op."""
