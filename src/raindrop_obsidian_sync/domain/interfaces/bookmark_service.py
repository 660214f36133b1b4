"""Interface for the remote bookmark service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from raindrop_obsidian_sync.models import BookmarkRecord, Collection


class IBookmarkService(ABC):
    """Remote capability consumed by the reconciliation engine."""

    async def __aenter__(self) -> IBookmarkService:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @abstractmethod
    async def get_user(self) -> dict[str, Any]:
        """Return the authenticated user's profile (connectivity check).

        Raises:
            RaindropApiError: If the request fails
        """

    @abstractmethod
    async def fetch_collections(self) -> list[Collection]:
        """Return every collection in one unpaginated request.

        Raises:
            RaindropApiError: If the request fails
        """

    @abstractmethod
    async def fetch_bookmarks(self, limit: int | None = None) -> list[BookmarkRecord]:
        """Return every bookmark, page by page.

        Args:
            limit: Optional cap on the number of records (test mode)

        Raises:
            RaindropApiError: If any page fails; the whole fetch is aborted
        """

    @abstractmethod
    async def update_bookmark(
        self, raindrop_id: int, note: str, tags: Sequence[str] | None = None
    ) -> None:
        """Replace the note (and, when given, the full tag list) of one bookmark.

        Raises:
            RaindropApiError: If the update is rejected
        """

    @abstractmethod
    async def aclose(self) -> None:
        """Release network resources."""
