"""Asynchronous HTTP client for the Raindrop.io REST API."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from raindrop_obsidian_sync.domain.interfaces.bookmark_service import IBookmarkService
from raindrop_obsidian_sync.error_codes import ErrorCode
from raindrop_obsidian_sync.exceptions import RaindropApiError
from raindrop_obsidian_sync.models import BookmarkRecord, Collection
from raindrop_obsidian_sync.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.raindrop.io/rest/v1"
# Collection id 0 means "all bookmarks" for the raindrops endpoint
ALL_BOOKMARKS_COLLECTION = 0


class RaindropClient(IBookmarkService):
    """Client for the subset of the Raindrop API used by the sync engine.

    Every request carries the bearer token. Consecutive requests are spaced
    at least ``request_interval`` seconds apart to respect the service's rate
    limit. Non-success responses raise ``RaindropApiError``; nothing is
    retried.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        per_page: int = 50,
        request_interval: float = 0.1,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            token: Raindrop API token
            base_url: REST base URL
            per_page: Page size for the bookmarks endpoint (max 50)
            request_interval: Minimum seconds between consecutive requests
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests)
        """
        self.base_url = base_url.rstrip("/")
        self.per_page = per_page
        self.request_interval = request_interval
        self._last_request_at: float | None = None
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
            transport=transport,
        )
        logger.debug(
            "raindrop_client_initialized",
            base_url=self.base_url,
            per_page=per_page,
            request_interval=request_interval,
        )

    async def __aenter__(self) -> RaindropClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _pace(self) -> None:
        """Sleep until ``request_interval`` has passed since the last request."""
        if self._last_request_at is not None and self.request_interval > 0:
            elapsed = time.monotonic() - self._last_request_at
            if elapsed < self.request_interval:
                await asyncio.sleep(self.request_interval - elapsed)
        self._last_request_at = time.monotonic()

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        await self._pace()
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.HTTPError as e:
            logger.error(
                "raindrop_request_failed",
                method=method,
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            msg = f"Request to Raindrop failed: {method} {path}"
            raise RaindropApiError(
                msg,
                suggestion="Check your network connection and try again.",
                error_code=ErrorCode.API_NETWORK.value,
                context={"method": method, "path": path, "error": str(e)},
            ) from e

        if response.status_code != 200:
            logger.error(
                "raindrop_bad_status",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            suggestion = None
            if response.status_code in (401, 403):
                suggestion = "Check that your Raindrop API token is valid."
            elif response.status_code == 429:
                suggestion = "Raindrop rate limit reached; wait a minute and sync again."
            msg = f"Raindrop API returned {response.status_code} for {method} {path}"
            raise RaindropApiError(
                msg,
                status_code=response.status_code,
                suggestion=suggestion,
                error_code=ErrorCode.API_STATUS.value,
                context={"method": method, "path": path},
            )

        try:
            data = response.json()
        except ValueError as e:
            msg = f"Raindrop API returned invalid JSON for {method} {path}"
            raise RaindropApiError(
                msg,
                status_code=response.status_code,
                error_code=ErrorCode.API_PAYLOAD.value,
            ) from e
        if not isinstance(data, dict):
            msg = f"Unexpected Raindrop API payload for {method} {path}"
            raise RaindropApiError(
                msg,
                status_code=response.status_code,
                error_code=ErrorCode.API_PAYLOAD.value,
            )
        return data

    async def get_user(self) -> dict[str, Any]:
        """Return the authenticated user's profile."""
        data = await self._request("GET", "/user")
        user = data.get("user") or {}
        logger.debug("raindrop_user_fetched", user_id=user.get("_id"))
        return user

    async def fetch_collections(self) -> list[Collection]:
        """Return every collection in one request."""
        data = await self._request("GET", "/collections")
        try:
            collections = [Collection.model_validate(item) for item in data.get("items", [])]
        except ValidationError as e:
            msg = "Unexpected collection payload from Raindrop"
            raise RaindropApiError(
                msg, error_code=ErrorCode.API_PAYLOAD.value, context={"error": str(e)}
            ) from e

        logger.info(
            "collections_fetched",
            count=len(collections),
            with_parent=sum(1 for c in collections if c.parent_id is not None),
        )
        return collections

    async def fetch_bookmarks(self, limit: int | None = None) -> list[BookmarkRecord]:
        """Fetch every bookmark page by page.

        Paging stops when a page comes back short, when the running total
        reaches the server-reported ``count``, or when ``limit`` is reached.
        """
        bookmarks: list[BookmarkRecord] = []
        total_count: int | None = None
        page = 0

        while True:
            data = await self._request(
                "GET",
                f"/raindrops/{ALL_BOOKMARKS_COLLECTION}",
                params={"perpage": self.per_page, "page": page},
            )
            items = data.get("items") or []
            if total_count is None and isinstance(data.get("count"), int):
                total_count = data["count"]

            try:
                bookmarks.extend(BookmarkRecord.model_validate(item) for item in items)
            except ValidationError as e:
                msg = f"Unexpected bookmark payload on page {page}"
                raise RaindropApiError(
                    msg,
                    error_code=ErrorCode.API_PAYLOAD.value,
                    context={"page": page, "error": str(e)},
                ) from e

            logger.debug(
                "bookmarks_page_fetched",
                page=page,
                items=len(items),
                fetched=len(bookmarks),
                total_count=total_count,
            )

            if limit is not None and len(bookmarks) >= limit:
                logger.info("bookmark_limit_reached", limit=limit)
                return bookmarks[:limit]

            if len(items) < self.per_page:
                break
            if total_count is not None and len(bookmarks) >= total_count:
                break
            page += 1

        if total_count is not None and len(bookmarks) != total_count:
            logger.warning(
                "bookmark_count_mismatch",
                fetched=len(bookmarks),
                reported=total_count,
            )
        logger.info("bookmarks_fetched", count=len(bookmarks), pages=page + 1)
        return bookmarks

    async def update_bookmark(
        self, raindrop_id: int, note: str, tags: Sequence[str] | None = None
    ) -> None:
        """Replace a bookmark's note and, when given, its full tag list."""
        payload: dict[str, Any] = {"note": note}
        if tags:
            payload["tags"] = list(tags)
        try:
            await self._request("PUT", f"/raindrop/{raindrop_id}", json=payload)
        except RaindropApiError as e:
            logger.error(
                "raindrop_update_failed",
                raindrop_id=raindrop_id,
                error=e.message,
                status_code=e.status_code,
            )
            raise
        logger.debug("raindrop_updated", raindrop_id=raindrop_id, tags=len(tags or []))
