"""Filesystem-backed document store rooted at the vault directory."""

from __future__ import annotations

import asyncio
from datetime import UTC, datetime
from pathlib import Path

from raindrop_obsidian_sync.domain.interfaces.document_store import (
    IDocumentStore,
    StoreEntry,
)
from raindrop_obsidian_sync.error_codes import ErrorCode
from raindrop_obsidian_sync.exceptions import DocumentStoreError
from raindrop_obsidian_sync.utils.io import atomic_write_text
from raindrop_obsidian_sync.utils.logging import get_logger
from raindrop_obsidian_sync.vault.paths import join_path, normalize_path

logger = get_logger(__name__)


class FileSystemDocumentStore(IDocumentStore):
    """Store documents as UTF-8 files below ``root``.

    Blocking filesystem calls run in the default executor so the engine's
    event loop stays responsive.
    """

    def __init__(self, root: Path):
        self.root = Path(root).expanduser()

    def _resolve(self, path: str) -> Path:
        normalized = normalize_path(path)
        if ".." in normalized.split("/"):
            msg = f"Path escapes the vault: {path}"
            raise DocumentStoreError(msg, context={"path": path})
        return self.root / normalized if normalized else self.root

    @staticmethod
    def _mtime(target: Path) -> datetime:
        return datetime.fromtimestamp(target.stat().st_mtime, tz=UTC)

    def _entry(self, path: str, target: Path) -> StoreEntry:
        return StoreEntry(
            path=normalize_path(path),
            is_folder=target.is_dir(),
            modified=self._mtime(target),
        )

    async def read(self, path: str) -> str:
        target = self._resolve(path)

        def _read() -> str:
            # Line endings are returned as stored, matching atomic_write_text
            with target.open(encoding="utf-8", newline="") as f:
                return f.read()

        try:
            return await asyncio.to_thread(_read)
        except (OSError, UnicodeDecodeError) as e:
            msg = f"Cannot read document: {path}"
            raise DocumentStoreError(
                msg,
                error_code=ErrorCode.DOC_READ_FAILED.value,
                context={"path": path, "error": str(e)},
            ) from e

    async def write(self, path: str, content: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(atomic_write_text, target, content)
        except OSError as e:
            msg = f"Cannot write document: {path}"
            raise DocumentStoreError(
                msg,
                error_code=ErrorCode.DOC_WRITE_FAILED.value,
                context={"path": path, "error": str(e)},
            ) from e
        logger.debug("document_written", path=path)

    async def delete(self, path: str) -> None:
        target = self._resolve(path)

        def _remove() -> None:
            if target.is_dir():
                target.rmdir()
            else:
                target.unlink()

        try:
            await asyncio.to_thread(_remove)
        except OSError as e:
            msg = f"Cannot delete: {path}"
            raise DocumentStoreError(
                msg,
                error_code=ErrorCode.DOC_DELETE_FAILED.value,
                context={"path": path, "error": str(e)},
            ) from e
        logger.debug("document_deleted", path=path)

    async def list(self, folder: str) -> list[StoreEntry]:
        base = self._resolve(folder)

        def _scan() -> list[StoreEntry]:
            if not base.is_dir():
                return []
            entries = []
            for child in base.iterdir():
                try:
                    entries.append(self._entry(join_path(folder, child.name), child))
                except OSError as e:
                    # Vanished between iterdir() and stat()
                    logger.warning("store_entry_unavailable", path=str(child), error=str(e))
            return sorted(entries, key=lambda entry: entry.path)

        return await asyncio.to_thread(_scan)

    async def exists(self, path: str) -> bool:
        return await asyncio.to_thread(self._resolve(path).exists)

    async def stat(self, path: str) -> StoreEntry | None:
        target = self._resolve(path)

        def _stat() -> StoreEntry | None:
            try:
                return self._entry(path, target)
            except OSError:
                return None

        return await asyncio.to_thread(_stat)

    async def ensure_folder(self, path: str) -> None:
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.mkdir, parents=True, exist_ok=True)
        except FileExistsError as e:
            # A file occupies the folder's path
            msg = f"Cannot create folder, a file is in the way: {path}"
            raise DocumentStoreError(msg, context={"path": path}) from e
        except OSError as e:
            msg = f"Cannot create folder: {path}"
            raise DocumentStoreError(msg, context={"path": path, "error": str(e)}) from e
