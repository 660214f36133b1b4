"""Domain interfaces package."""

from .bookmark_service import IBookmarkService
from .document_store import IDocumentStore, StoreEntry

__all__ = [
    "IBookmarkService",
    "IDocumentStore",
    "StoreEntry",
]
