"""Domain layer: storage/remote capability interfaces and pure services."""

from .interfaces import IBookmarkService, IDocumentStore, StoreEntry
from .services import DEFAULT_TAG, FilenameService, TagService

__all__ = [
    "DEFAULT_TAG",
    "FilenameService",
    "IBookmarkService",
    "IDocumentStore",
    "StoreEntry",
    "TagService",
]
