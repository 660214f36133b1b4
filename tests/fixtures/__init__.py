"""Test fixtures package."""

from .mock_bookmark_service import MockBookmarkService
from .mock_document_store import FakeClock, MockDocumentStore

__all__ = [
    "FakeClock",
    "MockBookmarkService",
    "MockDocumentStore",
]
