"""Pytest configuration and fixtures for the test suite."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from raindrop_obsidian_sync.config import Config
from raindrop_obsidian_sync.models import BookmarkRecord, Collection
from raindrop_obsidian_sync.sync.engine import SyncEngine
from raindrop_obsidian_sync.utils.logging import configure_logging
from tests.fixtures import FakeClock, MockBookmarkService, MockDocumentStore


@pytest.fixture(autouse=True, scope="session")
def _test_logging(tmp_path_factory):
    """Send log files to a temporary directory."""
    configure_logging("DEBUG", log_dir=tmp_path_factory.mktemp("logs"))


@pytest.fixture
def clock():
    """Provide a controllable clock starting at 2024-03-01 12:00 UTC."""
    return FakeClock()


@pytest.fixture
def store(clock):
    """Provide an in-memory document store stamped by ``clock``."""
    return MockDocumentStore(clock)


@pytest.fixture
def service():
    """Provide a scripted bookmark service."""
    return MockBookmarkService()


@pytest.fixture
def make_record() -> Callable[..., BookmarkRecord]:
    """Factory for bookmark records with sensible defaults."""

    def _make(raindrop_id: int, title: str = "", **fields: Any) -> BookmarkRecord:
        data: dict[str, Any] = {
            "id": raindrop_id,
            "title": title or f"Bookmark {raindrop_id}",
            "link": f"https://example.com/{raindrop_id}",
            "note": "",
            "tags": (),
            "created": datetime(2024, 1, 5, 10, 0, tzinfo=UTC),
            "domain": "example.com",
        }
        data.update(fields)
        return BookmarkRecord(**data)

    return _make


@pytest.fixture
def make_config(tmp_path) -> Callable[..., Config]:
    """Factory for configs that never touch the network or the real vault."""

    def _make(**overrides: Any) -> Config:
        values: dict[str, Any] = {
            "raindrop_token": "test-token",
            "vault_path": tmp_path,
            "log_dir": tmp_path / "logs",
            "resource_folder": "Resources",
            "request_interval": 0.0,
            "edit_grace_seconds": 2.0,
        }
        values.update(overrides)
        return Config(**values)

    return _make


@pytest.fixture
def collections() -> list[Collection]:
    """Provide a small collection tree: Reading, Dev > Python, Archive."""
    return [
        Collection(id=10, title="Reading", count=1),
        Collection(id=20, title="Dev", count=1),
        Collection(id=21, title="Python", count=1, parent_id=20),
        Collection(id=30, title="Archive", count=0),
    ]


@pytest.fixture
def make_engine(make_config, store, service, clock) -> Callable[..., SyncEngine]:
    """Factory for engines over the in-memory store and the scripted service."""

    def _make(**overrides: Any) -> SyncEngine:
        return SyncEngine(make_config(**overrides), store, service, clock=clock)

    return _make
