"""Tests for orphan removal, undo and folder pruning."""

import pytest

from raindrop_obsidian_sync.sync.cleanup import prune_empty_folders, remove_orphans, undo_all
from raindrop_obsidian_sync.sync.indexer import build_local_index


def _doc(raindrop_id: int) -> str:
    return f"---\nraindrop_id: {raindrop_id}\ntype: raindrop-bookmark\n---\n"


@pytest.mark.asyncio
async def test_prune_removes_nested_empty_folders(store) -> None:
    await store.ensure_folder("Resources/A/B/C")
    await store.ensure_folder("Resources/Keep")
    store.put("Resources/Keep/note.md", "x")

    removed = await prune_empty_folders(store, "Resources")

    assert removed == 3
    assert store.folders == {"Resources", "Resources/Keep"}


@pytest.mark.asyncio
async def test_remove_orphans(store) -> None:
    store.put("Resources/X/keep.md", _doc(1))
    store.put("Resources/Y/gone.md", _doc(2))
    index = await build_local_index(store, "Resources")

    deleted = await remove_orphans(store, index, {1})

    assert deleted == 1
    assert "Resources/Y/gone.md" not in store.files
    assert "Resources/X/keep.md" in store.files


@pytest.mark.asyncio
async def test_remove_orphans_tolerates_vanished_documents(store) -> None:
    store.put("Resources/gone.md", _doc(2))
    index = await build_local_index(store, "Resources")
    del store.files["Resources/gone.md"]

    assert await remove_orphans(store, index, set()) == 0


@pytest.mark.asyncio
async def test_undo_all_matches_type_marker_only(store) -> None:
    store.put("Resources/A/one.md", _doc(1))
    store.put("Resources/A/damaged.md", "---\nraindrop_id: nope\ntype: raindrop-bookmark\n---\n")
    store.put("Resources/mine.md", "# mine\n")
    store.put("Resources/status.md", "---\ntype: raindrop-sync-status\n---\n")

    deleted = await undo_all(store, "Resources")

    assert deleted == 2
    assert sorted(store.files) == ["Resources/mine.md", "Resources/status.md"]
    assert "Resources/A" not in store.folders
