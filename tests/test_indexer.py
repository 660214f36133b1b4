"""Tests for the local index builder."""

import pytest

from raindrop_obsidian_sync.sync.indexer import build_local_index, iter_document_paths


def _doc(raindrop_id: int, notes: str = "") -> str:
    return (
        f"---\nraindrop_id: {raindrop_id}\ntype: raindrop-bookmark\n"
        f"last_synced: 2024-01-01T00:00:00.000Z\n---\n\n## Notes\n\n{notes}\n"
    )


@pytest.mark.asyncio
async def test_scan_is_recursive_and_sorted(store) -> None:
    store.put("Resources/b.md", _doc(2))
    store.put("Resources/A/z.md", _doc(3))
    store.put("Resources/a.md", _doc(1))
    store.put("Resources/image.png", "binary")

    paths = [path async for path in iter_document_paths(store, "Resources")]

    assert paths == ["Resources/A/z.md", "Resources/a.md", "Resources/b.md"]


@pytest.mark.asyncio
async def test_index_by_id_and_skips(store) -> None:
    store.put("Resources/one.md", _doc(1, "first"))
    store.put("Resources/plain.md", "# no header\n")
    store.put("Resources/status.md", "---\ntype: raindrop-sync-status\n---\n")
    store.put("Resources/broken.md", "---\nnot valid\n---\n")
    store.put("Resources/unreadable.md", _doc(9))
    store.fail_reads.add("Resources/unreadable.md")

    index = await build_local_index(store, "Resources")

    assert list(index.by_id) == [1]
    assert index.by_id[1].annotation == "first"
    assert index.by_id[1].modified == store.clock()
    assert index.skipped == 2


@pytest.mark.asyncio
async def test_first_copy_in_path_order_is_authoritative(store) -> None:
    store.put("Resources/B/dup.md", _doc(5, "later"))
    store.put("Resources/A/dup.md", _doc(5, "earlier"))

    index = await build_local_index(store, "Resources")

    assert index.by_id[5].path == "Resources/A/dup.md"
    assert [doc.path for doc in index.copies(5)] == ["Resources/A/dup.md", "Resources/B/dup.md"]
    assert len(index) == 2


@pytest.mark.asyncio
async def test_missing_root_yields_empty_index(store) -> None:
    index = await build_local_index(store, "Nowhere")

    assert len(index) == 0
