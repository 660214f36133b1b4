"""Tests for the reconciliation engine over in-memory fakes."""

import pytest

from raindrop_obsidian_sync.exceptions import RaindropApiError
from raindrop_obsidian_sync.models import SyncOutcome
from raindrop_obsidian_sync.utils.timestamps import format_timestamp
from raindrop_obsidian_sync.vault.codec import decode, document_type

UNSORTED = "Resources/Unsorted"


async def _edit_annotation(store, path: str, old: str, new: str) -> None:
    content = await store.read(path)
    assert old in content
    await store.write(path, content.replace(old, new))


def _bookmark_paths(store) -> list[str]:
    return sorted(
        path
        for path, content in store.files.items()
        if document_type(content) == "raindrop-bookmark"
    )


class TestForwardPass:
    """Remote to local: create, update, skip."""

    @pytest.mark.asyncio
    async def test_first_run_creates_documents(
        self, make_engine, service, store, make_record, collections
    ) -> None:
        service.collections = collections
        service.records = [
            make_record(1, "First", collection_id=10),
            make_record(2, "Second", collection_id=21),
            make_record(3, "Third"),
        ]

        report = await make_engine().run()

        assert report.total == 3
        assert report.created == 3
        assert report.failed == 0
        assert _bookmark_paths(store) == [
            "Resources/Dev/Python/Second.md",
            "Resources/Reading/First.md",
            "Resources/Unsorted/Third.md",
        ]
        parsed = decode(store.files["Resources/Dev/Python/Second.md"])
        assert parsed.metadata.raindrop_id == 2
        assert parsed.metadata.collection == "Python"

    @pytest.mark.asyncio
    async def test_second_run_without_changes_skips_everything(
        self, make_engine, service, store, clock, make_record, collections
    ) -> None:
        service.collections = collections
        service.records = [
            make_record(1, "First", collection_id=10, note="remote note", tags=("AI",)),
            make_record(2, "Second: with colon", collection_id=21),
        ]
        engine = make_engine()
        await engine.run()
        snapshot = dict(store.files)

        clock.advance(minutes=30)
        report = await engine.run()

        assert report.created == 0
        assert report.updated == 0
        assert report.skipped == 2
        assert report.pushed == 0
        bookmarks = {path for path in snapshot if path.endswith((".md",))}
        for path in bookmarks - {"Resources/Raindrop Sync Status.md"}:
            assert store.files[path] == snapshot[path]

    @pytest.mark.asyncio
    async def test_remote_change_updates_document(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "Article", note="old note")]
        engine = make_engine()
        await engine.run()

        service.replace(1, note="new note", tags=("Fresh",))
        clock.advance(minutes=5)
        report = await engine.run()

        assert report.updated == 1
        parsed = decode(store.files[f"{UNSORTED}/Article.md"])
        assert parsed.annotation == "new note"
        assert parsed.metadata.tags == ["raindrop-bookmarks", "fresh"]
        assert parsed.metadata.last_synced == clock()

    @pytest.mark.asyncio
    async def test_flat_layout_without_collection_folders(
        self, make_engine, service, store, make_record, collections
    ) -> None:
        service.collections = collections
        service.records = [make_record(1, "Flat", collection_id=21)]

        await make_engine(use_collection_folders=False).run()

        parsed = decode(store.files["Resources/Flat.md"])
        assert parsed.metadata.collection == "Python"

    @pytest.mark.asyncio
    async def test_unknown_collection_goes_to_unsorted(
        self, make_engine, service, store, make_record
    ) -> None:
        service.records = [make_record(1, "Lost", collection_id=999)]

        await make_engine().run()

        parsed = decode(store.files[f"{UNSORTED}/Lost.md"])
        assert parsed.metadata.collection == "Unsorted"


class TestConflictPreservation:
    """Local edits made after the last sync survive the forward pass."""

    @pytest.mark.asyncio
    async def test_edited_annotation_kept_when_title_changes(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "Original", note="remote note")]
        engine = make_engine(bidirectional_sync=False)
        await engine.run()

        clock.advance(minutes=10)
        await _edit_annotation(
            store, f"{UNSORTED}/Original.md", "remote note", "kept-text"
        )
        service.replace(1, title="Renamed")
        clock.advance(minutes=10)
        await engine.run()

        assert f"{UNSORTED}/Original.md" not in store.files
        parsed = decode(store.files[f"{UNSORTED}/Renamed.md"])
        assert parsed.annotation == "kept-text"
        assert parsed.metadata.title == "Renamed"
        assert parsed.metadata.raindrop_id == 1

    @pytest.mark.asyncio
    async def test_edited_annotation_kept_in_place(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "Stable", note="remote note")]
        engine = make_engine(bidirectional_sync=False)
        await engine.run()

        clock.advance(minutes=10)
        path = f"{UNSORTED}/Stable.md"
        await _edit_annotation(store, path, "remote note", "kept-text")
        service.replace(1, note="changed remotely", tags=("New Tag",))
        clock.advance(minutes=10)
        report = await engine.run()

        assert report.updated == 1
        parsed = decode(store.files[path])
        assert parsed.annotation == "kept-text"
        assert "new-tag" in parsed.metadata.tags
        assert parsed.metadata.last_synced == clock()

    @pytest.mark.asyncio
    async def test_write_within_grace_is_not_an_edit(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "Quick", note="remote note")]
        engine = make_engine(bidirectional_sync=False, edit_grace_seconds=5.0)
        await engine.run()

        path = f"{UNSORTED}/Quick.md"
        store.set_mtime(path, clock.advance(seconds=3))
        service.replace(1, note="newer remote note")
        clock.advance(minutes=1)
        await engine.run()

        assert decode(store.files[path]).annotation == "newer remote note"


class TestRelocationAndCleanup:
    """Collection moves, remote deletions and empty folders."""

    @pytest.mark.asyncio
    async def test_collection_change_relocates_document(
        self, make_engine, service, store, clock, make_record, collections
    ) -> None:
        service.collections = collections
        service.records = [make_record(1, "Title", collection_id=10)]
        engine = make_engine()
        await engine.run()
        assert "Resources/Reading/Title.md" in store.files

        service.replace(1, collection_id=30)
        clock.advance(minutes=5)
        report = await engine.run()

        assert "Resources/Reading/Title.md" not in store.files
        parsed = decode(store.files["Resources/Archive/Title.md"])
        assert parsed.metadata.raindrop_id == 1
        assert parsed.metadata.collection == "Archive"
        assert "Resources/Reading" not in store.folders
        assert report.created == 1

    @pytest.mark.asyncio
    async def test_duplicate_copies_collapse_to_one(
        self, make_engine, service, store, make_record
    ) -> None:
        service.records = [make_record(7, "Dup")]
        engine = make_engine()
        await engine.run()
        store.put("Resources/Elsewhere/Dup.md", store.files[f"{UNSORTED}/Dup.md"])

        await engine.run()

        assert _bookmark_paths(store) == [f"{UNSORTED}/Dup.md"]

    @pytest.mark.asyncio
    async def test_remote_deletion_removes_document_and_empty_folders(
        self, make_engine, service, store, clock, make_record, collections
    ) -> None:
        service.collections = collections
        service.records = [
            make_record(1, "Keep", collection_id=10),
            make_record(2, "Gone", collection_id=21),
        ]
        engine = make_engine()
        await engine.run()
        assert "Resources/Dev/Python/Gone.md" in store.files

        service.remove(2)
        clock.advance(minutes=5)
        report = await engine.run()

        assert report.deleted == 1
        assert "Resources/Dev/Python/Gone.md" not in store.files
        assert "Resources/Dev/Python" not in store.folders
        assert "Resources/Dev" not in store.folders
        assert "Resources/Reading/Keep.md" in store.files
        assert "Resources" in store.folders

    @pytest.mark.asyncio
    async def test_non_bookmark_documents_are_left_alone(
        self, make_engine, service, store, make_record
    ) -> None:
        store.put("Resources/My Notes.md", "# Just a note\n")
        store.put("Resources/Broken.md", "---\ntitle: x\nnot a header line\n---\nbody\n")
        service.records = [make_record(1, "Only")]

        report = await make_engine().run()

        assert report.created == 1
        assert "Resources/My Notes.md" in store.files
        assert "Resources/Broken.md" in store.files

    @pytest.mark.asyncio
    async def test_test_mode_caps_fetch_and_skips_orphan_cleanup(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(i, f"Item {i}") for i in range(1, 6)]
        await make_engine().run()

        clock.advance(minutes=5)
        report = await make_engine(test_mode=True, test_mode_limit=2).run()

        assert service.fetch_limits[-1] == 2
        assert report.total == 2
        assert report.deleted == 0
        assert len(_bookmark_paths(store)) == 5


class TestFilenameCollisions:
    """Records sharing a title get distinct, stable names."""

    @pytest.mark.asyncio
    async def test_same_title_gets_suffix_and_stays_stable(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "Same Title"), make_record(2, "Same Title")]
        engine = make_engine()
        await engine.run()

        first = decode(store.files[f"{UNSORTED}/Same Title.md"])
        second = decode(store.files[f"{UNSORTED}/Same Title-2.md"])
        assert first.metadata.raindrop_id == 1
        assert second.metadata.raindrop_id == 2

        service.records.reverse()
        clock.advance(minutes=5)
        report = await engine.run()

        assert report.skipped == 2
        assert decode(store.files[f"{UNSORTED}/Same Title.md"]).metadata.raindrop_id == 1
        assert decode(store.files[f"{UNSORTED}/Same Title-2.md"]).metadata.raindrop_id == 2

    @pytest.mark.asyncio
    async def test_empty_title_falls_back_to_id(
        self, make_engine, service, store, make_record
    ) -> None:
        service.records = [make_record(5, title="placeholder").model_copy(update={"title": ""})]

        await make_engine().run()

        assert f"{UNSORTED}/Untitled-5.md" in store.files


class TestFailureIsolation:
    """Per-record failures are counted; fetch failures abort."""

    @pytest.mark.asyncio
    async def test_one_failing_record_does_not_stop_the_pass(
        self, make_engine, service, store, make_record
    ) -> None:
        service.records = [make_record(1, "Good"), make_record(2, "Bad"), make_record(3, "Fine")]
        store.fail_writes.add(f"{UNSORTED}/Bad.md")

        report = await make_engine().run()

        assert report.created == 2
        assert report.failed == 1
        assert report.failures[0].raindrop_id == 2
        assert report.failures[0].title == "Bad"
        assert not report.count_mismatch
        status = store.files["Resources/Raindrop Sync Status.md"]
        assert "- **Failed:** 1" in status
        assert "Bad" in status

    @pytest.mark.asyncio
    async def test_unexpected_store_error_is_recorded(
        self, make_engine, service, store, make_record, monkeypatch
    ) -> None:
        service.records = [make_record(1, "Good"), make_record(2, "Too Long"), make_record(3, "Fine")]
        real_exists = store.exists

        async def _exists(path: str) -> bool:
            if "Too Long" in path:
                raise OSError(36, "File name too long")
            return await real_exists(path)

        monkeypatch.setattr(store, "exists", _exists)

        report = await make_engine().run()

        assert (report.created, report.failed) == (2, 1)
        assert report.failures[0].raindrop_id == 2
        assert "File name too long" in report.failures[0].error
        assert "Resources/Raindrop Sync Status.md" in store.files

    @pytest.mark.asyncio
    async def test_fetch_failure_aborts_run(
        self, make_engine, service, store, make_record
    ) -> None:
        service.records = [make_record(1, "Never")]
        service.fail_fetch = True
        engine = make_engine()

        with pytest.raises(RaindropApiError):
            await engine.run()

        assert _bookmark_paths(store) == []
        assert "Resources/Raindrop Sync Status.md" not in store.files
        assert engine.last_sync_time is None


class TestReversePass:
    """Local to remote: annotations and tags are pushed first."""

    @pytest.mark.asyncio
    async def test_local_edit_is_pushed_and_last_synced_rewritten(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "Pushed", tags=("Python", "Web Dev"))]
        engine = make_engine()
        await engine.run()

        path = f"{UNSORTED}/Pushed.md"
        clock.advance(minutes=10)
        await _edit_annotation(store, path, "## Notes\n\n\n", "## Notes\n\nmy local thought\n")
        clock.advance(minutes=10)
        report = await engine.run()

        assert service.updates == [(1, "my local thought", ["Python", "Web Dev"])]
        assert report.pushed == 1
        assert report.skipped == 1
        content = store.files[path]
        assert f"last_synced: {format_timestamp(clock())}" in content
        assert decode(content).annotation == "my local thought"

    @pytest.mark.asyncio
    async def test_empty_or_unchanged_documents_are_not_pushed(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "Untouched", note="n"), make_record(2, "Emptied", note="x")]
        engine = make_engine()
        await engine.run()

        clock.advance(minutes=10)
        await _edit_annotation(store, f"{UNSORTED}/Emptied.md", "## Notes\n\nx\n", "## Notes\n\n")
        clock.advance(minutes=10)
        report = await engine.run()

        assert service.updates == []
        assert report.pushed == 0

    @pytest.mark.asyncio
    async def test_push_failure_is_counted_and_local_text_survives(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "Rejected", note="remote")]
        engine = make_engine()
        await engine.run()

        path = f"{UNSORTED}/Rejected.md"
        clock.advance(minutes=10)
        await _edit_annotation(store, path, "remote", "local only")
        service.fail_updates.add(1)
        clock.advance(minutes=10)
        report = await engine.run()

        assert report.pushed == 0
        assert report.push_failed == 1
        assert report.updated == 1
        assert decode(store.files[path]).annotation == "local only"

    @pytest.mark.asyncio
    async def test_bidirectional_off_never_pushes(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "Quiet")]
        engine = make_engine(bidirectional_sync=False)
        await engine.run()

        clock.advance(minutes=10)
        await _edit_annotation(store, f"{UNSORTED}/Quiet.md", "## Notes\n\n\n", "## Notes\n\nlocal\n")
        await engine.run()

        assert service.updates == []


class TestOtherOperations:
    """Status document, undo, connection test, collection listing."""

    @pytest.mark.asyncio
    async def test_status_document_regenerated_each_run(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(1, "A"), make_record(2, "B")]
        engine = make_engine(test_mode=False)
        await engine.run()
        first = store.files["Resources/Raindrop Sync Status.md"]
        assert document_type(first) == "raindrop-sync-status"
        assert "- **Created:** 2" in first

        clock.advance(minutes=1)
        await engine.run()
        second = store.files["Resources/Raindrop Sync Status.md"]
        assert "- **Created:** 0" in second
        assert "- **Skipped:** 2" in second
        assert f"last_sync: {format_timestamp(clock())}" in second
        assert engine.last_sync_time == clock()

    @pytest.mark.asyncio
    async def test_undo_removes_only_bookmark_documents(
        self, make_engine, service, store, make_record, collections
    ) -> None:
        service.collections = collections
        service.records = [make_record(1, "One", collection_id=21), make_record(2, "Two")]
        store.put("Resources/Mine.md", "# mine\n")
        engine = make_engine()
        await engine.run()

        deleted = await engine.undo()

        assert deleted == 2
        assert _bookmark_paths(store) == []
        assert "Resources/Mine.md" in store.files
        assert "Resources/Dev" not in store.folders
        assert engine.last_sync_time is None

    @pytest.mark.asyncio
    async def test_test_connection_returns_display_name(self, make_engine) -> None:
        assert await make_engine().test_connection() == "Test User"

    @pytest.mark.asyncio
    async def test_list_collections_resolves_folders(
        self, make_engine, service, collections
    ) -> None:
        service.collections = collections

        rows = await make_engine().list_collections()

        folders = {collection.id: folder for collection, folder in rows}
        assert folders[21] == "Dev/Python"
        assert folders[10] == "Reading"


def test_outcome_values() -> None:
    assert [o.value for o in SyncOutcome] == ["created", "updated", "skipped"]


class TestReversePassEdgeCases:
    """Duplicates and unexpected storage errors during the push."""

    @pytest.mark.asyncio
    async def test_only_authoritative_copy_is_pushed(
        self, make_engine, service, store, clock, make_record
    ) -> None:
        service.records = [make_record(7, "Dup", note="original")]
        engine = make_engine()
        await engine.run()

        original = store.files[f"{UNSORTED}/Dup.md"]
        clock.advance(minutes=10)
        # Path order makes the Archive copy authoritative
        store.put("Resources/Archive/Dup.md", original.replace("original", "first copy"))
        store.put(f"{UNSORTED}/Dup.md", original.replace("original", "second copy"))
        clock.advance(minutes=10)
        report = await engine.run()

        assert service.updates == [(7, "first copy", None)]
        assert report.pushed == 1
        assert _bookmark_paths(store) == [f"{UNSORTED}/Dup.md"]

    @pytest.mark.asyncio
    async def test_unexpected_write_error_does_not_stop_push(
        self, make_engine, service, store, clock, make_record, monkeypatch
    ) -> None:
        service.records = [make_record(1, "Broken", note="a"), make_record(2, "Works", note="b")]
        engine = make_engine()
        await engine.run()

        clock.advance(minutes=10)
        await _edit_annotation(store, f"{UNSORTED}/Broken.md", "## Notes\n\na\n", "## Notes\n\nedit a\n")
        await _edit_annotation(store, f"{UNSORTED}/Works.md", "## Notes\n\nb\n", "## Notes\n\nedit b\n")
        real_write = store.write

        async def _write(path: str, content: str) -> None:
            if path.endswith("Broken.md"):
                raise OSError(28, "No space left on device")
            await real_write(path, content)

        monkeypatch.setattr(store, "write", _write)
        clock.advance(minutes=10)
        report = await engine.run()

        assert report.pushed == 1
        assert report.push_failed == 1
        assert report.failed == 1
        assert report.failures[0].raindrop_id == 1
        assert decode(store.files[f"{UNSORTED}/Works.md"]).annotation == "edit b"
