"""Test applying the snapshot to the local library"""

import pytest

from conftest import make_playlist

from snapshot_sync.core.exceptions import DatabaseError
from snapshot_sync.sync.importer import import_snapshot
from snapshot_sync.sync.models import (
    SearchHistoryItem,
    Snapshot,
    Subscription,
    SubscriptionGroup,
    WatchPosition,
)
from snapshot_sync.sync.result import SyncStatus
from snapshot_sync.sync.snapshot import SnapshotStore


def _playlist_videos(database, name):
    playlist_id = database.find_playlist_id(name)
    return [item["video_id"] for item in database.get_playlist_items(playlist_id)]


class TestImportSkippedOrFailed:
    """Test imports that must not touch the library"""

    def test_no_location(self, library):
        result = import_snapshot(library, SnapshotStore(None))

        assert result.status is SyncStatus.SKIPPED

    def test_missing_document(self, library, snapshot_store):
        result = import_snapshot(library, snapshot_store)

        assert result.status is SyncStatus.SKIPPED
        assert sum(library.counts().values()) == 0

    def test_corrupt_document(self, library, database, snapshot_store):
        """Nothing is applied when the document cannot be decoded"""
        database.upsert_rows("search_history", [{"query": "local"}])
        snapshot_store.path.write_text('{"searchHistory": [{"query": "remote"}', encoding="utf-8")

        result = import_snapshot(library, snapshot_store)

        assert result.status is SyncStatus.IO_ERROR
        assert database.fetch_all("search_history") == [{"query": "local"}]

    def test_malformed_record_applies_nothing(self, library, database, write_document, snapshot_store):
        write_document({
            "searchHistory": [{"query": "remote"}],
            "watchPositions": [{"position": 10}],
        })

        result = import_snapshot(library, snapshot_store)

        assert result.status is SyncStatus.IO_ERROR
        assert database.count("search_history") == 0

    def test_wrongly_typed_field_applies_nothing(self, library, database, write_document, snapshot_store):
        """A field of the wrong JSON type fails before earlier collections are upserted"""
        write_document({
            "searchHistory": [{"query": "remote"}],
            "subscriptions": [{"channelId": "UC1", "name": {"bad": 1}}],
        })

        result = import_snapshot(library, snapshot_store)

        assert result.status is SyncStatus.IO_ERROR
        assert database.fetch_all("search_history") == []
        assert database.count("subscriptions") == 0

    def test_document_removed_before_read(self, library, snapshot_store, monkeypatch):
        """A snapshot deleted after the existence check is still a skip"""
        monkeypatch.setattr(snapshot_store, "exists", lambda: True)

        result = import_snapshot(library, snapshot_store)

        assert result.status is SyncStatus.SKIPPED
        assert sum(library.counts().values()) == 0


class TestImportFlatCollections:
    """Test upserting flat collections"""

    def test_snapshot_replaces_shared_keys(self, library, database, snapshot_store):
        database.upsert_rows("watch_positions", [{"video_id": "v1", "position": 10}])
        snapshot_store.write(Snapshot(watch_positions=(WatchPosition("v1", 50),)))

        result = import_snapshot(library, snapshot_store)

        assert result.status is SyncStatus.SUCCESS
        assert result.counts["watch_positions"] == 1
        assert database.fetch_all("watch_positions") == [{"video_id": "v1", "position": 50}]

    def test_local_only_records_are_kept(self, library, database, snapshot_store):
        database.upsert_rows("search_history", [{"query": "local"}])
        snapshot_store.write(Snapshot(search_history=(SearchHistoryItem("remote"),)))

        import_snapshot(library, snapshot_store)

        assert database.fetch_all("search_history") == [{"query": "local"}, {"query": "remote"}]

    def test_absent_collections_are_untouched(self, library, database, write_document, snapshot_store):
        """A null or missing collection means nothing to apply"""
        database.upsert_rows("search_history", [{"query": "local"}])
        write_document({"searchHistory": None, "watchPositions": [{"videoId": "v1", "position": 5}]})

        result = import_snapshot(library, snapshot_store)

        assert result.status is SyncStatus.SUCCESS
        assert "search_history" not in result.counts
        assert database.fetch_all("search_history") == [{"query": "local"}]

    def test_groups_are_stored(self, library, snapshot_store):
        snapshot_store.write(Snapshot(groups=(SubscriptionGroup("Music", ("UC1", "UC2"), 1),)))

        import_snapshot(library, snapshot_store)

        assert library.load_snapshot().groups == (SubscriptionGroup("Music", ("UC1", "UC2"), 1),)

    def test_subscription_url_is_stored(self, library, write_document, snapshot_store):
        write_document({"subscriptions": [
            {"channelId": "UC1", "url": "/channel/UC1", "name": "Channel", "verified": True},
        ]})

        import_snapshot(library, snapshot_store)

        (subscription,) = library.load_snapshot().subscriptions
        assert subscription == Subscription("UC1", "Channel", verified=True, url="/channel/UC1")


class TestImportPlaylists:
    """Test find-or-create and per-video insertion"""

    def test_new_playlist_gets_local_id(self, library, database, snapshot_store):
        database.create_playlist({"name": "Existing"})
        snapshot_store.write(Snapshot(local_playlists=(make_playlist("Road Trip", "A", "B", playlist_id=42),)))

        result = import_snapshot(library, snapshot_store)

        playlist_id = database.find_playlist_id("Road Trip")
        assert playlist_id != 42
        assert _playlist_videos(database, "Road Trip") == ["A", "B"]
        assert result.counts["videos_added"] == 2
        assert result.counts["local_playlists"] == 1

    def test_existing_playlist_is_reused(self, library, database, snapshot_store):
        playlist_id = database.create_playlist({"name": "Favorites"})
        database.add_playlist_item(playlist_id, {"video_id": "A"})
        snapshot_store.write(Snapshot(local_playlists=(make_playlist("Favorites", "A", "B"),)))

        result = import_snapshot(library, snapshot_store)

        assert database.count("local_playlists") == 1
        assert _playlist_videos(database, "Favorites") == ["A", "B"]
        assert result.counts["videos_added"] == 1
        assert result.counts["videos_skipped"] == 1

    def test_duplicate_video_in_snapshot(self, library, database, snapshot_store):
        """A repeated video is skipped without affecting the others"""
        snapshot_store.write(Snapshot(local_playlists=(make_playlist("Mix", "A", "A", "B"),)))

        result = import_snapshot(library, snapshot_store)

        assert result.status is SyncStatus.SUCCESS
        assert _playlist_videos(database, "Mix") == ["A", "B"]
        assert result.counts["videos_skipped"] == 1

    def test_reimport_is_idempotent(self, library, database, snapshot_store):
        snapshot_store.write(Snapshot(
            watch_positions=(WatchPosition("v1", 50),),
            local_playlists=(make_playlist("Mix", "A", "B"),),
        ))

        import_snapshot(library, snapshot_store)
        first = library.counts()
        result = import_snapshot(library, snapshot_store)

        assert library.counts() == first
        assert result.counts["videos_added"] == 0
        assert result.counts["videos_skipped"] == 2

    def test_on_video_callback(self, library, database, snapshot_store):
        playlist_id = database.create_playlist({"name": "Mix"})
        database.add_playlist_item(playlist_id, {"video_id": "A"})
        snapshot_store.write(Snapshot(local_playlists=(make_playlist("Mix", "A", "B"),)))
        calls = []

        import_snapshot(library, snapshot_store, on_video=calls.append)

        assert calls == [False, True]

    def test_store_failure_keeps_applied_changes(self, library, database, snapshot_store, monkeypatch):
        snapshot_store.write(Snapshot(
            search_history=(SearchHistoryItem("remote"),),
            local_playlists=(make_playlist("Mix", "A"),),
        ))

        def fail_create(playlist):
            raise DatabaseError("disk I/O error")

        monkeypatch.setattr(library, "create_playlist", fail_create)

        result = import_snapshot(library, snapshot_store)

        assert result.status is SyncStatus.IO_ERROR
        assert result.counts["search_history"] == 1
        assert database.fetch_all("search_history") == [{"query": "remote"}]


@pytest.mark.parametrize("document", [{}, {"localPlaylists": []}])
def test_empty_snapshot_imports_nothing(library, write_document, snapshot_store, document):
    write_document(document)

    result = import_snapshot(library, snapshot_store)

    assert result.status is SyncStatus.SUCCESS
    assert sum(library.counts().values()) == 0
