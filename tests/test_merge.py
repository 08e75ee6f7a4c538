"""Test keyed and playlist merge primitives"""

from conftest import make_playlist, video_ids

from snapshot_sync.sync.merge import Precedence, merge_keyed, merge_playlists
from snapshot_sync.sync.models import LocalPlaylist, PlaylistWithVideos, WatchPosition


def key(record):
    return record.merge_key


class TestMergeKeyed:
    """Test merge_keyed"""

    def test_base_record_wins_shared_key(self):
        """Record from base survives when both sides have the key"""
        base = [WatchPosition("X", 10)]
        incoming = [WatchPosition("X", 50)]

        merged = merge_keyed(base, incoming, key)

        assert merged == [WatchPosition("X", 10)]

    def test_incoming_only_keys_are_appended(self):
        """Keys only incoming has follow base records in incoming order"""
        base = [WatchPosition("A", 1), WatchPosition("B", 2)]
        incoming = [WatchPosition("C", 3), WatchPosition("B", 99), WatchPosition("D", 4)]

        merged = merge_keyed(base, incoming, key)

        assert [r.video_id for r in merged] == ["A", "B", "C", "D"]
        assert merged[1].position == 2

    def test_empty_inputs(self):
        """Empty inputs yield an empty result"""
        assert merge_keyed([], [], key) == []
        assert merge_keyed([WatchPosition("A")], [], key) == [WatchPosition("A")]
        assert merge_keyed([], [WatchPosition("A")], key) == [WatchPosition("A")]

    def test_duplicates_within_one_input_collapse(self):
        """First occurrence wins inside a single input too"""
        base = [WatchPosition("A", 1), WatchPosition("A", 2)]

        merged = merge_keyed(base, [], key)

        assert merged == [WatchPosition("A", 1)]

    def test_inputs_are_not_modified(self):
        """Merge works on copies"""
        base = [WatchPosition("A", 1)]
        incoming = [WatchPosition("B", 2)]

        merge_keyed(base, incoming, key)

        assert base == [WatchPosition("A", 1)]
        assert incoming == [WatchPosition("B", 2)]

    def test_prefer_incoming_keeps_position_but_takes_incoming_record(self):
        """PREFER_INCOMING replaces the record without reordering"""
        base = [WatchPosition("A", 1), WatchPosition("B", 2)]
        incoming = [WatchPosition("A", 50)]

        merged = merge_keyed(base, incoming, key, Precedence.PREFER_INCOMING)

        assert merged == [WatchPosition("A", 50), WatchPosition("B", 2)]

    def test_every_key_appears_exactly_once(self):
        """No key is lost and none is duplicated"""
        base = [WatchPosition(v) for v in "ABCA"]
        incoming = [WatchPosition(v) for v in "CDEB"]

        merged = merge_keyed(base, incoming, key)

        ids = [r.video_id for r in merged]
        assert sorted(ids) == ["A", "B", "C", "D", "E"]
        assert len(ids) == len(set(ids))


class TestMergePlaylists:
    """Test merge_playlists"""

    def test_same_name_playlists_union_their_videos(self):
        """Favorites {A,B} + Favorites {B,C} -> Favorites {A,B,C}"""
        base = [make_playlist("Favorites", "A", "B", playlist_id=1)]
        incoming = [make_playlist("Favorites", "B", "C", playlist_id=7)]

        merged = merge_playlists(base, incoming)

        assert len(merged) == 1
        assert merged[0].playlist == LocalPlaylist(name="Favorites", id=1)
        assert video_ids(merged[0]) == ["A", "B", "C"]

    def test_losing_metadata_does_not_lose_videos(self):
        """Videos of the playlist whose metadata lost are still merged"""
        base = [make_playlist("Trip", playlist_id=1)]
        incoming = [make_playlist("Trip", "X", "Y", playlist_id=2)]

        merged = merge_playlists(base, incoming)

        assert merged[0].playlist.id == 1
        assert video_ids(merged[0]) == ["X", "Y"]

    def test_distinct_names_are_kept_in_order(self):
        """Playlists with different names are all kept"""
        base = [make_playlist("One", "A"), make_playlist("Two", "B")]
        incoming = [make_playlist("Three", "C"), make_playlist("One", "D")]

        merged = merge_playlists(base, incoming)

        assert [entry.playlist.name for entry in merged] == ["One", "Two", "Three"]
        assert video_ids(merged[0]) == ["A", "D"]

    def test_duplicate_names_within_base_are_merged(self):
        """Two same-named playlists on one side collapse into one"""
        base = [make_playlist("Mix", "A", playlist_id=1), make_playlist("Mix", "A", "B", playlist_id=2)]

        merged = merge_playlists(base, [])

        assert len(merged) == 1
        assert merged[0].playlist.id == 1
        assert video_ids(merged[0]) == ["A", "B"]

    def test_prefer_incoming_takes_incoming_metadata(self):
        """PREFER_INCOMING picks the last playlist's metadata"""
        base = [PlaylistWithVideos(LocalPlaylist(name="Mix", description="old"))]
        incoming = [PlaylistWithVideos(LocalPlaylist(name="Mix", description="new"))]

        merged = merge_playlists(base, incoming, Precedence.PREFER_INCOMING)

        assert merged[0].playlist.description == "new"

    def test_empty_inputs(self):
        assert merge_playlists([], []) == []
