"""Test configuration and fixtures"""

import json
import tempfile
from pathlib import Path

import pytest

from snapshot_sync.core.database import Database
from snapshot_sync.sync.library import Library
from snapshot_sync.sync.models import (
    LocalPlaylist,
    LocalPlaylistItem,
    PlaylistWithVideos,
)
from snapshot_sync.sync.snapshot import SnapshotStore


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def database(temp_dir):
    """Fresh SQLite database in the temporary directory"""
    db = Database(temp_dir / "database.db")
    yield db
    db.close()


@pytest.fixture
def library(database):
    return Library(database)


@pytest.fixture
def sync_dir(temp_dir):
    """Shared folder that holds the snapshot document"""
    path = temp_dir / "shared"
    path.mkdir()
    return path


@pytest.fixture
def snapshot_store(sync_dir):
    return SnapshotStore(sync_dir)


@pytest.fixture
def write_document(snapshot_store):
    """Write a raw JSON document to the snapshot location"""
    def write(document):
        snapshot_store.path.write_text(json.dumps(document), encoding="utf-8")
        return snapshot_store.path
    return write


def make_playlist(name, *video_ids, playlist_id=0):
    """Build a playlist with one video per id"""
    return PlaylistWithVideos(
        playlist=LocalPlaylist(name=name, id=playlist_id),
        videos=tuple(
            LocalPlaylistItem(video_id=video_id, title=f"Video {video_id}", playlist_id=playlist_id)
            for video_id in video_ids
        ),
    )


def video_ids(entry):
    return [video.video_id for video in entry.videos]
