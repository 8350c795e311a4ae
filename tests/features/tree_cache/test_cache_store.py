import os

import pytest
from sqlalchemy import text

from srcfinder.core.database.base import Base
from srcfinder.core.database.connection import create_cache_engine
from srcfinder.core.errors import CacheIOError
from srcfinder.features.tree_cache.data.repository import SqliteCacheStore
from srcfinder.features.tree_cache.domain.models import (
    CacheDatabase,
    DirectoryEntry,
    StatSignal,
    TraversalRules,
)

# --- FIXTURES ---

@pytest.fixture
def store():
    return SqliteCacheStore()

@pytest.fixture
def sample_database():
    return CacheDatabase(
        fingerprint="abc123",
        entries={
            ".": DirectoryEntry(".", ("lib", "x"), ("Android.bp",), StatSignal(mtime_ns=10, inode=1)),
            "x": DirectoryEntry("x", ("y",), ("Android.mk", "README"), StatSignal(mtime_ns=20, inode=2)),
            "x/y": DirectoryEntry("x/y", (), (), StatSignal(mtime_ns=30, inode=3)),
            "lib": DirectoryEntry("lib", (), ("Blueprints",), StatSignal(mtime_ns=2**62, inode=4)),
        },
    )

# --- TESTS ---

def test_load_missing_location_is_empty(store, tmp_path):
    database = store.load(tmp_path / "files.db")

    assert len(database) == 0
    assert database.fingerprint == ""
    assert not (tmp_path / "files.db").exists()

def test_saved_database_loads_back_identically(store, tmp_path, sample_database):
    location = tmp_path / "cache" / "files.db"

    store.save(sample_database, location)
    loaded = store.load(location)

    assert loaded == sample_database
    # Child order is part of the contract, not just membership.
    assert loaded.get("x").file_names == ("Android.mk", "README")

def test_save_replaces_previous_snapshot_without_leftovers(store, tmp_path, sample_database):
    location = tmp_path / "files.db"
    store.save(sample_database, location)

    smaller = CacheDatabase(fingerprint="def456", entries={".": sample_database.entries["."]})
    store.save(smaller, location)

    assert store.load(location) == smaller
    assert sorted(p.name for p in tmp_path.iterdir()) == ["files.db"]

def test_garbage_file_is_rejected(store, tmp_path):
    location = tmp_path / "files.db"
    location.write_bytes(b"definitely not sqlite")

    with pytest.raises(CacheIOError) as exc_info:
        store.load(location)

    assert isinstance(exc_info.value, IOError)
    assert str(location) in str(exc_info.value)

def test_database_without_metadata_is_rejected(store, tmp_path):
    location = tmp_path / "files.db"
    engine = create_cache_engine(location)
    Base.metadata.create_all(bind=engine)
    engine.dispose()

    with pytest.raises(CacheIOError, match="metadata"):
        store.load(location)

def test_foreign_sqlite_database_is_rejected(store, tmp_path):
    location = tmp_path / "files.db"
    engine = create_cache_engine(location)
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE unrelated (id INTEGER PRIMARY KEY)"))
    engine.dispose()

    with pytest.raises(CacheIOError):
        store.load(location)

def test_save_failure_raises_cache_io_error(store, tmp_path, sample_database):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("a file where the cache directory should be")

    with pytest.raises(CacheIOError, match="save"):
        store.save(sample_database, blocker / "files.db")

def test_staleness_compares_mtime_and_inode(store):
    entry = DirectoryEntry("x", (), (), StatSignal(mtime_ns=100, inode=7))

    assert store.is_stale(None, StatSignal(100, 7))
    assert not store.is_stale(entry, StatSignal(100, 7))
    assert store.is_stale(entry, StatSignal(101, 7))
    assert store.is_stale(entry, StatSignal(100, 8))

def test_fingerprint_tracks_rule_changes():
    base = TraversalRules("/src", exclude_dirs={".git"}, prune_files={".out-dir"})
    same = TraversalRules("/src", root_dirs=["./"], exclude_dirs=[".git"], prune_files=(".out-dir",))
    more_excludes = TraversalRules("/src", exclude_dirs={".git", ".repo"}, prune_files={".out-dir"})
    other_tree = TraversalRules("/other", exclude_dirs={".git"}, prune_files={".out-dir"})

    assert base.fingerprint() == same.fingerprint()
    assert base.fingerprint() != more_excludes.fingerprint()
    assert base.fingerprint() != other_tree.fingerprint()

def test_rules_reject_a_bare_string_for_name_sets():
    with pytest.raises(TypeError):
        TraversalRules("/src", exclude_dirs=".git")

def test_undecodable_names_survive_a_round_trip(store, tmp_path):
    cafe = os.fsdecode(b"caf\xe9")
    database = CacheDatabase(
        fingerprint="abc123",
        entries={
            ".": DirectoryEntry(".", (cafe,), (), StatSignal(mtime_ns=1, inode=1)),
            cafe: DirectoryEntry(cafe, (), ("Android.bp", os.fsdecode(b"n\xf6te")), StatSignal(mtime_ns=2, inode=2)),
        },
    )
    location = tmp_path / "files.db"

    store.save(database, location)

    assert store.load(location) == database
    assert sorted(p.name for p in tmp_path.iterdir()) == ["files.db"]

def test_failed_save_leaves_no_temp_file(store, tmp_path, sample_database, monkeypatch):
    location = tmp_path / "files.db"

    def broken_replace(src, dst):
        raise PermissionError(13, "Permission denied", str(dst))

    monkeypatch.setattr(os, "replace", broken_replace)

    with pytest.raises(CacheIOError, match="save"):
        store.save(sample_database, location)
    assert list(tmp_path.iterdir()) == []
