"""Tests for database initialization and the key-value store."""
import logging
import sqlite3

import pytest

from flashdrill.db import KeyValueStore, get_connection, init_db


def test_kv_store_schema(tmp_db):
    init_db(tmp_db)
    init_db(tmp_db)
    conn = get_connection(tmp_db)
    columns = [row["name"] for row in conn.execute("PRAGMA table_info(kv_store)")]
    conn.close()
    assert columns == ["key", "value", "updated_at"]


def test_new_store_is_available(storage):
    assert storage.available
    assert storage.keys() == []


def test_non_sqlite_file_marks_store_unavailable(tmp_path, caplog):
    db_path = tmp_path / "notes.db"
    db_path.write_bytes(b"this is not a database\n" * 64)
    with caplog.at_level(logging.WARNING, logger="flashdrill.db"):
        storage = KeyValueStore(str(db_path))
    assert not storage.available
    assert "unavailable" in caplog.text
    with pytest.raises(sqlite3.DatabaseError):
        storage.load("anything")


def test_unwritable_location_marks_store_unavailable(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file where a directory should be")
    storage = KeyValueStore(str(blocker / "flashdrill.db"))
    assert not storage.available
    with pytest.raises(sqlite3.Error):
        storage.load("anything")


def test_init_db_creates_parent_directory(tmp_path):
    db_path = tmp_path / "nested" / "dir" / "flashdrill.db"
    init_db(str(db_path))
    assert db_path.exists()


def test_load_missing_key_returns_none(storage):
    assert storage.load("nothing") is None


def test_save_and_load(storage):
    storage.save("k", "value")
    assert storage.load("k") == "value"


def test_save_overwrites(storage):
    storage.save("k", "one")
    storage.save("k", "two")
    assert storage.load("k") == "two"
    assert storage.keys() == ["k"]


def test_save_is_durable_across_instances(tmp_db):
    KeyValueStore(tmp_db).save("k", "persisted")
    assert KeyValueStore(tmp_db).load("k") == "persisted"


def test_delete_several_keys(storage):
    storage.save("a", "1")
    storage.save("b", "2")
    storage.save("c", "3")
    storage.delete("a", "b")
    assert storage.keys() == ["c"]


def test_delete_missing_key_is_noop(storage):
    storage.delete("ghost")
    storage.delete()
    assert storage.keys() == []
