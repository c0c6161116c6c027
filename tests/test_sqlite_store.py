import sqlite3
from datetime import datetime, timezone

import pytest

from viddy.store.records import Record, RuntimeConfig
from viddy.store.sqlite_store import SQLiteStore

START = datetime(2024, 1, 2, 3, 4, 5, 123456, tzinfo=timezone.utc)
END = datetime(2024, 1, 2, 3, 4, 6, tzinfo=timezone.utc)


def make_record(record_id, diff=None, previous_id=None, stdout=b"out\n"):
    return Record(
        id=record_id,
        start_time=START,
        stdout=stdout,
        stderr=b"warn",
        end_time=END,
        exit_code=2,
        diff=diff,
        previous_id=previous_id,
    )


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "backup.sqlite"


def test_empty_store(db_path):
    with SQLiteStore(db_path, True) as store:
        assert store.get_latest_id() is None
        assert store.get_record(1) is None
        assert store.get_records() == []
        assert store.get_runtime_config() is None


def test_record_round_trip(db_path):
    record = make_record(3, diff=(4, 5), previous_id=2)
    with SQLiteStore(db_path, True) as store:
        store.add_record(record)
        loaded = store.get_record(3)
    assert loaded == record
    assert loaded.start_time.tzinfo is not None


def test_record_without_diff_round_trip(db_path):
    record = make_record(1, stdout=b"\x00\xffbinary")
    with SQLiteStore(db_path, True) as store:
        store.add_record(record)
        assert store.get_record(1) == record


def test_latest_id_is_highest(db_path):
    with SQLiteStore(db_path, True) as store:
        store.add_record(make_record(7))
        store.add_record(make_record(3))
        assert store.get_latest_id() == 7
        assert sorted(r.id for r in store.get_records()) == [3, 7]


def test_times_are_stored_as_utc_text(db_path):
    with SQLiteStore(db_path, True) as store:
        store.add_record(make_record(1))
    conn = sqlite3.connect(db_path)
    try:
        (stored,) = conn.execute("SELECT start_time FROM record").fetchone()
    finally:
        conn.close()
    assert stored == "2024-01-02T03:04:05.123456+00:00"


def test_reopen_without_init_keeps_data(db_path):
    with SQLiteStore(db_path, True) as store:
        store.add_record(make_record(1))
    with SQLiteStore(db_path, False) as store:
        assert store.get_record(1) == make_record(1)


def test_reopen_with_init_clears_data(db_path):
    with SQLiteStore(db_path, True) as store:
        store.add_record(make_record(1))
    with SQLiteStore(db_path, True) as store:
        assert store.get_latest_id() is None


def test_missing_tables_raise(db_path):
    with SQLiteStore(db_path, False) as store:
        with pytest.raises(sqlite3.OperationalError):
            store.get_latest_id()


def test_duplicate_id_raises(db_path):
    with SQLiteStore(db_path, True) as store:
        store.add_record(make_record(1))
        with pytest.raises(sqlite3.IntegrityError):
            store.add_record(make_record(1))


def test_runtime_config_latest_wins(db_path):
    with SQLiteStore(db_path, True) as store:
        store.set_runtime_config(RuntimeConfig(interval="1s", command="date"))
        store.set_runtime_config(RuntimeConfig(interval="5s", command="uptime"))
        assert store.get_runtime_config() == RuntimeConfig(interval="5s", command="uptime")