"""A store that keeps records in an SQLite database file."""

from __future__ import annotations

import os
import re
import sqlite3
import threading
from datetime import datetime, timezone

from viddy.store.records import Record, RuntimeConfig, Store

_CREATE_RECORD = """
CREATE TABLE record (
    id INTEGER PRIMARY KEY,
    start_time TEXT NOT NULL,
    stdout BLOB NOT NULL,
    stderr BLOB NOT NULL,
    end_time TEXT NOT NULL,
    exit_code INTEGER NOT NULL,
    diff_add INTEGER,
    diff_delete INTEGER,
    previous_id INTEGER
)
"""

_CREATE_RUNTIME_CONFIG = """
CREATE TABLE runtime_config (
    interval INTEGER NOT NULL,
    command TEXT NOT NULL
)
"""

_EXTRA_FRACTION = re.compile(r"(\.\d{6})\d+")


def _format_time(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat()


def _parse_time(value: str) -> datetime:
    parsed = datetime.fromisoformat(_EXTRA_FRACTION.sub(r"\1", value))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone()


def _row_to_record(row: tuple) -> Record:
    record_id, start, stdout, stderr, end, exit_code, diff_add, diff_delete, previous_id = row
    diff = None if diff_add is None or diff_delete is None else (diff_add, diff_delete)
    return Record(
        id=record_id,
        start_time=_parse_time(start),
        stdout=bytes(stdout),
        stderr=bytes(stderr),
        end_time=_parse_time(end),
        exit_code=exit_code,
        diff=diff,
        previous_id=previous_id,
    )


class SQLiteStore(Store):
    """Store backed by an SQLite file; init starts a fresh database."""

    def __init__(self, path: str | os.PathLike[str], init: bool) -> None:
        if init and os.path.exists(path):
            os.remove(path)
        self._lock = threading.Lock()
        self._conn = sqlite3.connect(path, check_same_thread=False, isolation_level=None)
        if init:
            self._conn.execute(_CREATE_RECORD)
            self._conn.execute(_CREATE_RUNTIME_CONFIG)

    def add_record(self, record: Record) -> None:
        diff_add, diff_delete = record.diff if record.diff is not None else (None, None)
        with self._lock:
            self._conn.execute(
                "INSERT INTO record (id, start_time, stdout, stderr, end_time, exit_code,"
                " diff_add, diff_delete, previous_id) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    record.id,
                    _format_time(record.start_time),
                    bytes(record.stdout),
                    bytes(record.stderr),
                    _format_time(record.end_time),
                    record.exit_code,
                    diff_add,
                    diff_delete,
                    record.previous_id,
                ),
            )

    def get_record(self, id: int) -> Record | None:
        with self._lock:
            row = self._conn.execute("SELECT * FROM record WHERE id = ?", (id,)).fetchone()
        return None if row is None else _row_to_record(row)

    def get_latest_id(self) -> int | None:
        with self._lock:
            row = self._conn.execute("SELECT id FROM record ORDER BY id DESC LIMIT 1").fetchone()
        return None if row is None else row[0]

    def get_records(self) -> list[Record]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM record").fetchall()
        return [_row_to_record(row) for row in rows]

    def get_runtime_config(self) -> RuntimeConfig | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM runtime_config ORDER BY ROWID DESC LIMIT 1"
            ).fetchone()
        if row is None:
            return None
        return RuntimeConfig(interval=str(row[0]), command=str(row[1]))

    def set_runtime_config(self, config: RuntimeConfig) -> None:
        with self._lock:
            self._conn.execute(
                "INSERT INTO runtime_config (interval, command) VALUES (?, ?)",
                (config.interval, config.command),
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> SQLiteStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()