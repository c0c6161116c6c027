"""A store that keeps records in memory."""

from __future__ import annotations

import threading

from viddy.store.records import Record, RuntimeConfig, Store


class MemoryStore(Store):
    """Thread-safe in-memory store."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._records: dict[int, Record] = {}
        self._latest_id: int | None = None
        self._runtime_config: RuntimeConfig | None = None

    def add_record(self, record: Record) -> None:
        with self._lock:
            self._latest_id = record.id
            self._records[record.id] = record

    def get_record(self, id: int) -> Record | None:
        with self._lock:
            return self._records.get(id)

    def get_latest_id(self) -> int | None:
        with self._lock:
            return self._latest_id

    def get_records(self) -> list[Record]:
        with self._lock:
            return list(self._records.values())

    def get_runtime_config(self) -> RuntimeConfig | None:
        with self._lock:
            return self._runtime_config

    def set_runtime_config(self, config: RuntimeConfig) -> None:
        with self._lock:
            self._runtime_config = config