"""Execution records and the interface of the stores that keep them."""

from __future__ import annotations

import abc
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Record:
    """The outcome of one execution of the watched command."""

    id: int
    start_time: datetime
    stdout: bytes
    stderr: bytes
    end_time: datetime
    exit_code: int
    diff: tuple[int, int] | None = None
    previous_id: int | None = None


@dataclass(frozen=True)
class RuntimeConfig:
    """The interval and command a session was started with, as text."""

    interval: str = ""
    command: str = ""


class Store(abc.ABC):
    """Storage of execution records and the session's runtime configuration."""

    @abc.abstractmethod
    def add_record(self, record: Record) -> None:
        """Store a record; it becomes the latest one."""

    @abc.abstractmethod
    def get_record(self, id: int) -> Record | None:
        """The record with this id, or None."""

    @abc.abstractmethod
    def get_latest_id(self) -> int | None:
        """The id of the latest record, or None when there is none."""

    @abc.abstractmethod
    def get_records(self) -> list[Record]:
        """All stored records."""

    @abc.abstractmethod
    def get_runtime_config(self) -> RuntimeConfig | None:
        """The last runtime configuration set, or None."""

    @abc.abstractmethod
    def set_runtime_config(self, config: RuntimeConfig) -> None:
        """Record the runtime configuration."""