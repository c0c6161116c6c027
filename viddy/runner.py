"""The loop that runs the watched command over and over and stores the results."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Protocol

from viddy.diff import ChunkKind, diff_chunks
from viddy.execute import Shell, exec_command
from viddy.store.records import Record, Store

SUSPEND_POLL_SECONDS = 1.0


@dataclass(frozen=True)
class ExecutionSettings:
    """How often to run which command."""

    interval: timedelta
    command: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class StartExecution:
    id: int
    start_time: datetime


@dataclass(frozen=True)
class DiffDetected:
    pass


@dataclass(frozen=True)
class FinishExecution:
    id: int
    start_time: datetime
    diff: tuple[int, int] | None
    exit_code: int


class _ActionSink(Protocol):
    def put_nowait(self, item: Any) -> None: ...


class _Flag(Protocol):
    def is_set(self) -> bool: ...


def count_diff(old: str, current: str) -> tuple[int, int]:
    """Number of characters added and deleted going from old to current."""
    added = deleted = 0
    for chunk in diff_chunks(old, current):
        if chunk.kind is ChunkKind.INSERT:
            added += len(chunk.text)
        elif chunk.kind is ChunkKind.DELETE:
            deleted += len(chunk.text)
    return added, deleted


def _now() -> datetime:
    return datetime.now().astimezone()


def _first_counter(store: Store) -> int:
    latest = store.get_latest_id()
    return latest + 1 if latest is not None else 0


async def _execute(
    actions: _ActionSink,
    store: Store,
    settings: ExecutionSettings,
    shell: Shell | None,
    record_id: int,
    start_time: datetime,
) -> None:
    actions.put_nowait(StartExecution(record_id, start_time))
    try:
        stdout, stderr, exit_code = await exec_command(settings.command, shell)
    except Exception as error:
        stdout, stderr, exit_code = b"", str(error).encode(), 1
    end_time = _now()

    latest_id = store.get_latest_id()
    diff = None
    if latest_id is not None:
        previous = store.get_record(latest_id)
        if previous is not None:
            diff = count_diff(
                previous.stdout.decode("utf-8", errors="replace"),
                stdout.decode("utf-8", errors="replace"),
            )
    if diff is not None and diff != (0, 0):
        actions.put_nowait(DiffDetected())

    store.add_record(
        Record(
            id=record_id,
            start_time=start_time,
            stdout=stdout,
            stderr=stderr,
            end_time=end_time,
            exit_code=exit_code,
            diff=diff,
            previous_id=latest_id,
        )
    )
    actions.put_nowait(FinishExecution(record_id, start_time, diff, exit_code))


async def run_executor(
    actions: _ActionSink,
    store: Store,
    settings: ExecutionSettings,
    shell: Shell | None,
    is_suspend: _Flag,
) -> None:
    """Run the command forever, waiting the full interval after each run."""
    counter = _first_counter(store)
    while True:
        counter += 1
        if is_suspend.is_set():
            await asyncio.sleep(SUSPEND_POLL_SECONDS)
            continue
        await _execute(actions, store, settings, shell, counter, _now())
        await asyncio.sleep(settings.interval.total_seconds())


async def run_executor_precise(
    actions: _ActionSink,
    store: Store,
    settings: ExecutionSettings,
    shell: Shell | None,
    is_suspend: _Flag,
) -> None:
    """Run the command forever, starting runs one interval apart."""
    counter = _first_counter(store)
    while True:
        counter += 1
        start_time = _now()
        if is_suspend.is_set():
            await asyncio.sleep(SUSPEND_POLL_SECONDS)
            continue
        await _execute(actions, store, settings, shell, counter, start_time)
        remaining = settings.interval - (_now() - start_time)
        if remaining >= timedelta(0):
            await asyncio.sleep(remaining.total_seconds())