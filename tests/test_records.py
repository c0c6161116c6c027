import dataclasses
from datetime import datetime, timezone

import pytest

from viddy.store.records import Record, RuntimeConfig, Store


def make_record(**changes):
    base = Record(
        id=1,
        start_time=datetime(2024, 1, 1, tzinfo=timezone.utc),
        stdout=b"out",
        stderr=b"",
        end_time=datetime(2024, 1, 1, 0, 0, 1, tzinfo=timezone.utc),
        exit_code=0,
    )
    return dataclasses.replace(base, **changes)


def test_store_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Store()


def test_record_keeps_diff_and_previous_id():
    record = make_record(id=3, diff=(4, 5), previous_id=2)
    fields = dataclasses.asdict(record)
    assert fields["id"] == 3
    assert fields["diff"] == (4, 5)
    assert fields["previous_id"] == 2
    assert fields["stdout"] == b"out"


def test_record_is_immutable():
    record = make_record()
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.exit_code = 1
    assert record.exit_code == 0


def test_record_defaults_have_no_diff_or_previous():
    record = make_record()
    assert record.diff is None and record.previous_id is None


def test_records_with_same_fields_are_equal():
    assert make_record(diff=(1, 2)) == make_record(diff=(1, 2))
    assert make_record(diff=(1, 2)) != make_record(diff=(2, 1))


def test_runtime_config_defaults_to_empty_strings():
    assert RuntimeConfig() == RuntimeConfig(interval="", command="")