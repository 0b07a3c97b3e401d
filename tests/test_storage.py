from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from worktime import codec
from worktime.models import Closed, CompletedDay, SegmentKind, TimeSegment
from worktime.storage import SQLiteBlobStore, blob_store

T0 = datetime(2026, 3, 2, 8, 0, 0)


def test_missing_key_loads_none(tmp_path) -> None:
    with blob_store(tmp_path / "state.sqlite3") as store:
        assert store.load("current_segments") is None


def test_save_overwrites_and_survives_reopen(tmp_path) -> None:
    path = tmp_path / "state.sqlite3"
    with blob_store(path) as store:
        store.save("accelerated", b"false")
        store.save("accelerated", b"true")

    reopened = SQLiteBlobStore(path)
    try:
        assert reopened.load("accelerated") == b"true"
    finally:
        reopened.close()


def test_segments_keep_open_and_closed_ends() -> None:
    segments = (
        TimeSegment(
            kind=SegmentKind.WORK,
            start=T0,
            end=Closed(T0 + timedelta(hours=1)),
            acceleration_factor=300.0,
        ),
        TimeSegment(kind=SegmentKind.PAUSE, start=T0 + timedelta(hours=1)),
    )
    decoded = codec.decode_segments(codec.encode_segments(segments))
    assert tuple(decoded) == segments
    assert not decoded[0].is_open
    assert decoded[1].is_open


def test_days_decode_to_frozen_segments() -> None:
    day = CompletedDay(
        date=T0,
        segments=(
            TimeSegment(kind=SegmentKind.WORK, start=T0, end=Closed(T0 + timedelta(hours=2))),
        ),
    )
    (decoded,) = codec.decode_days(codec.encode_days((day,)))
    assert decoded == day
    assert isinstance(decoded.segments, tuple)


@pytest.mark.parametrize(
    "blob",
    [
        b"not json",
        b'[{"id": "x", "kind": "work", "start": "2026-03-02T08:00:00"}]',
        b'[{"id": "3f8a3c1e-5a0b-4a0c-9a4b-1c2d3e4f5a6b", "kind": "nap",'
        b' "start": "2026-03-02T08:00:00"}]',
        b'[{"id": "3f8a3c1e-5a0b-4a0c-9a4b-1c2d3e4f5a6b", "kind": "work",'
        b' "start": "2026-03-02T08:00:00Z"}]',
    ],
)
def test_corrupt_segments_raise_validation_error(blob: bytes) -> None:
    with pytest.raises(ValidationError):
        codec.decode_segments(blob)


def test_non_positive_factor_is_rejected() -> None:
    blob = (
        b'[{"id": "3f8a3c1e-5a0b-4a0c-9a4b-1c2d3e4f5a6b", "kind": "work",'
        b' "start": "2026-03-02T08:00:00", "acceleration_factor": 0}]'
    )
    with pytest.raises(ValidationError):
        codec.decode_segments(blob)


def test_days_with_zoned_dates_are_rejected() -> None:
    blob = b'[{"id": "3f8a3c1e-5a0b-4a0c-9a4b-1c2d3e4f5a6b", "date": "2026-03-02T18:00:00+01:00"}]'
    with pytest.raises(ValidationError):
        codec.decode_days(blob)


def test_save_many_writes_all_keys(tmp_path) -> None:
    with blob_store(tmp_path / "state.sqlite3") as store:
        store.save_many({"accelerated": b"true", "current_segments": b"[]"})
        assert store.load("accelerated") == b"true"
        assert store.load("current_segments") == b"[]"


def test_save_many_rolls_back_on_failure(tmp_path) -> None:
    with blob_store(tmp_path / "state.sqlite3") as store:
        store.save("accelerated", b"false")
        with pytest.raises(TypeError):
            store.save_many({"accelerated": b"true", "current_segments": None})
        assert store.load("accelerated") == b"false"
        assert store.load("current_segments") is None
        store.save("completed_days", b"[]")
        assert store.load("completed_days") == b"[]"
