import logging
from datetime import datetime, timedelta

import pytest

from worktime.clock import effective_duration, real_duration
from worktime.models import Closed, SegmentKind, TimeSegment

T0 = datetime(2026, 3, 2, 9, 0, 0)


@pytest.mark.parametrize(
    "seconds, factor",
    [(0, 1.0), (90, 1.0), (3600, 300.0), (7, 2.5)],
)
def test_effective_duration_is_length_times_factor(seconds: int, factor: float) -> None:
    segment = TimeSegment(
        kind=SegmentKind.WORK,
        start=T0,
        end=Closed(T0 + timedelta(seconds=seconds)),
        acceleration_factor=factor,
    )
    assert effective_duration(segment, T0) == seconds * factor
    assert real_duration(segment, T0) == seconds


def test_open_segment_runs_until_now() -> None:
    segment = TimeSegment(kind=SegmentKind.PAUSE, start=T0, acceleration_factor=300.0)
    now = T0 + timedelta(seconds=2)
    assert segment.is_open
    assert real_duration(segment, now) == 2
    assert effective_duration(segment, now) == 600


def test_closed_segment_ignores_now() -> None:
    segment = TimeSegment(
        kind=SegmentKind.WORK, start=T0, end=Closed(T0 + timedelta(minutes=1))
    )
    assert real_duration(segment, T0 + timedelta(hours=5)) == 60


def test_negative_duration_is_reported_not_clamped(caplog) -> None:
    segment = TimeSegment(
        kind=SegmentKind.WORK,
        start=T0,
        end=Closed(T0 - timedelta(seconds=30)),
        acceleration_factor=2.0,
    )
    with caplog.at_level(logging.WARNING, logger="worktime.clock"):
        assert effective_duration(segment, T0) == -60
    assert "ends before it starts" in caplog.text


def test_factor_must_be_positive() -> None:
    with pytest.raises(ValueError):
        TimeSegment(kind=SegmentKind.WORK, start=T0, acceleration_factor=0)
