import uuid
from datetime import datetime, timedelta

import pytest

from worktime.archive import DayArchive
from worktime.errors import UnknownDayError, UnknownSegmentError
from worktime.models import Closed, CompletedDay, SegmentKind, TimeSegment

T0 = datetime(2026, 3, 2, 9, 0, 0)
NOW = datetime(2026, 3, 5, 18, 0, 0)


def make_day(factor: float = 1.0) -> CompletedDay:
    return CompletedDay(
        date=T0 + timedelta(hours=9),
        segments=(
            TimeSegment(
                kind=SegmentKind.WORK,
                start=T0,
                end=Closed(T0 + timedelta(hours=4)),
                acceleration_factor=factor,
            ),
            TimeSegment(
                kind=SegmentKind.PAUSE,
                start=T0 + timedelta(hours=4),
                end=Closed(T0 + timedelta(hours=5)),
                acceleration_factor=factor,
            ),
        ),
    )


def test_append_keeps_order() -> None:
    first, second = make_day(), make_day()
    archive = DayArchive()
    archive.append(first)
    archive.append(second)
    assert archive.days == (first, second)


class TestUpdateDay:
    def test_rebuilds_pause_then_work_ending_now(self) -> None:
        day = make_day()
        archive = DayArchive([day])

        updated = archive.update_day(day.id, work_minutes=480, pause_minutes=30, now=NOW)

        pause, work = updated.segments
        assert pause.kind is SegmentKind.PAUSE
        assert work.kind is SegmentKind.WORK
        assert work.end == Closed(NOW)
        assert pause.end == Closed(work.start)
        assert updated.work_duration == 480 * 60
        assert updated.pause_duration == 30 * 60
        assert updated.id == day.id
        assert updated.date == day.date
        assert archive.get(day.id) == updated

    def test_keeps_the_day_acceleration_factor(self) -> None:
        day = make_day(factor=300.0)
        archive = DayArchive([day])

        updated = archive.update_day(day.id, work_minutes=300, pause_minutes=0, now=NOW)

        (work,) = updated.segments
        assert work.acceleration_factor == 300.0
        assert work.real_duration() == 60
        assert updated.work_duration == 300 * 60

    def test_day_without_segments_uses_normal_speed(self) -> None:
        day = CompletedDay(date=T0)
        archive = DayArchive([day])
        updated = archive.update_day(day.id, work_minutes=60, pause_minutes=10, now=NOW)
        assert all(segment.acceleration_factor == 1.0 for segment in updated.segments)
        assert updated.segments[0].start == NOW - timedelta(minutes=70)

    def test_zero_totals_leave_no_segments(self) -> None:
        day = make_day()
        archive = DayArchive([day])
        assert archive.update_day(day.id, 0, 0, now=NOW).segments == ()

    def test_negative_minutes_rejected(self) -> None:
        day = make_day()
        archive = DayArchive([day])
        with pytest.raises(ValueError):
            archive.update_day(day.id, -1, 0, now=NOW)

    def test_unknown_day(self) -> None:
        with pytest.raises(UnknownDayError):
            DayArchive().update_day(uuid.uuid4(), 10, 0)


class TestUpdateSegment:
    def test_moves_one_segment(self) -> None:
        day = make_day()
        archive = DayArchive([day])
        target = day.segments[1]

        updated = archive.update_segment(
            day.id, target.id, target.start, target.start + timedelta(minutes=45)
        )

        assert updated.segments[0] == day.segments[0]
        assert updated.pause_duration == 45 * 60

    def test_unknown_segment(self) -> None:
        day = make_day()
        archive = DayArchive([day])
        with pytest.raises(UnknownSegmentError):
            archive.update_segment(day.id, uuid.uuid4(), T0, T0)

    def test_end_before_start_rejected(self) -> None:
        day = make_day()
        archive = DayArchive([day])
        with pytest.raises(ValueError):
            archive.update_segment(
                day.id, day.segments[0].id, T0, T0 - timedelta(minutes=1)
            )


def test_delete_day() -> None:
    keep, drop = make_day(), make_day()
    archive = DayArchive([keep, drop])
    assert archive.delete_day(drop.id) == drop
    assert archive.days == (keep,)
    with pytest.raises(UnknownDayError):
        archive.delete_day(drop.id)
