import csv
import io
from datetime import datetime, timedelta

from worktime.models import Closed, CompletedDay, SegmentKind, TimeSegment
from worktime.reporting import CSV_HEADER, export_csv, format_duration

T0 = datetime(2026, 3, 2, 8, 0, 0)


def segment(kind, start_offset_s, length_s, factor=1.0):
    start = T0 + timedelta(seconds=start_offset_s)
    return TimeSegment(
        kind=kind,
        start=start,
        end=Closed(start + timedelta(seconds=length_s)),
        acceleration_factor=factor,
    )


def sample_days() -> list[CompletedDay]:
    return [
        CompletedDay(
            date=T0 + timedelta(hours=10),
            segments=(
                segment(SegmentKind.WORK, 0, 3 * 3600),
                segment(SegmentKind.PAUSE, 3 * 3600, 1800),
                segment(SegmentKind.WORK, 3 * 3600 + 1800, 3600),
            ),
        ),
        CompletedDay(
            date=T0 + timedelta(days=1, hours=1),
            segments=(segment(SegmentKind.WORK, 86400, 10.5, factor=300.0),),
        ),
    ]


def parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


def test_one_row_per_segment_in_archive_order() -> None:
    rows = parse(export_csv(sample_days()))
    assert tuple(rows[0]) == CSV_HEADER
    body = rows[1:]
    assert len(body) == 4
    assert [row[0] for row in body] == ["2026-03-02"] * 3 + ["2026-03-03"]
    assert [row[1] for row in body] == ["Work", "Pause", "Work", "Work"]


def test_row_contents() -> None:
    rows = parse(export_csv(sample_days()))
    assert rows[1] == [
        "2026-03-02",
        "Work",
        "2026-03-02 08:00:00",
        "2026-03-02 11:00:00",
        "10800",
        "10800",
        "03:00:00",
    ]


def test_durations_are_truncated() -> None:
    accelerated = parse(export_csv(sample_days()))[4]
    assert accelerated[4] == "10"
    assert accelerated[5] == "3150"
    assert accelerated[6] == "00:52:30"


def test_open_segment_has_empty_end() -> None:
    day = CompletedDay(
        date=T0, segments=(TimeSegment(kind=SegmentKind.WORK, start=T0),)
    )
    rows = parse(export_csv([day], now=T0 + timedelta(minutes=1)))
    assert rows[1][3] == ""
    assert rows[1][4] == "60"


def test_export_is_deterministic() -> None:
    days = sample_days()
    assert export_csv(days) == export_csv(days)


def test_empty_archive_has_only_header() -> None:
    assert export_csv([]).splitlines() == [",".join(CSV_HEADER)]


def test_format_duration() -> None:
    assert format_duration(0) == "00:00:00"
    assert format_duration(3661.9) == "01:01:01"
    assert format_duration(36 * 3600) == "36:00:00"
    assert format_duration(-90) == "-00:01:30"
