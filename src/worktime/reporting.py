"""Reporting utilities: CSV export and console summaries."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Iterable, Optional

from .models import CompletedDay, TrackerSnapshot

TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S"
DATE_FMT = "%Y-%m-%d"

CSV_HEADER = (
    "Date",
    "Type",
    "Start Time (Real)",
    "End Time (Real)",
    "Real Duration (seconds)",
    "Accelerated Duration (seconds)",
    "Accelerated Duration (HH:MM:SS)",
)


def export_csv(days: Iterable[CompletedDay], now: Optional[datetime] = None) -> str:
    """Flatten completed days into CSV text, one row per segment.

    Rows follow archive order, then segment order. Archived segments are
    always closed, so ``now`` only matters for malformed input.
    """
    moment = now or datetime.now()
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for day in days:
        day_label = day.date.strftime(DATE_FMT)
        for segment in day.segments:
            end = segment.end_time
            effective = segment.effective_duration(moment)
            writer.writerow(
                (
                    day_label,
                    segment.kind.label,
                    segment.start.strftime(TIMESTAMP_FMT),
                    end.strftime(TIMESTAMP_FMT) if end is not None else "",
                    int(segment.real_duration(moment)),
                    int(effective),
                    format_duration(effective),
                )
            )
    return buffer.getvalue()


def format_duration(seconds: float) -> str:
    total_seconds = int(seconds)
    sign = "-" if total_seconds < 0 else ""
    hours, remainder = divmod(abs(total_seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{sign}{hours:02d}:{minutes:02d}:{secs:02d}"


class HistoryPrinter:
    """Render human-readable summaries in the console."""

    def print_status(self, snapshot: TrackerSnapshot) -> None:
        suffix = " (accelerated)" if snapshot.accelerated else ""
        print(f"Status: {snapshot.state.value}{suffix}")
        print("-" * 40)
        print(f"Work:  {format_duration(snapshot.work_seconds)}")
        print(f"Pause: {format_duration(snapshot.pause_seconds)}")
        if snapshot.current_kind is not None and snapshot.current_start is not None:
            print(
                f"Current {snapshot.current_kind.value} since "
                f"{snapshot.current_start.strftime(TIMESTAMP_FMT)}"
            )
        if snapshot.quote:
            print()
            print(f"  {snapshot.quote}")

    def print_history(self, days: Iterable[CompletedDay]) -> None:
        days = list(days)
        if not days:
            print("No completed days recorded.")
            return
        for day in days:
            print(f"{day.date.strftime(TIMESTAMP_FMT)}  [{day.id}]")
            print(
                f"  Work: {format_duration(day.work_duration)}"
                f"   Pause: {format_duration(day.pause_duration)}"
            )
            for segment in day.segments:
                end = segment.end_time
                print(
                    f"    {segment.kind.label:<6} "
                    f"{segment.start.strftime('%H:%M')} - "
                    f"{end.strftime('%H:%M') if end else 'active'}  [{segment.id}]"
                )
