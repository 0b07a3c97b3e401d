"""Archive of finished days and the edit operations on it."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Iterator, Optional

from .clock import NORMAL_FACTOR
from .errors import UnknownDayError, UnknownSegmentError
from .models import Closed, CompletedDay, SegmentKind, TimeSegment


class DayArchive:
    """Completed days in the order they were finished."""

    def __init__(self, days: Iterable[CompletedDay] = ()) -> None:
        self._days: list[CompletedDay] = list(days)

    def __iter__(self) -> Iterator[CompletedDay]:
        return iter(self._days)

    def __len__(self) -> int:
        return len(self._days)

    @property
    def days(self) -> tuple[CompletedDay, ...]:
        return tuple(self._days)

    def append(self, day: CompletedDay) -> None:
        self._days.append(day)

    def get(self, day_id: uuid.UUID) -> CompletedDay:
        return self._days[self._index(day_id)]

    def delete_day(self, day_id: uuid.UUID) -> CompletedDay:
        return self._days.pop(self._index(day_id))

    def update_day(
        self,
        day_id: uuid.UUID,
        work_minutes: float,
        pause_minutes: float,
        now: Optional[datetime] = None,
    ) -> CompletedDay:
        """Replace a day's segments with synthetic ones matching the totals.

        This is lossy and cannot be undone: the original start and end times
        are discarded. The result holds at most one pause followed by one
        work segment, with the work segment ending at ``now``. Real lengths
        are the requested minutes divided by the factor of the day's first
        segment, so the effective totals equal the requested minutes.
        """
        if work_minutes < 0 or pause_minutes < 0:
            raise ValueError("work_minutes and pause_minutes must not be negative")
        index = self._index(day_id)
        day = self._days[index]
        now = now or datetime.now()
        factor = day.segments[0].acceleration_factor if day.segments else NORMAL_FACTOR

        segments: list[TimeSegment] = []
        work_start = now
        if work_minutes > 0:
            work_start = now - timedelta(seconds=work_minutes * 60 / factor)
            segments.append(
                TimeSegment(
                    kind=SegmentKind.WORK,
                    start=work_start,
                    end=Closed(now),
                    acceleration_factor=factor,
                )
            )
        if pause_minutes > 0:
            pause_start = work_start - timedelta(seconds=pause_minutes * 60 / factor)
            segments.insert(
                0,
                TimeSegment(
                    kind=SegmentKind.PAUSE,
                    start=pause_start,
                    end=Closed(work_start),
                    acceleration_factor=factor,
                ),
            )

        updated = replace(day, segments=tuple(segments))
        self._days[index] = updated
        return updated

    def update_segment(
        self,
        day_id: uuid.UUID,
        segment_id: uuid.UUID,
        start: datetime,
        end: datetime,
    ) -> CompletedDay:
        """Move the start and end of one archived segment."""
        if end < start:
            raise ValueError("end must not be before start")
        index = self._index(day_id)
        day = self._days[index]
        segments = list(day.segments)
        for position, segment in enumerate(segments):
            if segment.id == segment_id:
                segments[position] = replace(segment, start=start, end=Closed(end))
                break
        else:
            raise UnknownSegmentError(f"No segment {segment_id} in day {day_id}")
        updated = replace(day, segments=tuple(segments))
        self._days[index] = updated
        return updated

    def _index(self, day_id: uuid.UUID) -> int:
        for index, day in enumerate(self._days):
            if day.id == day_id:
                return index
        raise UnknownDayError(f"No completed day found for id={day_id}")
