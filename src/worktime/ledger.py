"""In-progress day ledger of work and pause segments."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Iterator, Optional

from .errors import LedgerIntegrityError
from .models import SegmentKind, TimeSegment


class SegmentLedger:
    """Ordered segments of the current day.

    At most one segment may be open and, if present, it is always the last
    one. Every mutator checks this before and after it runs.
    """

    def __init__(self, segments: Iterable[TimeSegment] = ()) -> None:
        self._segments: list[TimeSegment] = list(segments)
        check_single_open(self._segments)

    def __iter__(self) -> Iterator[TimeSegment]:
        return iter(self._segments)

    def __len__(self) -> int:
        return len(self._segments)

    def __bool__(self) -> bool:
        return bool(self._segments)

    @property
    def segments(self) -> tuple[TimeSegment, ...]:
        return tuple(self._segments)

    @property
    def open_segment(self) -> Optional[TimeSegment]:
        if self._segments and self._segments[-1].is_open:
            return self._segments[-1]
        return None

    def append_open(
        self, kind: SegmentKind, start: datetime, acceleration_factor: float
    ) -> TimeSegment:
        if self.open_segment is not None:
            raise LedgerIntegrityError("Close the open segment before starting another.")
        segment = TimeSegment(
            kind=kind, start=start, acceleration_factor=acceleration_factor
        )
        self._segments.append(segment)
        return segment

    def close_open(self, at: datetime) -> Optional[TimeSegment]:
        """Close the running segment at ``at``; returns it, or None if none ran."""
        current = self.open_segment
        if current is None:
            return None
        closed = current.close(at)
        self._segments[-1] = closed
        return closed

    def split_open(self, at: datetime, acceleration_factor: float) -> Optional[TimeSegment]:
        """Continue the running segment from ``at`` under a new factor.

        Time elapsed before ``at`` keeps the old factor.
        """
        current = self.open_segment
        if current is None or current.acceleration_factor == acceleration_factor:
            return None
        self.close_open(at)
        return self.append_open(current.kind, at, acceleration_factor)

    def clear(self) -> tuple[TimeSegment, ...]:
        """Empty the ledger and return what it held."""
        snapshot = tuple(self._segments)
        self._segments.clear()
        return snapshot

    def total(self, kind: SegmentKind, now: datetime) -> float:
        return sum(
            segment.effective_duration(now)
            for segment in self._segments
            if segment.kind is kind
        )

    def work_seconds(self, now: datetime) -> float:
        return self.total(SegmentKind.WORK, now)

    def pause_seconds(self, now: datetime) -> float:
        return self.total(SegmentKind.PAUSE, now)


def check_single_open(segments: list[TimeSegment]) -> None:
    open_positions = [index for index, segment in enumerate(segments) if segment.is_open]
    if not open_positions:
        return
    if len(open_positions) > 1:
        raise LedgerIntegrityError(
            f"Ledger holds {len(open_positions)} open segments; at most one is allowed."
        )
    if open_positions[0] != len(segments) - 1:
        raise LedgerIntegrityError("The open segment must be the last one in the ledger.")
