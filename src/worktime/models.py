"""Domain models for tracked work and pause time."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from .clock import effective_duration, real_duration


class SegmentKind(str, Enum):
    WORK = "work"
    PAUSE = "pause"

    @property
    def label(self) -> str:
        return self.value.capitalize()


class TimerState(str, Enum):
    IDLE = "idle"
    WORKING = "working"
    PAUSING = "pausing"


@dataclass(frozen=True, slots=True)
class Open:
    """End marker of the segment that is still running."""


@dataclass(frozen=True, slots=True)
class Closed:
    at: datetime


OPEN = Open()

SegmentEnd = Union[Open, Closed]


@dataclass(frozen=True, slots=True)
class TimeSegment:
    """A contiguous interval of work or pause."""

    kind: SegmentKind
    start: datetime
    end: SegmentEnd = OPEN
    acceleration_factor: float = 1.0
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        if self.acceleration_factor <= 0:
            raise ValueError(
                f"acceleration_factor must be positive, got {self.acceleration_factor}"
            )

    @property
    def is_open(self) -> bool:
        return isinstance(self.end, Open)

    @property
    def end_time(self) -> Optional[datetime]:
        return self.end.at if isinstance(self.end, Closed) else None

    def close(self, at: datetime) -> "TimeSegment":
        return replace(self, end=Closed(at))

    def effective_duration(self, now: Optional[datetime] = None) -> float:
        return effective_duration(self, now or datetime.now())

    def real_duration(self, now: Optional[datetime] = None) -> float:
        return real_duration(self, now or datetime.now())


@dataclass(frozen=True, slots=True)
class CompletedDay:
    """A finished day; segments are a frozen copy of the ledger."""

    date: datetime
    segments: tuple[TimeSegment, ...] = ()
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def work_duration(self) -> float:
        return self.total(SegmentKind.WORK)

    @property
    def pause_duration(self) -> float:
        return self.total(SegmentKind.PAUSE)

    def total(self, kind: SegmentKind, now: Optional[datetime] = None) -> float:
        moment = now or datetime.now()
        return sum(
            segment.effective_duration(moment)
            for segment in self.segments
            if segment.kind is kind
        )


@dataclass(frozen=True, slots=True)
class DeliveredNotification:
    title: str
    body: str
    delivered_at: datetime
    badge: int
    id: uuid.UUID = field(default_factory=uuid.uuid4)


@dataclass(frozen=True, slots=True)
class TrackerSnapshot:
    """Read-only view of the running day for status surfaces."""

    state: TimerState
    work_seconds: float
    pause_seconds: float
    accelerated: bool
    current_kind: Optional[SegmentKind] = None
    current_start: Optional[datetime] = None
    quote: Optional[str] = None
