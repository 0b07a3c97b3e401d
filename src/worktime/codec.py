"""JSON encoding of persisted tracker state."""

from __future__ import annotations

import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, NaiveDatetime, TypeAdapter

from .models import (
    OPEN,
    Closed,
    CompletedDay,
    DeliveredNotification,
    SegmentKind,
    TimeSegment,
)


class SegmentRecord(BaseModel):
    id: uuid.UUID
    kind: SegmentKind
    start: NaiveDatetime
    end: Optional[NaiveDatetime] = None
    acceleration_factor: float = Field(default=1.0, gt=0)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_segment(cls, segment: TimeSegment) -> "SegmentRecord":
        return cls(
            id=segment.id,
            kind=segment.kind,
            start=segment.start,
            end=segment.end_time,
            acceleration_factor=segment.acceleration_factor,
        )

    def to_segment(self) -> TimeSegment:
        return TimeSegment(
            id=self.id,
            kind=self.kind,
            start=self.start,
            end=Closed(self.end) if self.end is not None else OPEN,
            acceleration_factor=self.acceleration_factor,
        )


class CompletedDayRecord(BaseModel):
    id: uuid.UUID
    date: NaiveDatetime
    segments: list[SegmentRecord] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")


class NotificationRecord(BaseModel):
    id: uuid.UUID
    title: str
    body: str
    delivered_at: NaiveDatetime
    badge: int

    model_config = ConfigDict(extra="forbid")


_SEGMENTS = TypeAdapter(list[SegmentRecord])
_DAYS = TypeAdapter(list[CompletedDayRecord])
_NOTIFICATIONS = TypeAdapter(list[NotificationRecord])
_FLAG = TypeAdapter(bool)


def encode_segments(segments: tuple[TimeSegment, ...]) -> bytes:
    return _SEGMENTS.dump_json([SegmentRecord.from_segment(s) for s in segments])


def decode_segments(blob: bytes) -> list[TimeSegment]:
    """Raises ``pydantic.ValidationError`` when the blob is corrupt."""
    return [record.to_segment() for record in _SEGMENTS.validate_json(blob)]


def encode_days(days: tuple[CompletedDay, ...]) -> bytes:
    return _DAYS.dump_json(
        [
            CompletedDayRecord(
                id=day.id,
                date=day.date,
                segments=[SegmentRecord.from_segment(s) for s in day.segments],
            )
            for day in days
        ]
    )


def decode_days(blob: bytes) -> list[CompletedDay]:
    return [
        CompletedDay(
            id=record.id,
            date=record.date,
            segments=tuple(s.to_segment() for s in record.segments),
        )
        for record in _DAYS.validate_json(blob)
    ]


def encode_flag(value: bool) -> bytes:
    return _FLAG.dump_json(value)


def decode_flag(blob: bytes) -> bool:
    return _FLAG.validate_json(blob)


def encode_notifications(items: list[DeliveredNotification]) -> bytes:
    return _NOTIFICATIONS.dump_json(
        [
            NotificationRecord(
                id=item.id,
                title=item.title,
                body=item.body,
                delivered_at=item.delivered_at,
                badge=item.badge,
            )
            for item in items
        ]
    )


def decode_notifications(blob: bytes) -> list[DeliveredNotification]:
    return [
        DeliveredNotification(
            id=record.id,
            title=record.title,
            body=record.body,
            delivered_at=record.delivered_at,
            badge=record.badge,
        )
        for record in _NOTIFICATIONS.validate_json(blob)
    ]
