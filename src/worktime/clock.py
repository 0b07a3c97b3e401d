"""Conversion of wall-clock intervals into (possibly accelerated) durations."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import TimeSegment

logger = logging.getLogger(__name__)

NORMAL_FACTOR = 1.0


def real_duration(segment: "TimeSegment", now: datetime) -> float:
    """Seconds between the segment start and its end, or ``now`` while open.

    Negative results are returned unchanged; they mean the stored timestamps
    are out of order.
    """
    end = segment.end_time or now
    seconds = (end - segment.start).total_seconds()
    if seconds < 0:
        logger.warning(
            "Segment %s ends before it starts (%.1fs); timestamps may be corrupt.",
            segment.id,
            seconds,
        )
    return seconds


def effective_duration(segment: "TimeSegment", now: datetime) -> float:
    return real_duration(segment, now) * segment.acceleration_factor
