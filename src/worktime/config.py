"""Configuration models and helpers for the tracker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

ACCELERATED_FACTOR = 300.0


@dataclass(slots=True)
class TrackerSettings:
    """Runtime configuration for the activity state machine."""

    tick_interval: timedelta = timedelta(seconds=1)
    accelerated_factor: float = ACCELERATED_FACTOR
    notifications_enabled: bool = True

    @classmethod
    def from_values(
        cls,
        tick_seconds: float = 1.0,
        accelerated_factor: float | None = None,
        notifications_enabled: bool = True,
    ) -> "TrackerSettings":
        factor = accelerated_factor if accelerated_factor is not None else ACCELERATED_FACTOR
        if factor <= 0:
            raise ValueError("accelerated_factor must be positive")
        if tick_seconds <= 0:
            raise ValueError("tick_seconds must be positive")
        return cls(
            tick_interval=timedelta(seconds=tick_seconds),
            accelerated_factor=factor,
            notifications_enabled=notifications_enabled,
        )
