"""Exceptions raised by the tracker."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for tracker errors."""


class InvalidTransitionError(TrackerError):
    """Raised when an operation is not allowed from the current state."""


class LedgerIntegrityError(TrackerError, ValueError):
    """Raised when a segment list violates the single-open-segment rule."""


class UnknownDayError(TrackerError, LookupError):
    pass


class UnknownSegmentError(TrackerError, LookupError):
    pass
