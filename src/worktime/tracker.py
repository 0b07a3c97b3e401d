"""Work/pause state machine for the running day."""

from __future__ import annotations

import logging
import random
import threading
import uuid
from datetime import datetime
from typing import Callable, Optional, TypeVar

from . import codec
from .archive import DayArchive
from .clock import NORMAL_FACTOR
from .config import TrackerSettings
from .errors import InvalidTransitionError
from .ledger import SegmentLedger
from .models import (
    CompletedDay,
    DeliveredNotification,
    SegmentKind,
    TimerState,
    TimeSegment,
    TrackerSnapshot,
)
from .notifications import NotificationGateway
from .quotes import pick_quote
from .reporting import export_csv
from .rules import (
    BreakEvent,
    BreakRuleLatches,
    evaluate,
    remaining_work_until_break,
    required_break_seconds,
)
from .storage import (
    ACCELERATED_KEY,
    COMPLETED_DAYS_KEY,
    CURRENT_SEGMENTS_KEY,
    PersistenceGateway,
)
from .ticker import Ticker, TickRunner

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ActivityStateMachine:
    """Owns the day ledger, the archive and the idle/working/pausing state.

    Every public mutator runs under one lock, ends with a synchronous save of
    the full state, and keeps at most one open segment at the ledger's tail.
    The tick only reads the ledger; it evaluates the break rules and hands
    any resulting notifications to the gateway outside the lock.
    """

    def __init__(
        self,
        store: PersistenceGateway,
        notifier: NotificationGateway,
        settings: Optional[TrackerSettings] = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
        ticker: Optional[Ticker] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings or TrackerSettings()
        self._store = store
        self._notifier = notifier
        self._clock = clock
        self._rng = rng
        self._lock = threading.RLock()
        self._ticker_lock = threading.Lock()
        self._ticker: Ticker = ticker or TickRunner(self.settings.tick_interval, self.tick)
        self._ledger = SegmentLedger()
        self._archive = DayArchive()
        self._state = TimerState.IDLE
        self._accelerated = False
        self._latches = BreakRuleLatches()
        self._quote: Optional[str] = None
        self._load()
        current = self._ledger.open_segment
        if current is not None:
            self._ticker.start()
            logger.info(
                "Resumed %s segment started at %s", current.kind.value, current.start
            )

    def reload(self) -> None:
        """Re-read state another process may have written to the store.

        Latches survive as long as the same day is still running.
        """
        with self._lock:
            first_id = self._ledger.segments[0].id if self._ledger else None
            self._load()
            if not self._ledger or self._ledger.segments[0].id != first_id:
                self._latches = BreakRuleLatches()
        self._sync_ticker()

    # -- State ------------------------------------------------------------

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def accelerated(self) -> bool:
        return self._accelerated

    @property
    def acceleration_factor(self) -> float:
        return self.settings.accelerated_factor if self._accelerated else NORMAL_FACTOR

    @property
    def segments(self) -> tuple[TimeSegment, ...]:
        with self._lock:
            return self._ledger.segments

    @property
    def completed_days(self) -> tuple[CompletedDay, ...]:
        with self._lock:
            return self._archive.days

    @property
    def current_quote(self) -> Optional[str]:
        return self._quote

    @property
    def latches(self) -> BreakRuleLatches:
        return self._latches

    @property
    def is_ticking(self) -> bool:
        return self._ticker.is_running()

    @property
    def work_seconds(self) -> float:
        with self._lock:
            return self._ledger.work_seconds(self._clock())

    @property
    def pause_seconds(self) -> float:
        with self._lock:
            return self._ledger.pause_seconds(self._clock())

    @property
    def remaining_work_until_break(self) -> float:
        return remaining_work_until_break(self.work_seconds)

    @property
    def required_break_seconds(self) -> float:
        return required_break_seconds(self.work_seconds)

    def snapshot(self) -> TrackerSnapshot:
        with self._lock:
            now = self._clock()
            current = self._ledger.open_segment
            return TrackerSnapshot(
                state=self._state,
                work_seconds=self._ledger.work_seconds(now),
                pause_seconds=self._ledger.pause_seconds(now),
                accelerated=self._accelerated,
                current_kind=current.kind if current else None,
                current_start=current.start if current else None,
                quote=self._quote,
            )

    # -- Transitions ------------------------------------------------------

    def start_work(self) -> TimeSegment:
        with self._lock:
            if self._state is TimerState.IDLE:
                self._quote = pick_quote(self._rng)
            segment = self._switch_to(SegmentKind.WORK)
            self._state = TimerState.WORKING
            self._persist()
        self._sync_ticker()
        logger.info("Work started at %s", segment.start)
        return segment

    def start_pause(self) -> TimeSegment:
        with self._lock:
            if self._state is not TimerState.WORKING:
                raise InvalidTransitionError(
                    f"Cannot start a pause while {self._state.value}."
                )
            segment = self._switch_to(SegmentKind.PAUSE)
            self._state = TimerState.PAUSING
            self._persist()
        self._sync_ticker()
        logger.info("Pause started at %s", segment.start)
        return segment

    def resume_work(self) -> TimeSegment:
        with self._lock:
            if self._state is not TimerState.PAUSING:
                raise InvalidTransitionError(f"Cannot resume work while {self._state.value}.")
            segment = self._switch_to(SegmentKind.WORK)
            self._state = TimerState.WORKING
            self._persist()
        self._sync_ticker()
        logger.info("Work resumed at %s", segment.start)
        return segment

    def finish_day(self) -> Optional[CompletedDay]:
        """Archive the running day and return to idle.

        Finishing while idle with an empty ledger archives nothing.
        """
        day: Optional[CompletedDay] = None
        with self._lock:
            now = self._clock()
            self._ledger.close_open(now)
            if self._ledger:
                day = CompletedDay(date=now, segments=self._ledger.clear())
                self._archive.append(day)
            self._reset_day()
            self._persist()
        self._sync_ticker()
        if day is not None:
            logger.info(
                "Day finished: work=%.0fs pause=%.0fs",
                day.work_duration,
                day.pause_duration,
            )
        return day

    def reset(self) -> None:
        """Drop the running day without archiving it."""
        with self._lock:
            self._reset_day()
            self._persist()
        self._sync_ticker()
        logger.info("Current day discarded.")

    def set_accelerated(self, accelerated: bool) -> None:
        with self._lock:
            self._accelerated = accelerated
            self._ledger.split_open(self._clock(), self.acceleration_factor)
            self._persist()
        logger.info("Acceleration factor set to %sx", self.acceleration_factor)

    # -- Archive ----------------------------------------------------------

    def update_day(
        self, day_id: uuid.UUID, work_minutes: float, pause_minutes: float
    ) -> CompletedDay:
        """Rebuild a day from totals; see ``DayArchive.update_day`` (lossy)."""
        with self._lock:
            day = self._archive.update_day(
                day_id, work_minutes, pause_minutes, now=self._clock()
            )
            self._persist()
        return day

    def update_segment(
        self,
        day_id: uuid.UUID,
        segment_id: uuid.UUID,
        start: datetime,
        end: datetime,
    ) -> CompletedDay:
        with self._lock:
            day = self._archive.update_segment(day_id, segment_id, start, end)
            self._persist()
        return day

    def delete_day(self, day_id: uuid.UUID) -> None:
        with self._lock:
            self._archive.delete_day(day_id)
            self._persist()

    def export_csv(self) -> str:
        with self._lock:
            return export_csv(self._archive.days, now=self._clock())

    # -- Tick and notifications -------------------------------------------

    def tick(self) -> list[BreakEvent]:
        """Evaluate break rules once; never touches the ledger."""
        with self._lock:
            if self._state is TimerState.IDLE:
                return []
            now = self._clock()
            events, self._latches = evaluate(
                self._ledger.work_seconds(now),
                self._ledger.pause_seconds(now),
                self._latches,
            )
        for event in events:
            logger.info("Break rule %s reached.", event.rule_id)
            self._notify(event.title, event.body)
        return events

    def request_notification_permission(self) -> bool:
        try:
            return self._notifier.request_permission()
        except Exception:
            logger.exception("Notification permission request failed.")
            return False

    def send_test_notification(self) -> None:
        self._notify("Test push", "Notifications are working correctly!")

    def delivered_notifications(self) -> list[DeliveredNotification]:
        return self._notifier.list_delivered()

    def mark_notifications_read(self) -> None:
        self._notifier.clear_all_and_reset_badge()

    def shutdown(self) -> None:
        """Stop ticking; the running day stays persisted for the next start."""
        with self._ticker_lock:
            self._ticker.stop()

    # -- Internals --------------------------------------------------------

    def _switch_to(self, kind: SegmentKind) -> TimeSegment:
        now = self._clock()
        self._ledger.close_open(now)
        return self._ledger.append_open(kind, now, self.acceleration_factor)

    def _reset_day(self) -> None:
        self._ledger.clear()
        self._state = TimerState.IDLE
        self._quote = None
        self._latches = BreakRuleLatches()

    def _sync_ticker(self) -> None:
        # Called without holding _lock; stopping joins the tick thread.
        with self._ticker_lock:
            with self._lock:
                running = self._state is not TimerState.IDLE
            if running:
                self._ticker.start()
            else:
                self._ticker.stop()

    def _notify(self, title: str, body: str) -> None:
        try:
            self._notifier.deliver(title, body)
        except Exception:
            logger.exception("Failed to deliver notification %r", title)

    def _persist(self) -> None:
        try:
            self._store.save_many(
                {
                    COMPLETED_DAYS_KEY: codec.encode_days(self._archive.days),
                    CURRENT_SEGMENTS_KEY: codec.encode_segments(self._ledger.segments),
                    ACCELERATED_KEY: codec.encode_flag(self._accelerated),
                }
            )
        except Exception:
            logger.exception("Failed to save tracker state; changes live in memory only.")

    def _load(self) -> None:
        self._archive = DayArchive(self._decode(COMPLETED_DAYS_KEY, codec.decode_days, []))
        self._accelerated = self._decode(ACCELERATED_KEY, codec.decode_flag, False)
        self._ledger = self._decode(
            CURRENT_SEGMENTS_KEY,
            lambda blob: SegmentLedger(codec.decode_segments(blob)),
            SegmentLedger(),
        )
        current = self._ledger.open_segment
        if current is None:
            self._state = TimerState.IDLE
        elif current.kind is SegmentKind.WORK:
            self._state = TimerState.WORKING
        else:
            self._state = TimerState.PAUSING

    def _decode(self, key: str, decoder: Callable[[bytes], T], default: T) -> T:
        blob = self._store.load(key)
        if blob is None:
            return default
        try:
            return decoder(blob)
        except ValueError:
            logger.warning("Could not decode stored %s; starting empty.", key, exc_info=True)
            return default
