import random
from datetime import datetime, timedelta

import pytest

from worktime.notifications import RecordingNotificationGateway
from worktime.storage import MemoryBlobStore
from worktime.ticker import InertTicker
from worktime.tracker import ActivityStateMachine

DAY_START = datetime(2026, 3, 2, 8, 0, 0)


class FakeClock:
    """Settable stand-in for ``datetime.now``."""

    def __init__(self, start: datetime = DAY_START) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def notifier(clock: FakeClock) -> RecordingNotificationGateway:
    return RecordingNotificationGateway(clock=clock)


@pytest.fixture
def make_tracker(store, notifier, clock):
    def factory(**kwargs) -> ActivityStateMachine:
        kwargs.setdefault("ticker", InertTicker())
        kwargs.setdefault("store", store)
        kwargs.setdefault("notifier", notifier)
        return ActivityStateMachine(clock=clock, rng=random.Random(7), **kwargs)

    return factory


@pytest.fixture
def tracker(make_tracker) -> ActivityStateMachine:
    return make_tracker()
