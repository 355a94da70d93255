"""
Shared fixtures.

Every service runs on the in-memory gateway with a fixed clock, so no
test needs a database or depends on today's date.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from church_office.activity import ActivityLogger
from church_office.orchestrator import AppComponents
from church_office.services import InMemoryGateway, PeriodLifecycleManager


FIXED_NOW = datetime(2025, 1, 10, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """A clock tests can move forward."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gateway():
    return InMemoryGateway()


@pytest.fixture
def activity():
    return ActivityLogger(keep_history=True)


@pytest.fixture
def periods(gateway, activity, clock):
    return PeriodLifecycleManager(gateway, activity=activity, clock=clock)


@pytest.fixture
def components(gateway, activity, clock):
    return AppComponents(gateway, activity, clock=clock)


@pytest.fixture
def started(components):
    """Components with January 2025 open as the active period."""
    asyncio.run(components.periods.start_new_period())
    return components
