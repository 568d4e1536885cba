"""Shared fixtures: a controllable clock and fast-hashing user directory."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from kpir_portal.auth import UserDirectory
from kpir_portal.notifications import OutboxMailer


class FakeClock:
    """Callable clock that only moves when a test advances it."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now += timedelta(**delta)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def users() -> UserDirectory:
    directory = UserDirectory(hash_rounds=4)
    directory.add_user("Anna Kowalska", "anna@example.com", "initial-pass")
    return directory


@pytest.fixture
def mailer() -> OutboxMailer:
    return OutboxMailer()
