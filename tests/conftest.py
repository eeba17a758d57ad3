from __future__ import annotations

from datetime import datetime

import pytest

from fakes import MONDAY, World, make_slot


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 6, 2, 9, 0, 0)


@pytest.fixture
def world(fixed_now) -> World:
    """A Monday 09:00-10:00 slot for subject 100 with student S-1 enrolled."""
    w = World(now=fixed_now)
    w.schedules.add(make_slot())
    w.enrollments.enroll("S-1")
    return w


@pytest.fixture
def monday():
    return MONDAY
