from __future__ import annotations

import asyncio

from classroom.repos.store import Store
from classroom.services.attendance_service import mark_week_attendance
from classroom.services.streak_service import (
    calculate_attendance_streak,
    get_attendance_streak,
)
from tests.conftest import NOW, seed_class

WEEKS = [1, 2, 3, 4, 5]


def test_streak_with_gap_in_the_middle() -> None:
    streak = calculate_attendance_streak(WEEKS, {1, 2, 4, 5})
    assert streak.longest_streak == 2
    assert streak.current_streak == 2
    assert streak.attended_weeks == 4
    assert streak.total_weeks == 5
    assert streak.perfect_attendance is False


def test_no_attendance_is_all_zero() -> None:
    streak = calculate_attendance_streak(WEEKS, set())
    assert streak.current_streak == 0
    assert streak.longest_streak == 0
    assert streak.perfect_attendance is False


def test_perfect_attendance() -> None:
    streak = calculate_attendance_streak(WEEKS, set(WEEKS))
    assert streak.current_streak == 5
    assert streak.longest_streak == 5
    assert streak.perfect_attendance is True


def test_current_streak_counts_back_from_latest_attended_week() -> None:
    # weeks 4 and 5 not yet attended; the run ending at week 3 is current
    streak = calculate_attendance_streak(WEEKS, {2, 3})
    assert streak.current_streak == 2
    assert streak.longest_streak == 2


def test_longest_streak_can_exceed_current() -> None:
    streak = calculate_attendance_streak(WEEKS, {1, 2, 3, 5})
    assert streak.longest_streak == 3
    assert streak.current_streak == 1


def test_empty_class_is_never_perfect() -> None:
    streak = calculate_attendance_streak([], set())
    assert streak.total_weeks == 0
    assert streak.perfect_attendance is False


def test_get_attendance_streak_from_store(store: Store) -> None:
    seeded = seed_class(store, [0, 0, 0])
    for week in (1, 3):
        asyncio.run(mark_week_attendance(store, seeded.id, "u1", week, now=NOW))

    streak = asyncio.run(get_attendance_streak(store, seeded.id, "u1"))
    assert streak is not None
    assert streak.attended_weeks == 2
    assert streak.current_streak == 1
    assert streak.longest_streak == 1
