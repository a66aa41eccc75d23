"""Attendance ledger: upsert semantics, roster queries, module transitions."""

from __future__ import annotations

import asyncio

import pytest

from classroom.repos.store import Store
from classroom.services.attendance_service import (
    InvalidAttendanceMethodError,
    UnknownWeekError,
    get_class_week_attendance,
    get_week_attendance,
    mark_week_attendance,
)
from classroom.services.events import MODULE_COMPLETED
from classroom.services.task_queue import task_queue
from tests.conftest import NOW, seed_class


def _queued(queue: str) -> int:
    return asyncio.run(task_queue.queue_length(queue))


def test_marking_twice_updates_the_same_record(store: Store) -> None:
    seeded = seed_class(store, [0])
    first = asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW))
    second = asyncio.run(
        mark_week_attendance(store, seeded.id, "u1", 1, method="qr", now=NOW + 60)
    )

    marks = asyncio.run(get_week_attendance(store, seeded.id, "u1"))
    assert marks is not None
    assert len(marks) == 1
    assert first is not None and second is not None
    assert second.id == first.id
    assert marks[0].checked_in_at == NOW + 60
    assert marks[0].method == "qr"


def test_checked_in_by_defaults_to_learner(store: Store) -> None:
    seeded = seed_class(store, [0])
    mark = asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW))
    assert mark is not None
    assert mark.checked_in_by == "u1"


def test_instructor_can_be_recorded_as_marker(store: Store) -> None:
    seeded = seed_class(store, [0])
    mark = asyncio.run(
        mark_week_attendance(store, seeded.id, "u1", 1, checked_in_by="instructor-2", now=NOW)
    )
    assert mark is not None
    assert mark.checked_in_by == "instructor-2"


def test_unknown_week_rejected(store: Store) -> None:
    seeded = seed_class(store, [0, 0])
    with pytest.raises(UnknownWeekError):
        asyncio.run(mark_week_attendance(store, seeded.id, "u1", 3, now=NOW))


def test_invalid_method_rejected(store: Store) -> None:
    seeded = seed_class(store, [0])
    with pytest.raises(InvalidAttendanceMethodError):
        asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, method="fax", now=NOW))


def test_learner_marks_ordered_by_week(store: Store) -> None:
    seeded = seed_class(store, [0, 0, 0])
    for week in (3, 1, 2):
        asyncio.run(mark_week_attendance(store, seeded.id, "u1", week, now=NOW))
    marks = asyncio.run(get_week_attendance(store, seeded.id, "u1"))
    assert marks is not None
    assert [m.week_number for m in marks] == [1, 2, 3]


def test_roster_filters_by_week_newest_first(store: Store) -> None:
    seeded = seed_class(store, [0, 0])
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW))
    asyncio.run(mark_week_attendance(store, seeded.id, "u2", 1, now=NOW + 10))
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 2, now=NOW + 20))

    week_one = asyncio.run(get_class_week_attendance(store, seeded.id, 1))
    everything = asyncio.run(get_class_week_attendance(store, seeded.id))
    assert week_one is not None and everything is not None
    assert [m.user_id for m in week_one] == ["u2", "u1"]
    assert [m.week_number for m in everything] == [1, 1, 2]


def test_module_completed_event_on_transition_only(store: Store) -> None:
    seeded = seed_class(store, [0])
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW))
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW + 5))

    assert _queued(MODULE_COMPLETED) == 1
    task = asyncio.run(task_queue.dequeue(MODULE_COMPLETED))
    assert task is not None
    assert task.payload["week_number"] == 1
    assert task.payload["user_id"] == "u1"
    assert task.payload["completed_at"] == NOW


def test_no_module_event_while_assignments_outstanding(store: Store) -> None:
    seeded = seed_class(store, [1])
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW))
    assert _queued(MODULE_COMPLETED) == 0
