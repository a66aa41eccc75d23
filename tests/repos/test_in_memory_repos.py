"""In-memory repos: the natural-key and transition rules the Pg repos enforce in SQL."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from uuid import uuid4

import pytest

from classroom.models.attendance import AttendanceMark
from classroom.models.cohort import ClassModule
from classroom.models.enrollment import COMPLETED, REMOVED, Enrollment
from classroom.repos.attendance_repo import pick_latest
from classroom.repos.store import Store
from tests.conftest import NOW, seed_class


def test_duplicate_week_in_class_rejected(store: Store) -> None:
    seeded = seed_class(store, [0])
    with pytest.raises(ValueError, match="week 1 already exists"):
        store.cohorts.add_module(  # type: ignore[attr-defined]
            ClassModule.new(class_id=seeded.id, week_number=1)
        )


def test_modules_and_assignments_listed_in_order(store: Store) -> None:
    seeded = seed_class(store, [1, 1, 1])
    modules = asyncio.run(store.cohorts.list_modules(seeded.id))
    assignments = asyncio.run(store.cohorts.list_module_assignments(seeded.module(2).id))
    assert [m.week_number for m in modules] == [1, 2, 3]
    assert [a.id for a in assignments] == [seeded.assignment(2).id]


def test_duplicate_enrollment_rejected(store: Store) -> None:
    class_id = uuid4()
    enrollment = Enrollment(class_id=class_id, user_id="u1", enrolled_at=NOW)
    asyncio.run(store.enrollments.add(enrollment))
    with pytest.raises(ValueError):
        asyncio.run(store.enrollments.add(enrollment))


def test_mark_completed_only_flips_active(store: Store) -> None:
    class_id = uuid4()
    asyncio.run(store.enrollments.add(Enrollment(class_id, "u1", NOW)))
    asyncio.run(store.enrollments.add(Enrollment(class_id, "u2", NOW, status=REMOVED)))

    assert asyncio.run(store.enrollments.mark_completed(class_id, "u1", NOW)) is True
    assert asyncio.run(store.enrollments.mark_completed(class_id, "u1", NOW + 1)) is False
    assert asyncio.run(store.enrollments.mark_completed(class_id, "u2", NOW)) is False
    assert asyncio.run(store.enrollments.mark_completed(class_id, "nobody", NOW)) is False

    done = asyncio.run(store.enrollments.get(class_id, "u1"))
    assert done is not None
    assert done.status == COMPLETED
    assert done.completed_at == NOW


def test_pick_latest_resolves_duplicates_to_newest(caplog: pytest.LogCaptureFixture) -> None:
    class_id = uuid4()
    old = AttendanceMark.new(class_id=class_id, user_id="u1", week_number=1, checked_in_at=NOW)
    new = replace(old, id=uuid4(), checked_in_at=NOW + 60)

    with caplog.at_level(logging.WARNING):
        assert pick_latest([new, old]) == new
        assert pick_latest([old, new]) == new
    assert "Found 2 attendance marks" in caplog.text


def test_pick_latest_single_and_empty() -> None:
    mark = AttendanceMark.new(class_id=uuid4(), user_id="u1", week_number=2, checked_in_at=NOW)
    assert pick_latest([mark]) == mark
    assert pick_latest([]) is None
