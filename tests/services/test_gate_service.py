from __future__ import annotations

import asyncio

import pytest

from classroom.models.progress import PRIOR_MODULE_INCOMPLETE, RELEASE_PENDING
from classroom.repos.store import Store
from classroom.services.attendance_service import mark_week_attendance
from classroom.services.gate_service import (
    evaluate_module_access,
    get_module_access,
    get_progress_summary,
    is_released,
)
from classroom.services.submission_service import submit_assignment
from tests.conftest import NOW, WEEK, seed_class


def test_unlocked_module_is_always_released(store: Store) -> None:
    module = seed_class(store, [0]).module(1)
    assert is_released(module, NOW) is True


def test_locked_module_released_by_its_release_time(store: Store) -> None:
    seeded = seed_class(store, [0, 0, 0], locked_weeks={1: NOW - 1, 2: NOW + WEEK, 3: None})
    assert is_released(seeded.module(1), NOW) is True
    assert is_released(seeded.module(2), NOW) is False
    # locked with no release time stays closed
    assert is_released(seeded.module(3), NOW) is False


def test_prior_incomplete_blocks_regardless_of_release(store: Store) -> None:
    """Week 3 is released, but week 2 is missing an assignment."""
    seeded = seed_class(store, [1, 1, 0], locked_weeks={3: NOW - WEEK})
    verdicts = evaluate_module_access(
        seeded.modules, [True, False, False], is_instructor=False, now=NOW
    )
    assert [v.accessible for v in verdicts] == [True, True, False]
    assert verdicts[2].reason == PRIOR_MODULE_INCOMPLETE


def test_release_pending_when_prior_modules_complete(store: Store) -> None:
    seeded = seed_class(store, [0, 0], locked_weeks={2: NOW + WEEK})
    verdicts = evaluate_module_access(
        seeded.modules, [True, False], is_instructor=False, now=NOW
    )
    assert verdicts[1].accessible is False
    assert verdicts[1].reason == RELEASE_PENDING


def test_both_conditions_failing_reports_prior_incomplete(store: Store) -> None:
    seeded = seed_class(store, [0, 0], locked_weeks={2: NOW + WEEK})
    verdicts = evaluate_module_access(
        seeded.modules, [False, False], is_instructor=False, now=NOW
    )
    assert verdicts[1].reason == PRIOR_MODULE_INCOMPLETE


def test_first_module_only_needs_release(store: Store) -> None:
    seeded = seed_class(store, [0], locked_weeks={1: NOW + WEEK})
    verdicts = evaluate_module_access(seeded.modules, [False], is_instructor=False, now=NOW)
    assert verdicts[0].reason == RELEASE_PENDING


def test_instructor_opens_everything(store: Store) -> None:
    seeded = seed_class(store, [0, 0, 0], locked_weeks={2: NOW + WEEK, 3: None})
    verdicts = evaluate_module_access(
        seeded.modules, [False, False, False], is_instructor=True, now=NOW
    )
    assert all(v.accessible and v.reason is None for v in verdicts)


def test_mismatched_lengths_rejected(store: Store) -> None:
    seeded = seed_class(store, [0, 0])
    with pytest.raises(ValueError, match="same length"):
        evaluate_module_access(seeded.modules, [True], is_instructor=False, now=NOW)


def test_get_module_access_follows_learner_progress(store: Store) -> None:
    seeded = seed_class(store, [1, 0, 0])
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW))

    verdicts = asyncio.run(get_module_access(store, seeded.id, "u1", now=NOW))
    assert verdicts is not None
    assert [v.accessible for v in verdicts] == [True, False, False]

    asyncio.run(submit_assignment(store, seeded.assignment(1).id, "u1", content="x", now=NOW))
    verdicts = asyncio.run(get_module_access(store, seeded.id, "u1", now=NOW))
    assert verdicts is not None
    assert [v.accessible for v in verdicts] == [True, True, False]
    assert verdicts[2].reason == PRIOR_MODULE_INCOMPLETE


def test_progress_summary_counts(store: Store) -> None:
    seeded = seed_class(store, [2, 1])
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW))
    asyncio.run(submit_assignment(store, seeded.assignment(1, 0).id, "u1", content="a", now=NOW))

    summary = asyncio.run(get_progress_summary(store, seeded.id, "u1", now=NOW))
    assert summary is not None
    assert summary.total_modules == 2
    assert summary.unlocked_modules == 1
    assert summary.attendance_count == 1
    assert summary.total_assignments == 3
    assert summary.submitted_assignments == 1
