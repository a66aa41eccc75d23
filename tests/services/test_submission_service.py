"""Submission ledger: upsert, lateness, deadline lock, review."""

from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from classroom.repos.store import Store
from classroom.services.attendance_service import mark_week_attendance
from classroom.services.events import MODULE_COMPLETED
from classroom.services.submission_service import (
    AssignmentNotFoundError,
    InvalidReviewStatusError,
    SubmissionLockedError,
    SubmissionNotFoundError,
    get_user_submission,
    grade_submission,
    submit_assignment,
)
from classroom.services.task_queue import task_queue
from tests.conftest import NOW, seed_class


def _submit(store: Store, assignment_id, now: int = NOW, **fields):
    return asyncio.run(submit_assignment(store, assignment_id, "u1", now=now, **fields))


def test_submit_before_deadline_is_on_time(store: Store) -> None:
    seeded = seed_class(store, [1], due_at=NOW + 100)
    submission = _submit(store, seeded.assignment(1).id, git_url="https://git/x")

    assert submission is not None
    assert submission.status == "submitted"
    assert submission.is_late is False
    assert submission.class_id == seeded.id
    assert submission.git_url == "https://git/x"


def test_submit_after_deadline_is_late(store: Store) -> None:
    seeded = seed_class(store, [1], due_at=NOW - 1)
    submission = _submit(store, seeded.assignment(1).id, content="x")
    assert submission is not None
    assert submission.status == "late"
    assert submission.is_late is True


def test_submit_exactly_at_deadline_is_on_time(store: Store) -> None:
    seeded = seed_class(store, [1], due_at=NOW)
    submission = _submit(store, seeded.assignment(1).id, content="x")
    assert submission is not None
    assert submission.is_late is False


def test_resubmission_updates_the_same_record(store: Store) -> None:
    seeded = seed_class(store, [1], due_at=NOW + 100)
    assignment_id = seeded.assignment(1).id
    first = _submit(store, assignment_id, content="v1")
    second = _submit(store, assignment_id, now=NOW + 50, content="v2")

    assert first is not None and second is not None
    assert second.id == first.id
    stored = asyncio.run(get_user_submission(store, assignment_id, "u1"))
    assert stored is not None
    assert stored.content == "v2"
    assert stored.submitted_at == NOW + 50


def test_lateness_recomputed_on_every_resubmission(store: Store) -> None:
    seeded = seed_class(store, [1], due_at=NOW)
    assignment_id = seeded.assignment(1).id

    late = _submit(store, assignment_id, now=NOW + 10, content="late")
    assert late is not None and late.is_late is True

    # clock earlier than the deadline: an on-time resubmission clears the flag
    on_time = _submit(store, assignment_id, now=NOW - 10, content="early")
    assert on_time is not None
    assert on_time.is_late is False
    assert on_time.status == "submitted"


def test_locked_assignment_rejects_after_deadline(store: Store) -> None:
    seeded = seed_class(store, [1], due_at=NOW - 1, lock_after_deadline=True)
    with pytest.raises(SubmissionLockedError):
        _submit(store, seeded.assignment(1).id, content="too late")
    assert asyncio.run(get_user_submission(store, seeded.assignment(1).id, "u1")) is None


def test_locked_assignment_accepts_before_deadline(store: Store) -> None:
    seeded = seed_class(store, [1], due_at=NOW + 1, lock_after_deadline=True)
    assert _submit(store, seeded.assignment(1).id, content="ok") is not None


def test_unknown_assignment_rejected(store: Store) -> None:
    with pytest.raises(AssignmentNotFoundError):
        _submit(store, uuid4(), content="x")


def test_grade_records_review(store: Store) -> None:
    seeded = seed_class(store, [1])
    submission = _submit(store, seeded.assignment(1).id, content="x")
    assert submission is not None

    graded = asyncio.run(
        grade_submission(
            store,
            submission.id,
            grade=92.5,
            feedback="Nice",
            status="approved",
            reviewed_by="instructor-2",
            now=NOW + 100,
        )
    )
    assert graded is not None
    assert graded.status == "approved"
    assert graded.grade == 92.5
    assert graded.feedback == "Nice"
    assert graded.reviewed_by == "instructor-2"
    assert graded.reviewed_at == NOW + 100


def test_resubmission_keeps_earlier_review(store: Store) -> None:
    seeded = seed_class(store, [1])
    assignment_id = seeded.assignment(1).id
    submission = _submit(store, assignment_id, content="v1")
    assert submission is not None
    asyncio.run(
        grade_submission(
            store,
            submission.id,
            grade=40,
            feedback="Try again",
            status="changes_requested",
            reviewed_by="instructor-2",
            now=NOW,
        )
    )
    resubmitted = _submit(store, assignment_id, now=NOW + 5, content="v2")
    assert resubmitted is not None
    assert resubmitted.status == "submitted"
    assert resubmitted.feedback == "Try again"
    assert resubmitted.grade == 40


def test_grade_rejects_other_statuses(store: Store) -> None:
    seeded = seed_class(store, [1])
    submission = _submit(store, seeded.assignment(1).id, content="x")
    assert submission is not None
    with pytest.raises(InvalidReviewStatusError):
        asyncio.run(
            grade_submission(
                store,
                submission.id,
                grade=1,
                feedback="",
                status="submitted",
                reviewed_by="instructor-2",
            )
        )


def test_grade_unknown_submission(store: Store) -> None:
    with pytest.raises(SubmissionNotFoundError):
        asyncio.run(
            grade_submission(
                store, uuid4(), grade=1, feedback="", status="approved", reviewed_by="t"
            )
        )


def test_last_assignment_completes_module(store: Store) -> None:
    seeded = seed_class(store, [2])
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW))
    _submit(store, seeded.assignment(1, 0).id, content="a")
    assert asyncio.run(task_queue.queue_length(MODULE_COMPLETED)) == 0

    _submit(store, seeded.assignment(1, 1).id, content="b")
    assert asyncio.run(task_queue.queue_length(MODULE_COMPLETED)) == 1


def _grade(store: Store, submission_id, status: str, now: int = NOW):
    return asyncio.run(
        grade_submission(
            store,
            submission_id,
            grade=80,
            feedback="",
            status=status,
            reviewed_by="instructor-2",
            now=now,
        )
    )


def test_approval_completes_module(store: Store) -> None:
    seeded = seed_class(store, [1])
    submission = _submit(store, seeded.assignment(1).id, content="draft")
    assert submission is not None
    _grade(store, submission.id, "changes_requested")
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW + 10))
    assert asyncio.run(task_queue.queue_length(MODULE_COMPLETED)) == 0

    _grade(store, submission.id, "approved", now=NOW + 20)

    assert asyncio.run(task_queue.queue_length(MODULE_COMPLETED)) == 1
    task = asyncio.run(task_queue.dequeue(MODULE_COMPLETED))
    assert task is not None
    assert task.payload["user_id"] == "u1"
    assert task.payload["week_number"] == 1


def test_regrading_a_completed_module_publishes_nothing(store: Store) -> None:
    seeded = seed_class(store, [1])
    asyncio.run(mark_week_attendance(store, seeded.id, "u1", 1, now=NOW))
    submission = _submit(store, seeded.assignment(1).id, content="x")
    assert submission is not None
    assert asyncio.run(task_queue.queue_length(MODULE_COMPLETED)) == 1

    _grade(store, submission.id, "approved")
    assert asyncio.run(task_queue.queue_length(MODULE_COMPLETED)) == 1
