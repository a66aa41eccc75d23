from __future__ import annotations

import logging
from uuid import UUID

from classroom.core.clock import now_ts
from classroom.core.metrics import STORE_FAILURES
from classroom.models.cohort import ClassAssignment
from classroom.models.progress import ModuleProgress
from classroom.models.submission import REVIEW_STATUSES, Submission
from classroom.repos.errors import StoreError
from classroom.repos.store import Store
from classroom.services import events
from classroom.services.progress_service import (
    get_module_progress,
    is_completion_transition,
)

logger = logging.getLogger(__name__)


class AssignmentNotFoundError(LookupError):
    pass


class SubmissionNotFoundError(LookupError):
    pass


class SubmissionLockedError(Exception):
    """The assignment stops accepting submissions after its deadline."""


class InvalidReviewStatusError(ValueError):
    pass


async def _load_assignment(store: Store, assignment_id: UUID) -> ClassAssignment:
    assignment = await store.cohorts.get_assignment(assignment_id)
    if assignment is None:
        raise AssignmentNotFoundError(str(assignment_id))
    return assignment


async def submit_assignment(
    store: Store,
    assignment_id: UUID,
    user_id: str,
    *,
    content: str | None = None,
    url: str | None = None,
    file_url: str | None = None,
    git_url: str | None = None,
    repo_directory: str | None = None,
    now: int | None = None,
) -> Submission | None:
    """Create or replace the learner's submission for an assignment.

    Lateness is recomputed on every submission from its own timestamp, so a
    resubmission before the deadline clears an earlier late flag.
    Returns None if the store fails.
    """
    now = now if now is not None else now_ts()
    try:
        assignment = await _load_assignment(store, assignment_id)
    except StoreError:
        STORE_FAILURES.labels(operation="submit_assignment").inc()
        logger.exception("Could not load assignment=%s", assignment_id)
        return None

    is_late = assignment.is_past_due(now)
    if is_late and assignment.lock_after_deadline:
        logger.warning(
            "Rejected submission after deadline assignment=%s user=%s",
            assignment_id,
            user_id,
        )
        raise SubmissionLockedError(str(assignment_id))

    before = await get_module_progress(
        store, assignment.class_id, user_id, assignment.module_id
    )
    submission = Submission.new(
        assignment_id=assignment_id,
        user_id=user_id,
        class_id=assignment.class_id,
        submitted_at=now,
        is_late=is_late,
        content=content,
        url=url,
        file_url=file_url,
        git_url=git_url,
        repo_directory=repo_directory,
    )
    try:
        submission = await store.submissions.upsert(submission)
    except StoreError:
        STORE_FAILURES.labels(operation="submit_assignment").inc()
        logger.exception(
            "Could not save submission assignment=%s user=%s",
            assignment_id,
            user_id,
            extra={"class_id": str(assignment.class_id), "user_id": user_id},
        )
        return None

    logger.info(
        "Submission saved assignment=%s user=%s status=%s",
        assignment_id,
        user_id,
        submission.status,
        extra={"class_id": str(assignment.class_id), "user_id": user_id},
    )

    await _publish_if_module_completed(store, assignment, user_id, before)
    return submission


async def _publish_if_module_completed(
    store: Store,
    assignment: ClassAssignment,
    user_id: str,
    before: ModuleProgress | None,
) -> None:
    after = await get_module_progress(
        store, assignment.class_id, user_id, assignment.module_id
    )
    if not is_completion_transition(before, after):
        return
    try:
        module = await store.cohorts.get_module(assignment.module_id)
    except StoreError:
        STORE_FAILURES.labels(operation="module_progress").inc()
        logger.exception(
            "Could not load module=%s for completion event",
            assignment.module_id,
            extra={"class_id": str(assignment.class_id), "user_id": user_id},
        )
        return
    if module is None:
        return
    logger.info("Module week=%d completed for user=%s", module.week_number, user_id)
    await events.publish_module_completed(
        assignment.class_id, user_id, module.id, module.week_number, after.completed_at
    )


async def grade_submission(
    store: Store,
    submission_id: UUID,
    *,
    grade: float,
    feedback: str,
    status: str,
    reviewed_by: str,
    now: int | None = None,
) -> Submission | None:
    """Record an instructor's review.  Returns None if the store fails."""
    if status not in REVIEW_STATUSES:
        raise InvalidReviewStatusError(
            f"status must be approved|changes_requested (got {status!r})"
        )
    try:
        existing = await store.submissions.get_by_id(submission_id)
        assignment = None
        if existing is not None:
            assignment = await store.cohorts.get_assignment(existing.assignment_id)
    except StoreError:
        STORE_FAILURES.labels(operation="grade_submission").inc()
        logger.exception("Could not load submission=%s", submission_id)
        return None
    if existing is None:
        raise SubmissionNotFoundError(str(submission_id))

    before = None
    if assignment is not None:
        before = await get_module_progress(
            store, assignment.class_id, existing.user_id, assignment.module_id
        )
    try:
        updated = await store.submissions.update_review(
            submission_id,
            grade=grade,
            feedback=feedback,
            status=status,
            reviewed_by=reviewed_by,
            reviewed_at=now if now is not None else now_ts(),
        )
    except StoreError:
        STORE_FAILURES.labels(operation="grade_submission").inc()
        logger.exception("Could not grade submission=%s", submission_id)
        return None

    if updated is None:
        raise SubmissionNotFoundError(str(submission_id))

    logger.info(
        "Graded submission=%s status=%s grade=%s by=%s",
        submission_id,
        status,
        grade,
        reviewed_by,
        extra={"class_id": str(updated.class_id), "user_id": updated.user_id},
    )
    if assignment is not None:
        await _publish_if_module_completed(store, assignment, updated.user_id, before)
    return updated


async def get_user_submission(
    store: Store, assignment_id: UUID, user_id: str
) -> Submission | None:
    try:
        return await store.submissions.get(assignment_id, user_id)
    except StoreError:
        STORE_FAILURES.labels(operation="get_submission").inc()
        logger.exception("Could not load submission assignment=%s user=%s", assignment_id, user_id)
        return None
