"""Completion trigger.

Run after any attendance mark, submission or grading event for a
(class, user) pair.  When the learner's aggregated progress meets every
completion condition, the enrollment moves active -> completed and the
class's badges are granted.

The read-aggregate-write sequence is not atomic.  Two events landing
together may both see incomplete progress; the next event re-runs the
trigger and converges.  The enrollment write itself is conditional on
status == active, so a completed enrollment is never written twice and
never regresses.
"""

from __future__ import annotations

import logging
from uuid import UUID

from classroom.core.clock import now_ts
from classroom.core.metrics import ENROLLMENT_COMPLETIONS, STORE_FAILURES
from classroom.models.enrollment import ACTIVE
from classroom.models.progress import CompletionOutcome
from classroom.repos.errors import StoreError
from classroom.repos.store import Store
from classroom.services import events
from classroom.services.badge_service import grant_class_badges
from classroom.services.progress_service import get_class_progress

logger = logging.getLogger(__name__)


async def run_completion_trigger(
    store: Store, class_id: UUID, user_id: str, *, now: int | None = None
) -> CompletionOutcome | None:
    """Re-evaluate one enrollment.  Safe to call any number of times.

    Returns None when the learner is not enrolled or the store fails.
    """
    extra = {"class_id": str(class_id), "user_id": user_id}
    try:
        enrollment = await store.enrollments.get(class_id, user_id)
    except StoreError:
        STORE_FAILURES.labels(operation="completion_trigger").inc()
        logger.exception("Could not load enrollment for user=%s", user_id, extra=extra)
        return None

    if enrollment is None:
        logger.debug("No enrollment for user=%s in class=%s", user_id, class_id)
        return None
    if enrollment.is_completed:
        # badges missed at flip time are granted on a later run
        granted_at = enrollment.completed_at
        badges = await _grant_badges(
            store, class_id, user_id, granted_at if granted_at is not None else now_ts()
        )
        return CompletionOutcome(class_id, user_id, completed=True, badges_granted=badges)
    if enrollment.status != ACTIVE:
        return CompletionOutcome(class_id, user_id, completed=False)

    progress = await get_class_progress(store, class_id, user_id)
    if progress is None:
        return None
    if not progress.is_complete:
        logger.debug(
            "Enrollment not complete overall=%d user=%s", progress.overall, user_id, extra=extra
        )
        return CompletionOutcome(class_id, user_id, completed=False)

    completed_at = now if now is not None else now_ts()
    try:
        flipped = await store.enrollments.mark_completed(class_id, user_id, completed_at)
    except StoreError:
        STORE_FAILURES.labels(operation="completion_trigger").inc()
        logger.exception("Could not complete enrollment for user=%s", user_id, extra=extra)
        return None

    if not flipped:
        # another event completed it first
        return CompletionOutcome(class_id, user_id, completed=True)

    ENROLLMENT_COMPLETIONS.inc()
    logger.info("Enrollment completed for user=%s", user_id, extra=extra)

    badges = await _grant_badges(store, class_id, user_id, completed_at)
    await events.publish_class_completed(class_id, user_id, completed_at, badges)
    return CompletionOutcome(
        class_id, user_id, completed=True, newly_completed=True, badges_granted=badges
    )


async def _grant_badges(
    store: Store, class_id: UUID, user_id: str, granted_at: int
) -> tuple[str, ...]:
    """Grant the class's badges; a store failure is logged and retried next run."""
    try:
        return await grant_class_badges(store, user_id, class_id, granted_at)
    except StoreError:
        STORE_FAILURES.labels(operation="grant_badges").inc()
        logger.exception(
            "Could not grant class badges to user=%s",
            user_id,
            extra={"class_id": str(class_id), "user_id": user_id},
        )
        return ()
