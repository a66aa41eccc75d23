from __future__ import annotations

import logging
from uuid import UUID

from classroom.core.clock import now_ts
from classroom.core.metrics import STORE_FAILURES
from classroom.models.attendance import ATTENDANCE_METHODS, AttendanceMark
from classroom.repos.errors import StoreError
from classroom.repos.store import Store
from classroom.services import events
from classroom.services.progress_service import (
    get_module_progress,
    is_completion_transition,
)

logger = logging.getLogger(__name__)


class InvalidAttendanceMethodError(ValueError):
    pass


class UnknownWeekError(LookupError):
    pass


async def mark_week_attendance(
    store: Store,
    class_id: UUID,
    user_id: str,
    week_number: int,
    *,
    method: str = "manual",
    checked_in_by: str | None = None,
    now: int | None = None,
) -> AttendanceMark | None:
    """Record that a learner attended a week.  Marking a week twice updates it.

    Publishes module_completed when this mark completes the week's module.
    Returns None if the store fails.
    """
    if method not in ATTENDANCE_METHODS:
        raise InvalidAttendanceMethodError(f"method must be manual|qr|auto (got {method!r})")

    try:
        modules = await store.cohorts.list_modules(class_id)
    except StoreError:
        STORE_FAILURES.labels(operation="mark_attendance").inc()
        logger.exception("Could not load modules for class=%s", class_id)
        return None

    module = next((m for m in modules if m.week_number == week_number), None)
    if module is None:
        logger.warning("Rejected attendance for unknown week=%d class=%s", week_number, class_id)
        raise UnknownWeekError(f"class has no week {week_number}")

    before = await get_module_progress(store, class_id, user_id, module.id)
    mark = AttendanceMark.new(
        class_id=class_id,
        user_id=user_id,
        week_number=week_number,
        checked_in_at=now if now is not None else now_ts(),
        method=method,
        checked_in_by=checked_in_by,
    )
    try:
        mark = await store.attendance.upsert(mark)
    except StoreError:
        STORE_FAILURES.labels(operation="mark_attendance").inc()
        logger.exception(
            "Could not mark attendance week=%d for user=%s",
            week_number,
            user_id,
            extra={"class_id": str(class_id), "user_id": user_id},
        )
        return None

    logger.info(
        "Marked attendance week=%d user=%s method=%s by=%s",
        week_number,
        user_id,
        mark.method,
        mark.checked_in_by,
        extra={"class_id": str(class_id), "user_id": user_id},
    )

    after = await get_module_progress(store, class_id, user_id, module.id)
    if is_completion_transition(before, after):
        logger.info("Module week=%d completed for user=%s", week_number, user_id)
        await events.publish_module_completed(
            class_id, user_id, module.id, week_number, after.completed_at
        )
    return mark


async def get_week_attendance(
    store: Store, class_id: UUID, user_id: str
) -> list[AttendanceMark] | None:
    """A learner's marks for a class, by week."""
    try:
        return await store.attendance.list_for_user(class_id, user_id)
    except StoreError:
        STORE_FAILURES.labels(operation="week_attendance").inc()
        logger.exception("Could not load attendance for user=%s class=%s", user_id, class_id)
        return None


async def get_class_week_attendance(
    store: Store, class_id: UUID, week_number: int | None = None
) -> list[AttendanceMark] | None:
    """Roster view: every mark in a class, optionally for one week."""
    try:
        return await store.attendance.list_for_class(class_id, week_number)
    except StoreError:
        STORE_FAILURES.labels(operation="class_attendance").inc()
        logger.exception("Could not load attendance roster for class=%s", class_id)
        return None
