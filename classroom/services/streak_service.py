"""Attendance streaks over a class's weekly modules."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from uuid import UUID

from classroom.core.metrics import PROGRESS_COMPUTATIONS, STORE_FAILURES
from classroom.models.progress import AttendanceStreak
from classroom.repos.errors import StoreError
from classroom.repos.store import Store

logger = logging.getLogger(__name__)


def calculate_attendance_streak(
    week_numbers: Sequence[int], attended: set[int]
) -> AttendanceStreak:
    """Streaks for one learner.

    week_numbers must be in ascending order.  current_streak counts back
    from the latest attended week until the first missed week;
    longest_streak is the longest run of attended weeks anywhere.
    """
    present = [w in attended for w in week_numbers]

    longest = 0
    run = 0
    for hit in present:
        run = run + 1 if hit else 0
        longest = max(longest, run)

    current = 0
    if any(present):
        last = max(i for i, hit in enumerate(present) if hit)
        for hit in reversed(present[: last + 1]):
            if not hit:
                break
            current += 1

    attended_count = sum(present)
    total = len(week_numbers)
    return AttendanceStreak(
        current_streak=current,
        longest_streak=longest,
        attended_weeks=attended_count,
        total_weeks=total,
        perfect_attendance=total > 0 and attended_count == total,
    )


async def get_attendance_streak(
    store: Store, class_id: UUID, user_id: str
) -> AttendanceStreak | None:
    try:
        modules = await store.cohorts.list_modules(class_id)
        marks = await store.attendance.list_for_user(class_id, user_id)
    except StoreError:
        STORE_FAILURES.labels(operation="attendance_streak").inc()
        logger.exception(
            "Could not compute streak for user=%s",
            user_id,
            extra={"class_id": str(class_id), "user_id": user_id},
        )
        return None

    PROGRESS_COMPUTATIONS.labels(scope="streak").inc()
    return calculate_attendance_streak(
        [m.week_number for m in modules], {m.week_number for m in marks}
    )
