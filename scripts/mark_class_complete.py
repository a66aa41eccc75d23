#!/usr/bin/env python3
"""Backfill attendance for every week of a class and run the completion trigger.

RUN:  python scripts/mark_class_complete.py <class_id> <user_id> [--by <operator>]

For operators fixing up a learner whose attendance was taken outside the
system.  Assignments are not touched: if any are unsubmitted the
enrollment stays active and the script says so.

Requires DATABASE_URL.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from uuid import UUID

from classroom.core.config import SETTINGS
from classroom.core.logging import setup_logging
from classroom.db.engine import async_session_factory, session_scope
from classroom.repos.errors import StoreError
from classroom.repos.store import Store, pg_store
from classroom.services import events
from classroom.services.attendance_service import mark_week_attendance
from classroom.services.completion_service import run_completion_trigger
from classroom.services.progress_service import get_class_progress

logger = logging.getLogger("mark_class_complete")


class BackfillError(RuntimeError):
    """The backfill stopped part way; the caller must roll back."""


async def mark_class_complete(
    store: Store, class_id: UUID, user_id: str, *, operator: str
) -> bool:
    """Mark every module week attended, then run the trigger.  True if completed.

    Raises BackfillError or StoreError if the store fails mid-way.
    """
    if await store.enrollments.get(class_id, user_id) is None:
        logger.error("User %s is not enrolled in class %s", user_id, class_id)
        return False
    modules = await store.cohorts.list_modules(class_id)
    if not modules:
        logger.error("Class %s has no modules", class_id)
        return False

    for module in modules:
        mark = await mark_week_attendance(
            store,
            class_id,
            user_id,
            module.week_number,
            method="manual",
            checked_in_by=operator,
        )
        if mark is None:
            raise BackfillError(f"attendance for week {module.week_number} was not saved")

    outcome = await run_completion_trigger(store, class_id, user_id)
    if outcome is None:
        raise BackfillError(f"completion trigger failed for user {user_id}")
    if not outcome.completed:
        progress = await get_class_progress(store, class_id, user_id)
        if progress is not None:
            logger.warning(
                "Enrollment still active: assignments %d/%d submitted",
                progress.assignments.completed,
                progress.assignments.total,
            )
        return False

    logger.info(
        "Enrollment completed user=%s newly=%s badges=%s",
        user_id,
        outcome.newly_completed,
        list(outcome.badges_granted),
    )
    return True


async def _main(class_id: UUID, user_id: str, operator: str) -> int:
    try:
        async with events.publish_after_commit():
            async with session_scope() as session:
                ok = await mark_class_complete(
                    pg_store(session), class_id, user_id, operator=operator
                )
    except (BackfillError, StoreError) as exc:
        logger.error("Backfill rolled back: %s", exc)
        return 1
    return 0 if ok else 1


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("class_id", type=UUID)
    parser.add_argument("user_id")
    parser.add_argument("--by", default="operator", help="recorded as checked_in_by")
    args = parser.parse_args()

    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    if async_session_factory is None:
        logger.error("DATABASE_URL is not configured")
        sys.exit(2)
    sys.exit(asyncio.run(_main(args.class_id, args.user_id, args.by)))


if __name__ == "__main__":
    main()
