"""Sequential gate: which modules a learner may open right now.

A learner may open module i only when both hold:

  released  : the module is not explicitly locked, or its release time
              has passed
  unblocked : every earlier module (lower week) is completed

Instructors open everything.  A locked verdict carries its reason; when
both conditions fail the reason is PRIOR_MODULE_INCOMPLETE.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from uuid import UUID

from classroom.core.clock import now_ts
from classroom.core.metrics import PROGRESS_COMPUTATIONS, STORE_FAILURES
from classroom.models.cohort import ClassModule
from classroom.models.progress import (
    PRIOR_MODULE_INCOMPLETE,
    RELEASE_PENDING,
    ModuleAccess,
    ProgressSummary,
)
from classroom.repos.errors import StoreError
from classroom.repos.store import Store
from classroom.services.progress_service import get_class_module_progress

logger = logging.getLogger(__name__)


def is_released(module: ClassModule, now: int) -> bool:
    if not module.locked:
        return True
    return module.release_at is not None and module.release_at <= now


def evaluate_module_access(
    modules: Sequence[ClassModule],
    completed: Sequence[bool],
    *,
    is_instructor: bool,
    now: int,
) -> list[ModuleAccess]:
    """Gate verdicts for modules given in ascending week order.

    completed[i] is the completion state of modules[i].
    """
    if len(modules) != len(completed):
        raise ValueError("modules and completed must be the same length")

    verdicts = []
    all_prior_completed = True
    for module, done in zip(modules, completed):
        reason = None
        if not is_instructor:
            if not all_prior_completed:
                reason = PRIOR_MODULE_INCOMPLETE
            elif not is_released(module, now):
                reason = RELEASE_PENDING
        verdicts.append(
            ModuleAccess(
                module_id=module.id,
                week_number=module.week_number,
                accessible=reason is None,
                reason=reason,
            )
        )
        all_prior_completed = all_prior_completed and done
    return verdicts


async def get_module_access(
    store: Store,
    class_id: UUID,
    user_id: str,
    *,
    is_instructor: bool = False,
    now: int | None = None,
) -> list[ModuleAccess] | None:
    evaluated = await get_class_module_progress(store, class_id, user_id)
    if evaluated is None:
        return None
    PROGRESS_COMPUTATIONS.labels(scope="access").inc()
    return evaluate_module_access(
        [module for module, _ in evaluated],
        [progress.completed for _, progress in evaluated],
        is_instructor=is_instructor,
        now=now if now is not None else now_ts(),
    )


async def get_progress_summary(
    store: Store, class_id: UUID, user_id: str, *, now: int | None = None
) -> ProgressSummary | None:
    """Dashboard counts: modules, unlocked modules, attendance and submissions."""
    access = await get_module_access(store, class_id, user_id, now=now)
    if access is None:
        return None
    try:
        marks = await store.attendance.list_for_user(class_id, user_id)
        assignments = await store.cohorts.list_assignments(class_id)
        submissions = await store.submissions.list_for_user(
            user_id, [a.id for a in assignments]
        )
    except StoreError:
        STORE_FAILURES.labels(operation="progress_summary").inc()
        logger.exception(
            "Could not build progress summary for user=%s",
            user_id,
            extra={"class_id": str(class_id), "user_id": user_id},
        )
        return None

    PROGRESS_COMPUTATIONS.labels(scope="summary").inc()
    return ProgressSummary(
        total_modules=len(access),
        unlocked_modules=sum(1 for a in access if a.accessible),
        attendance_count=len(marks),
        total_assignments=len(assignments),
        submitted_assignments=len(submissions),
    )
