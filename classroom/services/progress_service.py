"""Module completion evaluator and class progress aggregator.

Completion is derived, never stored.  Every call reloads the class's
modules, the learner's attendance marks and submissions, and folds them:

  module completed   <=>  attendance for its week  AND  every assignment
                          attached to it has a completed submission
  class overall      =    round(0.4 * modules% + 0.4 * assignments%
                                + 0.2 * attendance%)

Week number is the only link between a module and attendance.

The evaluate_* / aggregate_* functions are pure and operate on domain
values.  The get_* coroutines load from a Store and return None when the
store fails, so callers can render "progress unavailable" instead of a
made-up number.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from uuid import UUID

from classroom.core.metrics import PROGRESS_COMPUTATIONS, STORE_FAILURES
from classroom.models.attendance import AttendanceMark
from classroom.models.cohort import ClassAssignment, ClassModule
from classroom.models.progress import (
    AssignmentRequirement,
    AttendanceTally,
    ClassProgress,
    ModuleProgress,
    Tally,
)
from classroom.models.submission import Submission
from classroom.repos.errors import StoreError
from classroom.repos.store import Store

logger = logging.getLogger(__name__)

# Weights for modules, assignments and attendance, in tenths.
MODULE_WEIGHT = 4
ASSIGNMENT_WEIGHT = 4
ATTENDANCE_WEIGHT = 2


def percentage(part: int, whole: int) -> int:
    """round(100 * part / whole), halves rounded up; 0 when whole is 0."""
    if whole <= 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def weighted_overall(modules_pct: int, assignments_pct: int, attendance_pct: int) -> int:
    total = (
        MODULE_WEIGHT * modules_pct
        + ASSIGNMENT_WEIGHT * assignments_pct
        + ATTENDANCE_WEIGHT * attendance_pct
    )
    return (total + 5) // 10


def completed_assignment_ids(submissions: Iterable[Submission]) -> set[UUID]:
    return {s.assignment_id for s in submissions if s.counts_as_completed}


def evaluate_module(
    module: ClassModule,
    mark: AttendanceMark | None,
    assignments: Sequence[ClassAssignment],
    submissions: Mapping[UUID, Submission],
) -> ModuleProgress:
    """Completion state of one module from its week's mark and its submissions."""
    requirements = []
    for assignment in assignments:
        submission = submissions.get(assignment.id)
        done = submission is not None and submission.counts_as_completed
        requirements.append(AssignmentRequirement(assignment.id, done))

    attended = mark is not None
    if requirements:
        met = int(attended) + sum(1 for r in requirements if r.completed)
        progress_percent = percentage(met, 1 + len(requirements))
    else:
        progress_percent = 100 if attended else 0

    completed = attended and all(r.completed for r in requirements)
    return ModuleProgress(
        module_id=module.id,
        completed=completed,
        progress_percent=progress_percent,
        attendance=attended,
        assignments=tuple(requirements),
        completed_at=mark.checked_in_at if completed and mark is not None else None,
    )


def aggregate_class_progress(
    modules: Sequence[ClassModule],
    attended_weeks: set[int],
    assignments: Sequence[ClassAssignment],
    completed_ids: set[UUID],
) -> ClassProgress:
    """Fold a class's modules, assignments and attended weeks into ClassProgress."""
    if not modules:
        return ClassProgress.empty()

    by_module: dict[UUID, list[ClassAssignment]] = {}
    for assignment in assignments:
        by_module.setdefault(assignment.module_id, []).append(assignment)

    modules_completed = 0
    for module in modules:
        if module.week_number not in attended_weeks:
            continue
        if all(a.id in completed_ids for a in by_module.get(module.id, ())):
            modules_completed += 1

    class_assignment_ids = {a.id for a in assignments}
    assignments_completed = len(completed_ids & class_assignment_ids)
    module_weeks = {m.week_number for m in modules}
    attended = len(attended_weeks & module_weeks)

    modules_pct = percentage(modules_completed, len(modules))
    assignments_pct = percentage(assignments_completed, len(assignments))
    attendance_pct = percentage(attended, len(modules))

    return ClassProgress(
        overall=weighted_overall(modules_pct, assignments_pct, attendance_pct),
        modules=Tally(
            completed=modules_completed, total=len(modules), percentage=modules_pct
        ),
        assignments=Tally(
            completed=assignments_completed,
            total=len(assignments),
            percentage=assignments_pct,
        ),
        attendance=AttendanceTally(
            attended=attended, total=len(modules), percentage=attendance_pct
        ),
    )


def is_completion_transition(
    before: ModuleProgress | None, after: ModuleProgress | None
) -> bool:
    return (
        before is not None
        and after is not None
        and not before.completed
        and after.completed
    )


async def get_module_progress(
    store: Store, class_id: UUID, user_id: str, module_id: UUID
) -> ModuleProgress | None:
    """Evaluate one module.  None if the module is unknown or the store fails."""
    try:
        module = await store.cohorts.get_module(module_id)
        if module is None or module.class_id != class_id:
            logger.debug("Module %s not found in class %s", module_id, class_id)
            return None
        mark = await store.attendance.get(class_id, user_id, module.week_number)
        assignments = await store.cohorts.list_module_assignments(module_id)
        submissions = await store.submissions.list_for_user(
            user_id, [a.id for a in assignments]
        )
    except StoreError:
        STORE_FAILURES.labels(operation="module_progress").inc()
        logger.exception(
            "Could not evaluate module=%s for user=%s",
            module_id,
            user_id,
            extra={"class_id": str(class_id), "user_id": user_id},
        )
        return None

    PROGRESS_COMPUTATIONS.labels(scope="module").inc()
    return evaluate_module(
        module, mark, assignments, {s.assignment_id: s for s in submissions}
    )


async def get_class_module_progress(
    store: Store, class_id: UUID, user_id: str
) -> list[tuple[ClassModule, ModuleProgress]] | None:
    """Evaluate every module of a class in week order with one load per ledger."""
    try:
        modules = await store.cohorts.list_modules(class_id)
        marks = await store.attendance.list_for_user(class_id, user_id)
        assignments = await store.cohorts.list_assignments(class_id)
        submissions = await store.submissions.list_for_user(
            user_id, [a.id for a in assignments]
        )
    except StoreError:
        STORE_FAILURES.labels(operation="module_progress").inc()
        logger.exception(
            "Could not evaluate modules for user=%s",
            user_id,
            extra={"class_id": str(class_id), "user_id": user_id},
        )
        return None

    marks_by_week = {m.week_number: m for m in marks}
    submissions_by_assignment = {s.assignment_id: s for s in submissions}
    result = []
    for module in modules:
        module_assignments = [a for a in assignments if a.module_id == module.id]
        progress = evaluate_module(
            module,
            marks_by_week.get(module.week_number),
            module_assignments,
            submissions_by_assignment,
        )
        result.append((module, progress))
    PROGRESS_COMPUTATIONS.labels(scope="module").inc(len(result))
    return result


async def get_class_progress(
    store: Store, class_id: UUID, user_id: str
) -> ClassProgress | None:
    """Aggregate progress for one learner.  Zeroed for a class with no modules."""
    try:
        modules = await store.cohorts.list_modules(class_id)
        marks = await store.attendance.list_for_user(class_id, user_id)
        assignments = await store.cohorts.list_assignments(class_id)
        submissions = await store.submissions.list_for_user(
            user_id, [a.id for a in assignments]
        )
    except StoreError:
        STORE_FAILURES.labels(operation="class_progress").inc()
        logger.exception(
            "Could not aggregate progress for user=%s",
            user_id,
            extra={"class_id": str(class_id), "user_id": user_id},
        )
        return None

    PROGRESS_COMPUTATIONS.labels(scope="class").inc()
    return aggregate_class_progress(
        modules,
        {m.week_number for m in marks},
        assignments,
        completed_assignment_ids(submissions),
    )
