"""Read models produced by the progress engine.

None of these are stored.  Every query recomputes them from the attendance
and submission ledgers.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

RELEASE_PENDING = "release_pending"
PRIOR_MODULE_INCOMPLETE = "prior_module_incomplete"


@dataclass(frozen=True, slots=True)
class AssignmentRequirement:
    assignment_id: UUID
    completed: bool


@dataclass(frozen=True, slots=True)
class ModuleProgress:
    """Completion state of one module for one learner."""

    module_id: UUID
    completed: bool
    progress_percent: int
    attendance: bool
    assignments: tuple[AssignmentRequirement, ...] = ()
    completed_at: int | None = None


@dataclass(frozen=True, slots=True)
class Tally:
    completed: int
    total: int
    percentage: int


@dataclass(frozen=True, slots=True)
class AttendanceTally:
    attended: int
    total: int
    percentage: int


@dataclass(frozen=True, slots=True)
class ClassProgress:
    """Weighted class progress for one learner.

    overall = round(0.4 * modules + 0.4 * assignments + 0.2 * attendance)
    """

    overall: int
    modules: Tally
    assignments: Tally
    attendance: AttendanceTally

    @staticmethod
    def empty() -> ClassProgress:
        return ClassProgress(
            overall=0,
            modules=Tally(completed=0, total=0, percentage=0),
            assignments=Tally(completed=0, total=0, percentage=0),
            attendance=AttendanceTally(attended=0, total=0, percentage=0),
        )

    @property
    def is_complete(self) -> bool:
        """All four completion conditions of the completion trigger."""
        return (
            self.overall == 100
            and self.modules.total > 0
            and self.modules.completed == self.modules.total
            and (
                self.assignments.total == 0
                or self.assignments.completed == self.assignments.total
            )
            and self.attendance.total > 0
            and self.attendance.attended == self.attendance.total
        )


@dataclass(frozen=True, slots=True)
class AttendanceStreak:
    current_streak: int
    longest_streak: int
    attended_weeks: int
    total_weeks: int
    perfect_attendance: bool


@dataclass(frozen=True, slots=True)
class ModuleAccess:
    """Sequential gate verdict for one module.

    reason is None when accessible, else RELEASE_PENDING or
    PRIOR_MODULE_INCOMPLETE.
    """

    module_id: UUID
    week_number: int
    accessible: bool
    reason: str | None = None


@dataclass(frozen=True, slots=True)
class ProgressSummary:
    """Dashboard counts for one learner in one class."""

    total_modules: int
    unlocked_modules: int
    attendance_count: int
    total_assignments: int
    submitted_assignments: int


@dataclass(frozen=True, slots=True)
class CompletionOutcome:
    """Result of running the completion trigger once."""

    class_id: UUID
    user_id: str
    completed: bool
    newly_completed: bool = False
    badges_granted: tuple[str, ...] = ()
