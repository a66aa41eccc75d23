from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

ATTENDANCE_METHODS = frozenset({"manual", "qr", "auto"})


@dataclass(frozen=True, slots=True)
class AttendanceMark:
    """Presence of one learner for one week of a class.

    Natural key is (class_id, user_id, week_number); marking the same week
    again replaces the timestamp and method rather than adding a row.
    """

    id: UUID
    class_id: UUID
    user_id: str
    week_number: int
    checked_in_at: int
    method: str = "manual"  # manual|qr|auto
    checked_in_by: str | None = None

    @property
    def key(self) -> tuple[UUID, str, int]:
        return (self.class_id, self.user_id, self.week_number)

    @staticmethod
    def new(
        *,
        class_id: UUID,
        user_id: str,
        week_number: int,
        checked_in_at: int,
        method: str = "manual",
        checked_in_by: str | None = None,
    ) -> AttendanceMark:
        return AttendanceMark(
            id=uuid4(),
            class_id=class_id,
            user_id=user_id,
            week_number=week_number,
            checked_in_at=checked_in_at,
            method=method,
            checked_in_by=checked_in_by or user_id,
        )
