from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

ACTIVE = "active"
COMPLETED = "completed"
REMOVED = "removed"


@dataclass(frozen=True, slots=True)
class Enrollment:
    """One learner in one class.  Unique per (class_id, user_id).

    Only the completion trigger moves status to "completed", and nothing
    moves it back.
    """

    class_id: UUID
    user_id: str
    enrolled_at: int
    status: str = ACTIVE  # active|completed|removed
    completed_at: int | None = None

    @property
    def is_completed(self) -> bool:
        return self.status == COMPLETED
