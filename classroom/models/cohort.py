from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Cohort:
    """A time-boxed class that learners enroll in and progress through weekly."""

    id: UUID
    title: str
    start_at: int
    end_at: int
    capacity: int | None = None
    status: str = "upcoming"  # upcoming|ongoing|completed|archived

    @staticmethod
    def new(
        *,
        title: str,
        start_at: int,
        end_at: int,
        capacity: int | None = None,
        status: str = "upcoming",
    ) -> Cohort:
        return Cohort(
            id=uuid4(),
            title=title,
            start_at=start_at,
            end_at=end_at,
            capacity=capacity,
            status=status,
        )


@dataclass(frozen=True, slots=True)
class ClassModule:
    """One week of a class.

    week_number is 1-based and unique within the class.  It orders the
    content, drives the sequential gate and is the only join key to
    attendance marks.
    """

    id: UUID
    class_id: UUID
    week_number: int
    title: str = ""
    release_at: int | None = None
    locked: bool = False

    @staticmethod
    def new(
        *,
        class_id: UUID,
        week_number: int,
        title: str = "",
        release_at: int | None = None,
        locked: bool = False,
    ) -> ClassModule:
        return ClassModule(
            id=uuid4(),
            class_id=class_id,
            week_number=week_number,
            title=title,
            release_at=release_at,
            locked=locked,
        )


@dataclass(frozen=True, slots=True)
class ClassAssignment:
    id: UUID
    module_id: UUID
    class_id: UUID
    due_at: int
    title: str = ""
    reward_xp: int = 0
    lock_after_deadline: bool = False

    @staticmethod
    def new(
        *,
        module_id: UUID,
        class_id: UUID,
        due_at: int,
        title: str = "",
        reward_xp: int = 0,
        lock_after_deadline: bool = False,
    ) -> ClassAssignment:
        return ClassAssignment(
            id=uuid4(),
            module_id=module_id,
            class_id=class_id,
            due_at=due_at,
            title=title,
            reward_xp=reward_xp,
            lock_after_deadline=lock_after_deadline,
        )

    def is_past_due(self, now: int) -> bool:
        return now > self.due_at
