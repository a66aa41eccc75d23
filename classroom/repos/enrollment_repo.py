from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from classroom.models.enrollment import ACTIVE, COMPLETED, Enrollment


class EnrollmentRepo(Protocol):
    async def get(self, class_id: UUID, user_id: str) -> Enrollment | None: ...
    async def add(self, enrollment: Enrollment) -> None: ...
    async def mark_completed(
        self, class_id: UUID, user_id: str, completed_at: int
    ) -> bool: ...
    async def list_by_class(self, class_id: UUID) -> list[Enrollment]: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[UUID, str], Enrollment] = {}

    async def get(self, class_id: UUID, user_id: str) -> Enrollment | None:
        return self._store.get((class_id, user_id))

    async def add(self, enrollment: Enrollment) -> None:
        key = (enrollment.class_id, enrollment.user_id)
        if key in self._store:
            raise ValueError("enrollment already exists")
        self._store[key] = enrollment

    async def mark_completed(
        self, class_id: UUID, user_id: str, completed_at: int
    ) -> bool:
        """Flip active -> completed.  Returns False when nothing changed."""
        key = (class_id, user_id)
        existing = self._store.get(key)
        if existing is None or existing.status != ACTIVE:
            return False
        self._store[key] = replace(
            existing, status=COMPLETED, completed_at=completed_at
        )
        return True

    async def list_by_class(self, class_id: UUID) -> list[Enrollment]:
        return [e for e in self._store.values() if e.class_id == class_id]
