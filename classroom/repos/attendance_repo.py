from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from classroom.models.attendance import AttendanceMark

logger = logging.getLogger(__name__)


class AttendanceRepo(Protocol):
    async def upsert(self, mark: AttendanceMark) -> AttendanceMark: ...
    async def get(
        self, class_id: UUID, user_id: str, week_number: int
    ) -> AttendanceMark | None: ...
    async def list_for_user(
        self, class_id: UUID, user_id: str
    ) -> list[AttendanceMark]: ...
    async def list_for_class(
        self, class_id: UUID, week_number: int | None = None
    ) -> list[AttendanceMark]: ...


def pick_latest(marks: Sequence[AttendanceMark]) -> AttendanceMark | None:
    """Resolve the marks found for one (class, user, week) to a single one.

    The store owns the uniqueness constraint.  If it ever surfaces more
    than one row, the most recent check-in wins.
    """
    if not marks:
        return None
    if len(marks) > 1:
        first = marks[0]
        logger.warning(
            "Found %d attendance marks for class=%s user=%s week=%d; using latest",
            len(marks),
            first.class_id,
            first.user_id,
            first.week_number,
        )
    return max(marks, key=lambda m: (m.checked_in_at, str(m.id)))


def _roster_order(mark: AttendanceMark) -> tuple[int, int]:
    return (mark.week_number, -mark.checked_in_at)


class InMemoryAttendanceRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[UUID, str, int], AttendanceMark] = {}

    async def upsert(self, mark: AttendanceMark) -> AttendanceMark:
        existing = self._store.get(mark.key)
        if existing is not None:
            mark = replace(
                existing,
                checked_in_at=mark.checked_in_at,
                method=mark.method,
                checked_in_by=mark.checked_in_by,
            )
        self._store[mark.key] = mark
        return mark

    async def get(
        self, class_id: UUID, user_id: str, week_number: int
    ) -> AttendanceMark | None:
        return self._store.get((class_id, user_id, week_number))

    async def list_for_user(self, class_id: UUID, user_id: str) -> list[AttendanceMark]:
        marks = [
            m
            for m in self._store.values()
            if m.class_id == class_id and m.user_id == user_id
        ]
        return sorted(marks, key=lambda m: m.week_number)

    async def list_for_class(
        self, class_id: UUID, week_number: int | None = None
    ) -> list[AttendanceMark]:
        marks = [
            m
            for m in self._store.values()
            if m.class_id == class_id
            and (week_number is None or m.week_number == week_number)
        ]
        return sorted(marks, key=_roster_order)
