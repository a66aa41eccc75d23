"""PostgreSQL implementation of AttendanceRepo."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from classroom.db.tables import AttendanceRow
from classroom.models.attendance import AttendanceMark
from classroom.repos.attendance_repo import pick_latest
from classroom.repos.errors import translate_store_errors

_TABLE = AttendanceRow.__table__


class PgAttendanceRepo:
    """Satisfies the AttendanceRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_store_errors
    async def upsert(self, mark: AttendanceMark) -> AttendanceMark:
        """INSERT ... ON CONFLICT (class_id, user_id, week_number) DO UPDATE.

        Two concurrent marks for the same week land on one row.
        """
        stmt = pg_insert(_TABLE).values(
            id=mark.id,
            class_id=mark.class_id,
            user_id=mark.user_id,
            week_number=mark.week_number,
            checked_in_at=mark.checked_in_at,
            method=mark.method,
            checked_in_by=mark.checked_in_by,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[_TABLE.c.class_id, _TABLE.c.user_id, _TABLE.c.week_number],
            set_={
                "checked_in_at": stmt.excluded.checked_in_at,
                "method": stmt.excluded.method,
                "checked_in_by": stmt.excluded.checked_in_by,
            },
        ).returning(*_TABLE.c)
        row = (await self._session.execute(stmt)).one()
        return _row_to_mark(row)

    @translate_store_errors
    async def get(
        self, class_id: UUID, user_id: str, week_number: int
    ) -> AttendanceMark | None:
        stmt = (
            select(AttendanceRow)
            .where(AttendanceRow.class_id == class_id)
            .where(AttendanceRow.user_id == user_id)
            .where(AttendanceRow.week_number == week_number)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return pick_latest([_row_to_mark(r) for r in rows])

    @translate_store_errors
    async def list_for_user(self, class_id: UUID, user_id: str) -> list[AttendanceMark]:
        stmt = (
            select(AttendanceRow)
            .where(AttendanceRow.class_id == class_id)
            .where(AttendanceRow.user_id == user_id)
            .order_by(AttendanceRow.week_number)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_mark(r) for r in rows]

    @translate_store_errors
    async def list_for_class(
        self, class_id: UUID, week_number: int | None = None
    ) -> list[AttendanceMark]:
        stmt = (
            select(AttendanceRow)
            .where(AttendanceRow.class_id == class_id)
            .order_by(AttendanceRow.week_number, AttendanceRow.checked_in_at.desc())
        )
        if week_number is not None:
            stmt = stmt.where(AttendanceRow.week_number == week_number)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_mark(r) for r in rows]


def _row_to_mark(row: Any) -> AttendanceMark:
    # Accepts both ORM rows and the Row returned by INSERT ... RETURNING
    return AttendanceMark(
        id=row.id,
        class_id=row.class_id,
        user_id=row.user_id,
        week_number=row.week_number,
        checked_in_at=row.checked_in_at,
        method=row.method,
        checked_in_by=row.checked_in_by,
    )
