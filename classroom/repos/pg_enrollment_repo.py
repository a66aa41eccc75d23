"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from classroom.db.tables import EnrollmentRow
from classroom.models.enrollment import ACTIVE, COMPLETED, Enrollment
from classroom.repos.errors import translate_store_errors


class PgEnrollmentRepo:
    """Satisfies the EnrollmentRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_store_errors
    async def get(self, class_id: UUID, user_id: str) -> Enrollment | None:
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.class_id == class_id, EnrollmentRow.user_id == user_id
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)

    @translate_store_errors
    async def add(self, enrollment: Enrollment) -> None:
        row = EnrollmentRow(
            class_id=enrollment.class_id,
            user_id=enrollment.user_id,
            enrolled_at=enrollment.enrolled_at,
            status=enrollment.status,
            completed_at=enrollment.completed_at,
        )
        self._session.add(row)
        await self._session.flush()

    @translate_store_errors
    async def mark_completed(
        self, class_id: UUID, user_id: str, completed_at: int
    ) -> bool:
        """Conditional single-row update: only an active enrollment flips."""
        stmt = (
            update(EnrollmentRow)
            .where(EnrollmentRow.class_id == class_id)
            .where(EnrollmentRow.user_id == user_id)
            .where(EnrollmentRow.status == ACTIVE)
            .values(status=COMPLETED, completed_at=completed_at)
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    @translate_store_errors
    async def list_by_class(self, class_id: UUID) -> list[Enrollment]:
        stmt = select(EnrollmentRow).where(EnrollmentRow.class_id == class_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        class_id=row.class_id,
        user_id=row.user_id,
        enrolled_at=row.enrolled_at,
        status=row.status,
        completed_at=row.completed_at,
    )
