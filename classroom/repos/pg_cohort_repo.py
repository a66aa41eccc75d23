"""PostgreSQL implementation of CohortRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classroom.db.tables import ClassAssignmentRow, ClassModuleRow, ClassRow
from classroom.models.cohort import ClassAssignment, ClassModule, Cohort
from classroom.repos.errors import translate_store_errors


class PgCohortRepo:
    """Satisfies the CohortRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_store_errors
    async def get_class(self, class_id: UUID) -> Cohort | None:
        row = await self._session.get(ClassRow, class_id)
        if row is None:
            return None
        return _row_to_class(row)

    @translate_store_errors
    async def get_module(self, module_id: UUID) -> ClassModule | None:
        row = await self._session.get(ClassModuleRow, module_id)
        if row is None:
            return None
        return _row_to_module(row)

    @translate_store_errors
    async def list_modules(self, class_id: UUID) -> list[ClassModule]:
        stmt = (
            select(ClassModuleRow)
            .where(ClassModuleRow.class_id == class_id)
            .order_by(ClassModuleRow.week_number)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_module(r) for r in rows]

    @translate_store_errors
    async def get_assignment(self, assignment_id: UUID) -> ClassAssignment | None:
        row = await self._session.get(ClassAssignmentRow, assignment_id)
        if row is None:
            return None
        return _row_to_assignment(row)

    @translate_store_errors
    async def list_assignments(self, class_id: UUID) -> list[ClassAssignment]:
        stmt = (
            select(ClassAssignmentRow)
            .where(ClassAssignmentRow.class_id == class_id)
            .order_by(ClassAssignmentRow.due_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_assignment(r) for r in rows]

    @translate_store_errors
    async def list_module_assignments(self, module_id: UUID) -> list[ClassAssignment]:
        stmt = (
            select(ClassAssignmentRow)
            .where(ClassAssignmentRow.module_id == module_id)
            .order_by(ClassAssignmentRow.due_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_assignment(r) for r in rows]


def _row_to_class(row: ClassRow) -> Cohort:
    return Cohort(
        id=row.id,
        title=row.title,
        start_at=row.start_at,
        end_at=row.end_at,
        capacity=row.capacity,
        status=row.status,
    )


def _row_to_module(row: ClassModuleRow) -> ClassModule:
    return ClassModule(
        id=row.id,
        class_id=row.class_id,
        week_number=row.week_number,
        title=row.title or "",
        release_at=row.release_at,
        locked=bool(row.locked),
    )


def _row_to_assignment(row: ClassAssignmentRow) -> ClassAssignment:
    return ClassAssignment(
        id=row.id,
        module_id=row.module_id,
        class_id=row.class_id,
        due_at=row.due_at,
        title=row.title or "",
        reward_xp=row.reward_xp or 0,
        lock_after_deadline=bool(row.lock_after_deadline),
    )
