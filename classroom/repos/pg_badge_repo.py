"""PostgreSQL implementation of BadgeRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from classroom.db.tables import BadgeConfigRow, BadgeGrantRow
from classroom.models.badge import BadgeConfig, BadgeGrant
from classroom.repos.errors import translate_store_errors


class PgBadgeRepo:
    """Satisfies the BadgeRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_store_errors
    async def list_configs(self, class_id: UUID) -> list[BadgeConfig]:
        stmt = (
            select(BadgeConfigRow)
            .where(BadgeConfigRow.class_id == class_id)
            .order_by(BadgeConfigRow.badge_name)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [
            BadgeConfig(
                id=r.id,
                class_id=r.class_id,
                badge_name=r.badge_name,
                description=r.description or "",
            )
            for r in rows
        ]

    @translate_store_errors
    async def get_grant(
        self, user_id: str, class_id: UUID, badge_name: str
    ) -> BadgeGrant | None:
        stmt = select(BadgeGrantRow).where(
            BadgeGrantRow.user_id == user_id,
            BadgeGrantRow.class_id == class_id,
            BadgeGrantRow.badge_name == badge_name,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_grant(row)

    @translate_store_errors
    async def add_grant(self, grant: BadgeGrant) -> bool:
        """INSERT ... ON CONFLICT DO NOTHING.  True if a row was inserted."""
        table = BadgeGrantRow.__table__
        stmt = (
            pg_insert(table)
            .values(
                id=grant.id,
                user_id=grant.user_id,
                class_id=grant.class_id,
                badge_name=grant.badge_name,
                granted_at=grant.granted_at,
            )
            .on_conflict_do_nothing(
                index_elements=[table.c.user_id, table.c.class_id, table.c.badge_name]
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    @translate_store_errors
    async def list_grants(self, user_id: str) -> list[BadgeGrant]:
        stmt = (
            select(BadgeGrantRow)
            .where(BadgeGrantRow.user_id == user_id)
            .order_by(BadgeGrantRow.granted_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_grant(r) for r in rows]


def _row_to_grant(row: BadgeGrantRow) -> BadgeGrant:
    return BadgeGrant(
        id=row.id,
        user_id=row.user_id,
        class_id=row.class_id,
        badge_name=row.badge_name,
        granted_at=row.granted_at,
    )
