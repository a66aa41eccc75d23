from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class BadgeConfig:
    """A badge a class awards on completion."""

    id: UUID
    class_id: UUID
    badge_name: str
    description: str = ""

    @staticmethod
    def new(*, class_id: UUID, badge_name: str, description: str = "") -> BadgeConfig:
        return BadgeConfig(
            id=uuid4(), class_id=class_id, badge_name=badge_name, description=description
        )


@dataclass(frozen=True, slots=True)
class BadgeGrant:
    """Issued badge.  At most one per (user_id, class_id, badge_name)."""

    id: UUID
    user_id: str
    class_id: UUID
    badge_name: str
    granted_at: int

    @staticmethod
    def new(
        *, user_id: str, class_id: UUID, badge_name: str, granted_at: int
    ) -> BadgeGrant:
        return BadgeGrant(
            id=uuid4(),
            user_id=user_id,
            class_id=class_id,
            badge_name=badge_name,
            granted_at=granted_at,
        )
