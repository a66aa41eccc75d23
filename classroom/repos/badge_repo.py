from __future__ import annotations

from typing import Protocol
from uuid import UUID

from classroom.models.badge import BadgeConfig, BadgeGrant


class BadgeRepo(Protocol):
    async def list_configs(self, class_id: UUID) -> list[BadgeConfig]: ...
    async def get_grant(
        self, user_id: str, class_id: UUID, badge_name: str
    ) -> BadgeGrant | None: ...
    async def add_grant(self, grant: BadgeGrant) -> bool: ...
    async def list_grants(self, user_id: str) -> list[BadgeGrant]: ...


class InMemoryBadgeRepo:
    def __init__(self) -> None:
        self._configs: dict[UUID, BadgeConfig] = {}
        self._grants: dict[tuple[str, UUID, str], BadgeGrant] = {}

    def add_config(self, config: BadgeConfig) -> None:
        self._configs[config.id] = config

    async def list_configs(self, class_id: UUID) -> list[BadgeConfig]:
        return [c for c in self._configs.values() if c.class_id == class_id]

    async def get_grant(
        self, user_id: str, class_id: UUID, badge_name: str
    ) -> BadgeGrant | None:
        return self._grants.get((user_id, class_id, badge_name))

    async def add_grant(self, grant: BadgeGrant) -> bool:
        """Insert unless the (user, class, badge) grant exists.  True if inserted."""
        key = (grant.user_id, grant.class_id, grant.badge_name)
        if key in self._grants:
            return False
        self._grants[key] = grant
        return True

    async def list_grants(self, user_id: str) -> list[BadgeGrant]:
        return [g for g in self._grants.values() if g.user_id == user_id]
