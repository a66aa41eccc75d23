from __future__ import annotations

import logging
from uuid import UUID

from classroom.core.metrics import BADGE_GRANTS
from classroom.models.badge import BadgeGrant
from classroom.repos.store import Store

logger = logging.getLogger(__name__)


async def grant_badge(
    store: Store, user_id: str, class_id: UUID, badge_name: str, granted_at: int
) -> tuple[BadgeGrant, bool]:
    """Idempotently grant a class badge.

    Returns (grant, created).  An existing grant for the same
    (user, class, badge) is returned unchanged.  StoreError propagates.
    """
    existing = await store.badges.get_grant(user_id, class_id, badge_name)
    if existing is not None:
        BADGE_GRANTS.labels(result="existing").inc()
        return existing, False

    grant = BadgeGrant.new(
        user_id=user_id, class_id=class_id, badge_name=badge_name, granted_at=granted_at
    )
    if not await store.badges.add_grant(grant):
        # lost a race with a concurrent grant
        winner = await store.badges.get_grant(user_id, class_id, badge_name)
        BADGE_GRANTS.labels(result="existing").inc()
        return winner or grant, False

    BADGE_GRANTS.labels(result="granted").inc()
    logger.info(
        "Granted badge %r to user=%s",
        badge_name,
        user_id,
        extra={"class_id": str(class_id), "user_id": user_id},
    )
    return grant, True


async def grant_class_badges(
    store: Store, user_id: str, class_id: UUID, granted_at: int
) -> tuple[str, ...]:
    """Grant every badge configured for the class.  Returns the newly granted names."""
    granted = []
    for config in await store.badges.list_configs(class_id):
        _, created = await grant_badge(
            store, user_id, class_id, config.badge_name, granted_at
        )
        if created:
            granted.append(config.badge_name)
    return tuple(granted)
