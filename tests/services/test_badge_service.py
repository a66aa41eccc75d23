from __future__ import annotations

import asyncio
from uuid import uuid4

from classroom.repos.store import Store
from classroom.services.badge_service import grant_badge, grant_class_badges
from tests.conftest import NOW, add_badge


def test_grant_badge_is_idempotent(store: Store) -> None:
    class_id = uuid4()
    grant, created = asyncio.run(grant_badge(store, "u1", class_id, "Finisher", NOW))
    again, created_again = asyncio.run(
        grant_badge(store, "u1", class_id, "Finisher", NOW + 10)
    )

    assert created is True
    assert created_again is False
    assert again.id == grant.id
    assert again.granted_at == NOW
    assert len(asyncio.run(store.badges.list_grants("u1"))) == 1


def test_same_badge_name_in_two_classes_is_two_grants(store: Store) -> None:
    asyncio.run(grant_badge(store, "u1", uuid4(), "Finisher", NOW))
    asyncio.run(grant_badge(store, "u1", uuid4(), "Finisher", NOW))
    assert len(asyncio.run(store.badges.list_grants("u1"))) == 2


def test_grant_class_badges_skips_held_badges(store: Store) -> None:
    class_id = uuid4()
    add_badge(store, class_id, "A")
    add_badge(store, class_id, "B")
    add_badge(store, uuid4(), "Other class")
    asyncio.run(grant_badge(store, "u1", class_id, "A", NOW))

    granted = asyncio.run(grant_class_badges(store, "u1", class_id, NOW))
    assert granted == ("B",)
