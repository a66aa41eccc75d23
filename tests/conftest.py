from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterator
from pathlib import Path
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

# Ensure repo root is on sys.path so `import classroom` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from classroom.api.dependencies import get_store  # noqa: E402
from classroom.main import app  # noqa: E402
from classroom.models.badge import BadgeConfig  # noqa: E402
from classroom.models.cohort import ClassAssignment, ClassModule, Cohort  # noqa: E402
from classroom.models.enrollment import Enrollment  # noqa: E402
from classroom.repos.store import Store, in_memory_store  # noqa: E402
from classroom.services import token_service  # noqa: E402
from classroom.services.task_queue import task_queue  # noqa: E402

# Fixed clock for deterministic deadlines: 2026-01-05T00:00:00Z
NOW = 1_767_571_200
# Deadlines for API tests, which run on the wall clock.
FAR_FUTURE = 4_102_444_800  # 2100-01-01
WEEK = 7 * 24 * 3600


@pytest.fixture(autouse=True)
def store() -> Iterator[Store]:
    """Fresh in-memory store per test, also served to the API."""
    fresh = in_memory_store()
    app.dependency_overrides[get_store] = lambda: fresh
    yield fresh
    app.dependency_overrides.pop(get_store, None)


@pytest.fixture(autouse=True)
def reset_task_queue() -> None:
    """Clear task queues between tests."""
    if hasattr(task_queue, "_queues"):
        task_queue._queues.clear()  # type: ignore[union-attr]


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "learner-1",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(username: str = "learner-1", roles: list[str] | None = None) -> dict:
    return {"Authorization": f"Bearer {mint_token(username, roles)}"}


@pytest.fixture
def token() -> str:
    return mint_token()


@pytest.fixture
def instructor_token() -> str:
    return mint_token(username="instructor-1", roles=["instructor"])


# ---------------------------------------------------------------------------
# Seed helpers
# ---------------------------------------------------------------------------


class SeededClass:
    """A class with modules (one per week) and their assignments."""

    def __init__(self, cohort: Cohort) -> None:
        self.cohort = cohort
        self.modules: list[ClassModule] = []
        self.assignments: dict[int, list[ClassAssignment]] = {}

    @property
    def id(self) -> UUID:
        return self.cohort.id

    def module(self, week: int) -> ClassModule:
        return next(m for m in self.modules if m.week_number == week)

    def assignment(self, week: int, index: int = 0) -> ClassAssignment:
        return self.assignments[week][index]


def seed_class(
    store: Store,
    assignments_per_week: list[int],
    *,
    due_at: int = FAR_FUTURE,
    locked_weeks: dict[int, int | None] | None = None,
    lock_after_deadline: bool = False,
) -> SeededClass:
    """Seed a class with one module per entry; entry i is the assignment count of week i+1.

    locked_weeks maps week -> release_at for explicitly locked modules.
    """
    locked_weeks = locked_weeks or {}
    cohort = Cohort.new(title="Python 101", start_at=NOW, end_at=NOW + 12 * WEEK)
    store.cohorts.add_class(cohort)  # type: ignore[attr-defined]
    seeded = SeededClass(cohort)
    for i, count in enumerate(assignments_per_week):
        week = i + 1
        module = ClassModule.new(
            class_id=cohort.id,
            week_number=week,
            title=f"Week {week}",
            locked=week in locked_weeks,
            release_at=locked_weeks.get(week),
        )
        store.cohorts.add_module(module)  # type: ignore[attr-defined]
        seeded.modules.append(module)
        seeded.assignments[week] = []
        for n in range(count):
            assignment = ClassAssignment.new(
                module_id=module.id,
                class_id=cohort.id,
                due_at=due_at,
                title=f"Week {week} task {n + 1}",
                lock_after_deadline=lock_after_deadline,
            )
            store.cohorts.add_assignment(assignment)  # type: ignore[attr-defined]
            seeded.assignments[week].append(assignment)
    return seeded


def enroll(store: Store, class_id: UUID, user_id: str = "learner-1") -> Enrollment:
    enrollment = Enrollment(class_id=class_id, user_id=user_id, enrolled_at=NOW)
    asyncio.run(store.enrollments.add(enrollment))
    return enrollment


def add_badge(store: Store, class_id: UUID, name: str) -> BadgeConfig:
    config = BadgeConfig.new(class_id=class_id, badge_name=name)
    store.badges.add_config(config)  # type: ignore[attr-defined]
    return config
