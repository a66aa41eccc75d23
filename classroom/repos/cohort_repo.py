from __future__ import annotations

from typing import Protocol
from uuid import UUID

from classroom.models.cohort import ClassAssignment, ClassModule, Cohort


class CohortRepo(Protocol):
    async def get_class(self, class_id: UUID) -> Cohort | None: ...
    async def get_module(self, module_id: UUID) -> ClassModule | None: ...
    async def list_modules(self, class_id: UUID) -> list[ClassModule]: ...
    async def get_assignment(self, assignment_id: UUID) -> ClassAssignment | None: ...
    async def list_assignments(self, class_id: UUID) -> list[ClassAssignment]: ...
    async def list_module_assignments(
        self, module_id: UUID
    ) -> list[ClassAssignment]: ...


class InMemoryCohortRepo:
    """Classes, their modules and assignments.

    Class content is authored elsewhere; the add_* methods exist to seed
    dev and test data.
    """

    def __init__(self) -> None:
        self._classes: dict[UUID, Cohort] = {}
        self._modules: dict[UUID, ClassModule] = {}
        self._assignments: dict[UUID, ClassAssignment] = {}

    def add_class(self, cohort: Cohort) -> None:
        if cohort.id in self._classes:
            raise ValueError("class already exists")
        self._classes[cohort.id] = cohort

    def add_module(self, module: ClassModule) -> None:
        if any(
            m.class_id == module.class_id and m.week_number == module.week_number
            for m in self._modules.values()
        ):
            raise ValueError(f"week {module.week_number} already exists in class")
        self._modules[module.id] = module

    def add_assignment(self, assignment: ClassAssignment) -> None:
        self._assignments[assignment.id] = assignment

    async def get_class(self, class_id: UUID) -> Cohort | None:
        return self._classes.get(class_id)

    async def get_module(self, module_id: UUID) -> ClassModule | None:
        return self._modules.get(module_id)

    async def list_modules(self, class_id: UUID) -> list[ClassModule]:
        modules = [m for m in self._modules.values() if m.class_id == class_id]
        return sorted(modules, key=lambda m: m.week_number)

    async def get_assignment(self, assignment_id: UUID) -> ClassAssignment | None:
        return self._assignments.get(assignment_id)

    async def list_assignments(self, class_id: UUID) -> list[ClassAssignment]:
        assignments = [a for a in self._assignments.values() if a.class_id == class_id]
        return sorted(assignments, key=lambda a: a.due_at)

    async def list_module_assignments(self, module_id: UUID) -> list[ClassAssignment]:
        assignments = [
            a for a in self._assignments.values() if a.module_id == module_id
        ]
        return sorted(assignments, key=lambda a: a.due_at)
