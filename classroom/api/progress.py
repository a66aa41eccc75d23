"""Progress read endpoints.

Every response is recomputed from the attendance and submission ledgers.
A 503 "progress unavailable" means the store failed; the engine never
substitutes a default.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from classroom.api.dependencies import (
    get_store,
    progress_unavailable,
    require_instructor,
    require_user,
)
from classroom.models.principal import Principal
from classroom.repos.errors import StoreError
from classroom.repos.store import Store
from classroom.services.gate_service import get_module_access, get_progress_summary
from classroom.services.progress_service import get_class_progress, get_module_progress
from classroom.services.streak_service import get_attendance_streak

router = APIRouter(prefix="/v1/classes", tags=["progress"])


class TallyOut(BaseModel):
    completed: int
    total: int
    percentage: int


class AttendanceTallyOut(BaseModel):
    attended: int
    total: int
    percentage: int


class ClassProgressOut(BaseModel):
    overall: int
    modules: TallyOut
    assignments: TallyOut
    attendance: AttendanceTallyOut


class AssignmentRequirementOut(BaseModel):
    assignment_id: UUID
    completed: bool


class ModuleProgressOut(BaseModel):
    module_id: UUID
    completed: bool
    progress_percent: int
    attendance: bool
    assignments: list[AssignmentRequirementOut]
    completed_at: int | None = None


class ModuleAccessOut(BaseModel):
    module_id: UUID
    week_number: int
    accessible: bool
    reason: str | None = None


class AttendanceStreakOut(BaseModel):
    current_streak: int
    longest_streak: int
    attended_weeks: int
    total_weeks: int
    perfect_attendance: bool


class ProgressSummaryOut(BaseModel):
    total_modules: int
    unlocked_modules: int
    attendance_count: int
    total_assignments: int
    submitted_assignments: int


async def _class_progress(store: Store, class_id: UUID, user_id: str) -> ClassProgressOut:
    progress = await get_class_progress(store, class_id, user_id)
    if progress is None:
        raise progress_unavailable()
    return ClassProgressOut(**asdict(progress))


@router.get("/{class_id}/progress", response_model=ClassProgressOut)
async def my_class_progress(
    class_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[Store, Depends(get_store)],
) -> ClassProgressOut:
    return await _class_progress(store, class_id, principal.user_id)


@router.get("/{class_id}/students/{user_id}/progress", response_model=ClassProgressOut)
async def student_class_progress(
    class_id: UUID,
    user_id: str,
    _principal: Annotated[Principal, Depends(require_instructor)],
    store: Annotated[Store, Depends(get_store)],
) -> ClassProgressOut:
    return await _class_progress(store, class_id, user_id)


@router.get("/{class_id}/modules/access", response_model=list[ModuleAccessOut])
async def module_access(
    class_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[Store, Depends(get_store)],
) -> list[ModuleAccessOut]:
    verdicts = await get_module_access(
        store, class_id, principal.user_id, is_instructor=principal.is_instructor
    )
    if verdicts is None:
        raise progress_unavailable()
    return [ModuleAccessOut(**asdict(v)) for v in verdicts]


@router.get("/{class_id}/modules/{module_id}/progress", response_model=ModuleProgressOut)
async def module_progress(
    class_id: UUID,
    module_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[Store, Depends(get_store)],
) -> ModuleProgressOut:
    try:
        module = await store.cohorts.get_module(module_id)
    except StoreError:
        raise progress_unavailable() from None
    if module is None or module.class_id != class_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="module not found")

    progress = await get_module_progress(store, class_id, principal.user_id, module_id)
    if progress is None:
        raise progress_unavailable()
    return ModuleProgressOut(**asdict(progress))


@router.get("/{class_id}/attendance/streak", response_model=AttendanceStreakOut)
async def attendance_streak(
    class_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[Store, Depends(get_store)],
) -> AttendanceStreakOut:
    streak = await get_attendance_streak(store, class_id, principal.user_id)
    if streak is None:
        raise progress_unavailable()
    return AttendanceStreakOut(**asdict(streak))


@router.get("/{class_id}/summary", response_model=ProgressSummaryOut)
async def progress_summary(
    class_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[Store, Depends(get_store)],
) -> ProgressSummaryOut:
    summary = await get_progress_summary(store, class_id, principal.user_id)
    if summary is None:
        raise progress_unavailable()
    return ProgressSummaryOut(**asdict(summary))
