"""Attendance ledger endpoints.

Marking a week re-runs the completion trigger for the learner, so the
response reports whether this mark completed the class.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from classroom.api.dependencies import (
    get_store,
    progress_unavailable,
    require_instructor,
    require_user,
)
from classroom.models.attendance import AttendanceMark
from classroom.models.principal import Principal
from classroom.models.progress import CompletionOutcome
from classroom.repos.store import Store
from classroom.services.attendance_service import (
    InvalidAttendanceMethodError,
    UnknownWeekError,
    get_class_week_attendance,
    get_week_attendance,
    mark_week_attendance,
)
from classroom.services.completion_service import run_completion_trigger

router = APIRouter(prefix="/v1/classes", tags=["attendance"])


class AttendanceIn(BaseModel):
    week_number: int = Field(ge=1)
    method: str = "manual"  # manual|qr|auto
    user_id: str | None = None  # instructors may mark another learner


class AttendanceOut(BaseModel):
    id: UUID
    class_id: UUID
    user_id: str
    week_number: int
    checked_in_at: int
    method: str
    checked_in_by: str | None


class CompletionOut(BaseModel):
    completed: bool
    newly_completed: bool
    badges_granted: list[str]


class MarkAttendanceOut(BaseModel):
    attendance: AttendanceOut
    completion: CompletionOut | None


def _attendance_out(mark: AttendanceMark) -> AttendanceOut:
    return AttendanceOut(
        id=mark.id,
        class_id=mark.class_id,
        user_id=mark.user_id,
        week_number=mark.week_number,
        checked_in_at=mark.checked_in_at,
        method=mark.method,
        checked_in_by=mark.checked_in_by,
    )


def completion_out(outcome: CompletionOutcome | None) -> CompletionOut | None:
    if outcome is None:
        return None
    return CompletionOut(
        completed=outcome.completed,
        newly_completed=outcome.newly_completed,
        badges_granted=list(outcome.badges_granted),
    )


@router.post(
    "/{class_id}/attendance",
    response_model=MarkAttendanceOut,
    status_code=status.HTTP_201_CREATED,
)
async def mark_attendance(
    class_id: UUID,
    body: AttendanceIn,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[Store, Depends(get_store)],
) -> MarkAttendanceOut:
    learner_id = body.user_id or principal.user_id
    if learner_id != principal.user_id and not principal.is_instructor:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )

    try:
        mark = await mark_week_attendance(
            store,
            class_id,
            learner_id,
            body.week_number,
            method=body.method,
            checked_in_by=principal.user_id,
        )
    except InvalidAttendanceMethodError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from None
    except UnknownWeekError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from None
    if mark is None:
        raise progress_unavailable()

    outcome = await run_completion_trigger(store, class_id, learner_id)
    return MarkAttendanceOut(
        attendance=_attendance_out(mark), completion=completion_out(outcome)
    )


@router.get("/{class_id}/attendance", response_model=list[AttendanceOut])
async def my_attendance(
    class_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[Store, Depends(get_store)],
) -> list[AttendanceOut]:
    marks = await get_week_attendance(store, class_id, principal.user_id)
    if marks is None:
        raise progress_unavailable()
    return [_attendance_out(m) for m in marks]


@router.get("/{class_id}/attendance/roster", response_model=list[AttendanceOut])
async def attendance_roster(
    class_id: UUID,
    _principal: Annotated[Principal, Depends(require_instructor)],
    store: Annotated[Store, Depends(get_store)],
    week: Annotated[int | None, Query(ge=1)] = None,
) -> list[AttendanceOut]:
    marks = await get_class_week_attendance(store, class_id, week)
    if marks is None:
        raise progress_unavailable()
    return [_attendance_out(m) for m in marks]
