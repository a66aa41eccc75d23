"""Submission ledger endpoints: submit, fetch, grade.

Submitting and grading both re-run the completion trigger for the
submission's owner.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from classroom.api.attendance import CompletionOut, completion_out
from classroom.api.dependencies import (
    get_store,
    progress_unavailable,
    require_instructor,
    require_user,
)
from classroom.models.principal import Principal
from classroom.models.submission import Submission
from classroom.repos.store import Store
from classroom.services.completion_service import run_completion_trigger
from classroom.services.submission_service import (
    AssignmentNotFoundError,
    InvalidReviewStatusError,
    SubmissionLockedError,
    SubmissionNotFoundError,
    get_user_submission,
    grade_submission,
    submit_assignment,
)

router = APIRouter(prefix="/v1", tags=["submissions"])


class SubmissionIn(BaseModel):
    content: str | None = None
    url: str | None = None
    file_url: str | None = None
    git_url: str | None = None
    repo_directory: str | None = None


class GradeIn(BaseModel):
    grade: float
    feedback: str = ""
    status: str  # approved|changes_requested


class SubmissionOut(BaseModel):
    id: UUID
    assignment_id: UUID
    user_id: str
    class_id: UUID
    submitted_at: int
    status: str
    is_late: bool
    content: str | None = None
    url: str | None = None
    file_url: str | None = None
    git_url: str | None = None
    repo_directory: str | None = None
    grade: float | None = None
    feedback: str | None = None
    reviewed_by: str | None = None
    reviewed_at: int | None = None


class SubmissionResultOut(BaseModel):
    submission: SubmissionOut
    completion: CompletionOut | None


def _submission_out(s: Submission) -> SubmissionOut:
    return SubmissionOut(
        id=s.id,
        assignment_id=s.assignment_id,
        user_id=s.user_id,
        class_id=s.class_id,
        submitted_at=s.submitted_at,
        status=s.status,
        is_late=s.is_late,
        content=s.content,
        url=s.url,
        file_url=s.file_url,
        git_url=s.git_url,
        repo_directory=s.repo_directory,
        grade=s.grade,
        feedback=s.feedback,
        reviewed_by=s.reviewed_by,
        reviewed_at=s.reviewed_at,
    )


@router.put(
    "/assignments/{assignment_id}/submission",
    response_model=SubmissionResultOut,
)
async def put_submission(
    assignment_id: UUID,
    body: SubmissionIn,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[Store, Depends(get_store)],
) -> SubmissionResultOut:
    try:
        submission = await submit_assignment(
            store,
            assignment_id,
            principal.user_id,
            content=body.content,
            url=body.url,
            file_url=body.file_url,
            git_url=body.git_url,
            repo_directory=body.repo_directory,
        )
    except AssignmentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="assignment not found"
        ) from None
    except SubmissionLockedError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="assignment is closed after its deadline",
        ) from None
    if submission is None:
        raise progress_unavailable()

    outcome = await run_completion_trigger(store, submission.class_id, principal.user_id)
    return SubmissionResultOut(
        submission=_submission_out(submission), completion=completion_out(outcome)
    )


@router.get("/assignments/{assignment_id}/submission", response_model=SubmissionOut)
async def get_submission(
    assignment_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    store: Annotated[Store, Depends(get_store)],
) -> SubmissionOut:
    submission = await get_user_submission(store, assignment_id, principal.user_id)
    if submission is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="no submission")
    return _submission_out(submission)


@router.post("/submissions/{submission_id}/grade", response_model=SubmissionResultOut)
async def post_grade(
    submission_id: UUID,
    body: GradeIn,
    principal: Annotated[Principal, Depends(require_instructor)],
    store: Annotated[Store, Depends(get_store)],
) -> SubmissionResultOut:
    try:
        graded = await grade_submission(
            store,
            submission_id,
            grade=body.grade,
            feedback=body.feedback,
            status=body.status,
            reviewed_by=principal.user_id,
        )
    except InvalidReviewStatusError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from None
    except SubmissionNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="submission not found"
        ) from None
    if graded is None:
        raise progress_unavailable()

    outcome = await run_completion_trigger(store, graded.class_id, graded.user_id)
    return SubmissionResultOut(
        submission=_submission_out(graded), completion=completion_out(outcome)
    )
