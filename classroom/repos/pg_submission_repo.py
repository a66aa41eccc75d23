"""PostgreSQL implementation of SubmissionRepo."""

from __future__ import annotations

from collections.abc import Collection
from typing import Any
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from classroom.db.tables import SubmissionRow
from classroom.models.submission import Submission
from classroom.repos.errors import translate_store_errors

_TABLE = SubmissionRow.__table__

# Columns a resubmission overwrites; review fields survive it.
_RESUBMIT_COLUMNS = (
    "status",
    "is_late",
    "content",
    "url",
    "file_url",
    "git_url",
    "repo_directory",
    "submitted_at",
    "updated_at",
)


class PgSubmissionRepo:
    """Satisfies the SubmissionRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @translate_store_errors
    async def upsert(self, submission: Submission) -> Submission:
        stmt = pg_insert(_TABLE).values(
            id=submission.id,
            assignment_id=submission.assignment_id,
            user_id=submission.user_id,
            class_id=submission.class_id,
            status=submission.status,
            is_late=submission.is_late,
            content=submission.content,
            url=submission.url,
            file_url=submission.file_url,
            git_url=submission.git_url,
            repo_directory=submission.repo_directory,
            submitted_at=submission.submitted_at,
            updated_at=submission.updated_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[_TABLE.c.assignment_id, _TABLE.c.user_id],
            set_={col: stmt.excluded[col] for col in _RESUBMIT_COLUMNS},
        ).returning(*_TABLE.c)
        row = (await self._session.execute(stmt)).one()
        return _row_to_submission(row)

    @translate_store_errors
    async def get(self, assignment_id: UUID, user_id: str) -> Submission | None:
        stmt = select(SubmissionRow).where(
            SubmissionRow.assignment_id == assignment_id,
            SubmissionRow.user_id == user_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_submission(row)

    @translate_store_errors
    async def get_by_id(self, submission_id: UUID) -> Submission | None:
        row = await self._session.get(SubmissionRow, submission_id)
        if row is None:
            return None
        return _row_to_submission(row)

    @translate_store_errors
    async def list_for_user(
        self, user_id: str, assignment_ids: Collection[UUID]
    ) -> list[Submission]:
        if not assignment_ids:
            return []
        stmt = select(SubmissionRow).where(
            SubmissionRow.user_id == user_id,
            SubmissionRow.assignment_id.in_(list(assignment_ids)),
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_submission(r) for r in rows]

    @translate_store_errors
    async def update_review(
        self,
        submission_id: UUID,
        *,
        grade: float,
        feedback: str,
        status: str,
        reviewed_by: str,
        reviewed_at: int,
    ) -> Submission | None:
        stmt = (
            update(_TABLE)
            .where(_TABLE.c.id == submission_id)
            .values(
                grade=grade,
                feedback=feedback,
                status=status,
                reviewed_by=reviewed_by,
                reviewed_at=reviewed_at,
                updated_at=reviewed_at,
            )
            .returning(*_TABLE.c)
        )
        row = (await self._session.execute(stmt)).one_or_none()
        if row is None:
            return None
        return _row_to_submission(row)


def _row_to_submission(row: Any) -> Submission:
    return Submission(
        id=row.id,
        assignment_id=row.assignment_id,
        user_id=row.user_id,
        class_id=row.class_id,
        submitted_at=row.submitted_at,
        status=row.status,
        is_late=bool(row.is_late),
        content=row.content,
        url=row.url,
        file_url=row.file_url,
        git_url=row.git_url,
        repo_directory=row.repo_directory,
        grade=row.grade,
        feedback=row.feedback,
        reviewed_by=row.reviewed_by,
        reviewed_at=row.reviewed_at,
        updated_at=row.updated_at,
    )
