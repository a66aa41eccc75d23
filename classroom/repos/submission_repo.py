from __future__ import annotations

from collections.abc import Collection
from dataclasses import replace
from typing import Protocol
from uuid import UUID

from classroom.models.submission import Submission


class SubmissionRepo(Protocol):
    async def upsert(self, submission: Submission) -> Submission: ...
    async def get(self, assignment_id: UUID, user_id: str) -> Submission | None: ...
    async def get_by_id(self, submission_id: UUID) -> Submission | None: ...
    async def list_for_user(
        self, user_id: str, assignment_ids: Collection[UUID]
    ) -> list[Submission]: ...
    async def update_review(
        self,
        submission_id: UUID,
        *,
        grade: float,
        feedback: str,
        status: str,
        reviewed_by: str,
        reviewed_at: int,
    ) -> Submission | None: ...


class InMemorySubmissionRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[UUID, str], Submission] = {}

    async def upsert(self, submission: Submission) -> Submission:
        """Insert, or overwrite the learner's existing submission in place.

        A resubmission keeps the original id and any earlier review fields.
        """
        key = (submission.assignment_id, submission.user_id)
        existing = self._store.get(key)
        if existing is not None:
            submission = replace(
                existing,
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
        self._store[key] = submission
        return submission

    async def get(self, assignment_id: UUID, user_id: str) -> Submission | None:
        return self._store.get((assignment_id, user_id))

    async def get_by_id(self, submission_id: UUID) -> Submission | None:
        for s in self._store.values():
            if s.id == submission_id:
                return s
        return None

    async def list_for_user(
        self, user_id: str, assignment_ids: Collection[UUID]
    ) -> list[Submission]:
        wanted = set(assignment_ids)
        return [
            s
            for s in self._store.values()
            if s.user_id == user_id and s.assignment_id in wanted
        ]

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
        existing = await self.get_by_id(submission_id)
        if existing is None:
            return None
        updated = replace(
            existing,
            grade=grade,
            feedback=feedback,
            status=status,
            reviewed_by=reviewed_by,
            reviewed_at=reviewed_at,
            updated_at=reviewed_at,
        )
        self._store[(updated.assignment_id, updated.user_id)] = updated
        return updated
