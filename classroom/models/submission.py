from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

# Having submitted is what counts for progress; review outcome does not.
COMPLETED_STATUSES = frozenset({"submitted", "late", "reviewed", "approved"})
REVIEW_STATUSES = frozenset({"approved", "changes_requested"})


@dataclass(frozen=True, slots=True)
class Submission:
    """A learner's single submission for an assignment.

    Natural key is (assignment_id, user_id); resubmitting updates this record.
    """

    id: UUID
    assignment_id: UUID
    user_id: str
    class_id: UUID
    submitted_at: int
    status: str = "submitted"  # submitted|late|reviewed|approved|changes_requested
    is_late: bool = False
    content: str | None = None
    url: str | None = None
    file_url: str | None = None
    git_url: str | None = None
    repo_directory: str | None = None
    grade: float | None = None
    feedback: str | None = None
    reviewed_by: str | None = None
    reviewed_at: int | None = None
    updated_at: int | None = None

    @property
    def counts_as_completed(self) -> bool:
        return self.status in COMPLETED_STATUSES

    @staticmethod
    def new(
        *,
        assignment_id: UUID,
        user_id: str,
        class_id: UUID,
        submitted_at: int,
        is_late: bool,
        content: str | None = None,
        url: str | None = None,
        file_url: str | None = None,
        git_url: str | None = None,
        repo_directory: str | None = None,
    ) -> Submission:
        return Submission(
            id=uuid4(),
            assignment_id=assignment_id,
            user_id=user_id,
            class_id=class_id,
            submitted_at=submitted_at,
            status="late" if is_late else "submitted",
            is_late=is_late,
            content=content,
            url=url,
            file_url=file_url,
            git_url=git_url,
            repo_directory=repo_directory,
            updated_at=submitted_at,
        )
