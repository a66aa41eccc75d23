"""The set of repositories the progress engine reads and writes.

Engine services take a Store instead of five separate repos.  The API
layer builds one per request: the in-memory singleton when no database
is configured, otherwise Pg repos sharing one session.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from classroom.repos.attendance_repo import AttendanceRepo, InMemoryAttendanceRepo
from classroom.repos.badge_repo import BadgeRepo, InMemoryBadgeRepo
from classroom.repos.cohort_repo import CohortRepo, InMemoryCohortRepo
from classroom.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from classroom.repos.pg_attendance_repo import PgAttendanceRepo
from classroom.repos.pg_badge_repo import PgBadgeRepo
from classroom.repos.pg_cohort_repo import PgCohortRepo
from classroom.repos.pg_enrollment_repo import PgEnrollmentRepo
from classroom.repos.pg_submission_repo import PgSubmissionRepo
from classroom.repos.submission_repo import InMemorySubmissionRepo, SubmissionRepo


@dataclass(frozen=True, slots=True)
class Store:
    cohorts: CohortRepo
    enrollments: EnrollmentRepo
    attendance: AttendanceRepo
    submissions: SubmissionRepo
    badges: BadgeRepo


def in_memory_store() -> Store:
    return Store(
        cohorts=InMemoryCohortRepo(),
        enrollments=InMemoryEnrollmentRepo(),
        attendance=InMemoryAttendanceRepo(),
        submissions=InMemorySubmissionRepo(),
        badges=InMemoryBadgeRepo(),
    )


def pg_store(session: AsyncSession) -> Store:
    return Store(
        cohorts=PgCohortRepo(session),
        enrollments=PgEnrollmentRepo(session),
        attendance=PgAttendanceRepo(session),
        submissions=PgSubmissionRepo(session),
        badges=PgBadgeRepo(session),
    )
