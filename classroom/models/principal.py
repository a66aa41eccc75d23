from __future__ import annotations

from dataclasses import dataclass

INSTRUCTOR_ROLES = frozenset({"instructor", "admin"})


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    Carried through the request via FastAPI's dependency system.

        user_id: subject from JWT
        roles: platform roles (admin, instructor, user)
    """

    user_id: str
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def has_any_role(self, roles: set[str] | frozenset[str]) -> bool:
        return bool(self.roles & roles)

    @property
    def is_instructor(self) -> bool:
        return self.has_any_role(INSTRUCTOR_ROLES)
