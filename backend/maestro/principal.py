"""Caller identity handed to every workflow operation."""

from __future__ import annotations

from dataclasses import dataclass

from maestro.core.enums import UserRole


@dataclass(frozen=True)
class CallerContext:
    """
    The authenticated user making a request.

    Workflows never read session or request state themselves; the serving
    layer builds one of these and passes it in explicitly.
    """

    user_id: int
    role: UserRole
    is_master: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_mentor(self) -> bool:
        return self.role == UserRole.MENTOR

    @property
    def is_student(self) -> bool:
        return self.role == UserRole.STUDENT

    @classmethod
    def from_user(cls, user) -> "CallerContext":
        return cls(user_id=user.id, role=UserRole(user.role), is_master=bool(user.is_master))
