from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a row of the users roster.

    Students carry `grade`/`section`; staff rows leave them empty.
    """

    user_id: str
    full_name: str
    role: Role
    email: str = ""
    grade: Optional[str] = None
    section: Optional[str] = None
    graduated_year: Optional[str] = None

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT


@dataclass(frozen=True)
class GradeChange:
    """One promotion to apply: move `user_id` from `from_grade` to `to_grade`.

    `from_grade` is the token as stored before the closure; the update only
    applies while the live row still holds it.
    """

    user_id: str
    from_grade: str
    to_grade: str
    graduated_year: Optional[str] = None
