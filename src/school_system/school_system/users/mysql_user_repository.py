from __future__ import annotations

from typing import Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import GradeChange, User
from .repository import UserRepository

_COLUMNS = "user_id, full_name, email, role, grade, section, graduated_year"


def _row_to_user(row: dict) -> User:
    return User(
        user_id=str(row["user_id"]),
        full_name=row["full_name"],
        email=row.get("email") or "",
        role=Role(row["role"]),
        grade=row.get("grade"),
        section=row.get("section"),
        graduated_year=row.get("graduated_year"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM users ORDER BY user_id")
            return [_row_to_user(r) for r in fetchall(cur)]

    def apply_promotions(self, *, changes: Sequence[GradeChange]) -> int:
        if not changes:
            return 0

        updated = 0
        with db_cursor(self._conn_factory) as (_, cur):
            for ch in changes:
                # Compare-and-set on the pre-closure grade: a replayed change is a no-op.
                cur.execute(
                    """
                    UPDATE users
                    SET grade=%s, section='', graduated_year=COALESCE(%s, graduated_year)
                    WHERE user_id=%s AND role=%s AND grade=%s
                    """,
                    (ch.to_grade, ch.graduated_year, ch.user_id, Role.STUDENT.value, ch.from_grade),
                )
                updated += int(cur.rowcount or 0)
        return updated
