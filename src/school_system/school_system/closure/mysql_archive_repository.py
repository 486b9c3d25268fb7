from __future__ import annotations

from dataclasses import asdict
from datetime import datetime
from typing import Sequence

from ..attendance.model import AttendanceSession
from ..core.constants import ARCHIVE_ATTENDANCE, ARCHIVE_STUDENTS, ARCHIVE_WORKSHOPS
from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dumps_json, fetchall, loads_json
from ..users.model import User
from ..workshops.model import Workshop
from .model import ArchiveCounts
from .repository import ArchiveRepository

_TABLES = {
    ARCHIVE_STUDENTS: ("archive_students", "user_id"),
    ARCHIVE_WORKSHOPS: ("archive_workshops", "workshop_id"),
    ARCHIVE_ATTENDANCE: ("archive_attendance", "session_id"),
}


class MySQLArchiveRepository(ArchiveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def write_snapshot(
        self,
        *,
        year: str,
        students: Sequence[User],
        workshops: Sequence[Workshop],
        sessions: Sequence[AttendanceSession],
        archived_at: datetime,
    ) -> ArchiveCounts:
        year = str(year)
        # INSERT IGNORE keeps the first copy: the archive is write-once.
        with db_cursor(self._conn_factory) as (_, cur):
            if students:
                cur.executemany(
                    "INSERT IGNORE INTO archive_students(year, user_id, payload, archived_at) VALUES(%s,%s,%s,%s)",
                    [(year, s.user_id, dumps_json(asdict(s)), archived_at) for s in students],
                )
            if workshops:
                cur.executemany(
                    "INSERT IGNORE INTO archive_workshops(year, workshop_id, payload, archived_at) VALUES(%s,%s,%s,%s)",
                    [(year, w.workshop_id, dumps_json(asdict(w)), archived_at) for w in workshops],
                )
            if sessions:
                cur.executemany(
                    "INSERT IGNORE INTO archive_attendance(year, session_id, payload, archived_at) VALUES(%s,%s,%s,%s)",
                    [(year, s.session_id, dumps_json(asdict(s)), archived_at) for s in sessions],
                )
        return ArchiveCounts(students=len(students), workshops=len(workshops), attendance=len(sessions))

    def load_students(self, *, year: str) -> Sequence[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT payload FROM archive_students WHERE year=%s ORDER BY user_id",
                (str(year),),
            )
            out: list[User] = []
            for r in fetchall(cur):
                data = loads_json(r["payload"], {})
                out.append(
                    User(
                        user_id=str(data["user_id"]),
                        full_name=data.get("full_name") or "",
                        email=data.get("email") or "",
                        role=Role(data.get("role", Role.STUDENT.value)),
                        grade=data.get("grade"),
                        section=data.get("section"),
                        graduated_year=data.get("graduated_year"),
                    )
                )
            return out

    def archived_ids(self, *, year: str, kind: str) -> set[str]:
        if kind not in _TABLES:
            raise ValidationError(f"Tipo de archivo desconocido: {kind}")
        table, id_col = _TABLES[kind]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {id_col} AS id FROM {table} WHERE year=%s", (str(year),))
            return {str(r["id"]) for r in fetchall(cur)}
