from __future__ import annotations

from typing import Sequence

from ..core.enums import AttendanceMark
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, AttendanceSession
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_sessions(self) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, session_date, grade, section, workshop_id
                FROM attendance_sessions
                ORDER BY session_date, session_id
                """
            )
            sessions = fetchall(cur)

            cur.execute(
                """
                SELECT session_id, student_id, student_name, status
                FROM attendance_records
                ORDER BY session_id, record_id
                """
            )
            records: dict[str, list[AttendanceRecord]] = {}
            for r in fetchall(cur):
                try:
                    mark = AttendanceMark(r["status"])
                except ValueError:
                    mark = AttendanceMark.NONE
                records.setdefault(str(r["session_id"]), []).append(
                    AttendanceRecord(
                        student_id=str(r["student_id"]),
                        student_name=r.get("student_name") or "",
                        status=mark,
                    )
                )

            return [
                AttendanceSession(
                    session_id=str(s["session_id"]),
                    session_date=s["session_date"],
                    grade=s.get("grade"),
                    section=s.get("section"),
                    workshop_id=s.get("workshop_id"),
                    records=tuple(records.get(str(s["session_id"]), [])),
                )
                for s in sessions
            ]

    def count_sessions(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM attendance_sessions")
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def delete_archived(self, *, year: str) -> int:
        # attendance_records rows go with the session (ON DELETE CASCADE).
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                DELETE s FROM attendance_sessions s
                JOIN archive_attendance a
                  ON a.year=%s AND a.session_id=s.session_id
                """,
                (str(year),),
            )
            return int(cur.rowcount or 0)
