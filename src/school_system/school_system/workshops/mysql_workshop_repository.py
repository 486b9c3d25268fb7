from __future__ import annotations

from typing import Sequence

from ..core.enums import WorkshopStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dumps_json, fetchall, loads_json
from .model import Workshop
from .repository import WorkshopRepository


class MySQLWorkshopRepository(WorkshopRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_all(self) -> Sequence[Workshop]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT workshop_id, title, teacher_id, status, participants,
                       max_participants, archived_year
                FROM workshops
                ORDER BY workshop_id
                """
            )
            out: list[Workshop] = []
            for r in fetchall(cur):
                out.append(
                    Workshop(
                        workshop_id=str(r["workshop_id"]),
                        title=r["title"],
                        teacher_id=r.get("teacher_id"),
                        status=WorkshopStatus(r["status"]),
                        participants=tuple(str(p) for p in loads_json(r.get("participants"), [])),
                        max_participants=int(r.get("max_participants") or 0),
                        archived_year=r.get("archived_year"),
                    )
                )
            return out

    def reset_for_year(self, *, year: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE workshops SET status=%s, participants=%s, archived_year=%s",
                (WorkshopStatus.INACTIVE.value, dumps_json([]), str(year)),
            )
            return int(cur.rowcount or 0)
