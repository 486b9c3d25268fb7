from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from ..core.enums import ClosurePhase
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClosureLock
from .repository import CheckpointRepository, ClosureLockRepository


class MySQLCheckpointRepository(CheckpointRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def completed_phases(self, *, year: str) -> set[ClosurePhase]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT phase FROM closure_checkpoints WHERE year=%s", (str(year),))
            return {ClosurePhase(r["phase"]) for r in fetchall(cur)}

    def mark_completed(
        self,
        *,
        year: str,
        phase: ClosurePhase,
        idempotency_key: str,
        completed_at: datetime,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO closure_checkpoints(year, phase, idempotency_key, completed_at)
                VALUES(%s,%s,%s,%s)
                """,
                (str(year), phase.value, idempotency_key, completed_at),
            )


class MySQLClosureLockRepository(ClosureLockRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def acquire(self, *, year: str, holder: str, now: datetime, ttl_minutes: int) -> bool:
        expires_at = now + timedelta(minutes=int(ttl_minutes))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM closure_locks WHERE year=%s AND expires_at < %s",
                (str(year), now),
            )
            cur.execute(
                """
                INSERT IGNORE INTO closure_locks(year, holder, acquired_at, expires_at)
                VALUES(%s,%s,%s,%s)
                """,
                (str(year), holder, now, expires_at),
            )
            return cur.rowcount == 1

    def release(self, *, year: str, holder: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM closure_locks WHERE year=%s AND holder=%s",
                (str(year), holder),
            )

    def get(self, year: str) -> Optional[ClosureLock]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT year, holder, acquired_at, expires_at FROM closure_locks WHERE year=%s",
                (str(year),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return ClosureLock(
                year=str(r["year"]),
                holder=r["holder"],
                acquired_at=r["acquired_at"],
                expires_at=r["expires_at"],
            )
