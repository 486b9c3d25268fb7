from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import ClosureStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, dumps_json, fetchall, fetchone, loads_json
from .model import ClosureRecord, ClosureStatistics
from .repository import ClosureLedgerRepository

_COLUMNS = "year, closed_at, closed_by, statistics, description, status, completed_at"


def _row_to_record(r: dict) -> ClosureRecord:
    return ClosureRecord(
        year=str(r["year"]),
        closed_at=r["closed_at"],
        closed_by=r.get("closed_by") or "",
        statistics=ClosureStatistics.from_dict(loads_json(r.get("statistics"), {})),
        description=r.get("description") or "",
        status=ClosureStatus(r["status"]),
        completed_at=r.get("completed_at"),
    )


class MySQLClosureLedgerRepository(ClosureLedgerRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, year: str) -> Optional[ClosureRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM closure_ledger WHERE year=%s", (str(year),))
            row = fetchone(cur)
            return _row_to_record(row) if row else None

    def create(self, record: ClosureRecord) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO closure_ledger(year, closed_at, closed_by, statistics, description, status, completed_at)
                    VALUES(%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        record.year,
                        record.closed_at,
                        record.closed_by,
                        dumps_json(record.statistics.to_dict()),
                        record.description,
                        record.status.value,
                        record.completed_at,
                    ),
                )
            return True
        except mysql.connector.IntegrityError:
            # year is the primary key
            return False

    def mark_completed(self, *, year: str, completed_at: datetime) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE closure_ledger SET status=%s, completed_at=%s WHERE year=%s",
                (ClosureStatus.COMPLETED.value, completed_at, str(year)),
            )
            return cur.rowcount > 0

    def latest(self) -> Optional[ClosureRecord]:
        rows = self.list_recent(limit=1)
        return rows[0] if rows else None

    def list_recent(self, *, limit: int = 10) -> Sequence[ClosureRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM closure_ledger ORDER BY closed_at DESC LIMIT %s",
                (int(limit),),
            )
            return [_row_to_record(r) for r in fetchall(cur)]
