from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..attendance.model import AttendanceSession
from ..core.enums import ClosurePhase
from ..users.model import User
from ..workshops.model import Workshop
from .model import ArchiveCounts, ClosureLock, ClosureRecord


class ArchiveRepository(Protocol):
    """Year-scoped, write-once copies of live entities."""

    def write_snapshot(
        self,
        *,
        year: str,
        students: Sequence[User],
        workshops: Sequence[Workshop],
        sessions: Sequence[AttendanceSession],
        archived_at: datetime,
    ) -> ArchiveCounts:
        """Copy everything in one grouped write. Existing (year, id) keys are kept as-is."""

        raise NotImplementedError

    def load_students(self, *, year: str) -> Sequence[User]:
        raise NotImplementedError

    def archived_ids(self, *, year: str, kind: str) -> set[str]:
        raise NotImplementedError


class ClosureLedgerRepository(Protocol):
    def get(self, year: str) -> Optional[ClosureRecord]:
        raise NotImplementedError

    def create(self, record: ClosureRecord) -> bool:
        """Insert the record; False when the year already has one."""

        raise NotImplementedError

    def mark_completed(self, *, year: str, completed_at: datetime) -> bool:
        raise NotImplementedError

    def latest(self) -> Optional[ClosureRecord]:
        raise NotImplementedError

    def list_recent(self, *, limit: int = 10) -> Sequence[ClosureRecord]:
        raise NotImplementedError


class CheckpointRepository(Protocol):
    def completed_phases(self, *, year: str) -> set[ClosurePhase]:
        raise NotImplementedError

    def mark_completed(
        self,
        *,
        year: str,
        phase: ClosurePhase,
        idempotency_key: str,
        completed_at: datetime,
    ) -> None:
        raise NotImplementedError


class ClosureLockRepository(Protocol):
    def acquire(self, *, year: str, holder: str, now: datetime, ttl_minutes: int) -> bool:
        """Take the "closure in progress" marker.

        Succeeds only when no lock exists or the existing one expired. Each
        run passes its own `holder` token, so the lock is not re-entrant.
        """

        raise NotImplementedError

    def release(self, *, year: str, holder: str) -> None:
        raise NotImplementedError

    def get(self, year: str) -> Optional[ClosureLock]:
        raise NotImplementedError
