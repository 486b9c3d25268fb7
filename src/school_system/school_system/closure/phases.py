"""Write phases of the year closure.

Each executor performs one grouped write and is safe to replay: the archive
ignores existing keys, promotions compare-and-set on the archived grade and
cleanup only removes sessions that already have an archive copy.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from ..attendance.model import AttendanceSession
from ..attendance.repository import AttendanceRepository
from ..core.constants import ARCHIVE_ATTENDANCE, ARCHIVE_STUDENTS, ARCHIVE_WORKSHOPS
from ..logging_config import get_logger
from ..users.model import User
from ..users.repository import UserRepository
from ..workshops.model import Workshop
from ..workshops.repository import WorkshopRepository
from .model import ArchiveCounts
from .promotion import plan_promotions
from .repository import ArchiveRepository

logger = get_logger("closure.phases")


class ArchiveWriter:
    def __init__(self, archive: ArchiveRepository):
        self._archive = archive

    def run(
        self,
        *,
        year: str,
        students: Sequence[User],
        workshops: Sequence[Workshop],
        sessions: Sequence[AttendanceSession],
        now: datetime,
    ) -> ArchiveCounts:
        counts = self._archive.write_snapshot(
            year=year,
            students=students,
            workshops=workshops,
            sessions=sessions,
            archived_at=now,
        )
        logger.info(
            "archived year=%s students=%d workshops=%d sessions=%d",
            year, counts.students, counts.workshops, counts.attendance,
        )
        return counts

    def stored_counts(self, *, year: str) -> ArchiveCounts:
        """Counts of what a previous run already archived for `year`."""
        return ArchiveCounts(
            students=len(self._archive.archived_ids(year=year, kind=ARCHIVE_STUDENTS)),
            workshops=len(self._archive.archived_ids(year=year, kind=ARCHIVE_WORKSHOPS)),
            attendance=len(self._archive.archived_ids(year=year, kind=ARCHIVE_ATTENDANCE)),
        )


class MutationExecutor:
    """Promote students using the archived roster as the source of truth."""

    def __init__(self, archive: ArchiveRepository, users: UserRepository):
        self._archive = archive
        self._users = users

    def run(self, *, year: str) -> int:
        snapshot = self._archive.load_students(year=year)
        changes = plan_promotions(snapshot, year=year)
        updated = self._users.apply_promotions(changes=changes)
        logger.info("promoted year=%s planned=%d updated=%d", year, len(changes), updated)
        return updated


@dataclass(frozen=True)
class CleanupCounts:
    sessions_deleted: int
    workshops_reset: int


class CleanupExecutor:
    def __init__(self, attendance: AttendanceRepository, workshops: WorkshopRepository):
        self._attendance = attendance
        self._workshops = workshops

    def run(self, *, year: str) -> CleanupCounts:
        deleted = self._attendance.delete_archived(year=year)
        reset = self._workshops.reset_for_year(year=year)
        logger.info("cleanup year=%s sessions_deleted=%d workshops_reset=%d", year, deleted, reset)
        return CleanupCounts(sessions_deleted=deleted, workshops_reset=reset)
