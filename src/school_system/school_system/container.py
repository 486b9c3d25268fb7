from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .closure.mysql_archive_repository import MySQLArchiveRepository
from .closure.mysql_checkpoint_repository import MySQLCheckpointRepository, MySQLClosureLockRepository
from .closure.mysql_ledger_repository import MySQLClosureLedgerRepository
from .closure.restore import RestoreService
from .closure.service import YearClosureService
from .core.constants import DEFAULT_LOCK_TTL_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .reports.year_export import YearExportService
from .users.mysql_user_repository import MySQLUserRepository
from .workshops.mysql_workshop_repository import MySQLWorkshopRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    workshops_repo: MySQLWorkshopRepository
    attendance_repo: MySQLAttendanceRepository
    archive_repo: MySQLArchiveRepository
    ledger_repo: MySQLClosureLedgerRepository
    checkpoints_repo: MySQLCheckpointRepository
    locks_repo: MySQLClosureLockRepository

    closure_service: YearClosureService
    restore_service: RestoreService
    year_export_service: YearExportService


def build_container(*, db_config: dict, lock_ttl_minutes: int = DEFAULT_LOCK_TTL_MINUTES) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    users_repo = MySQLUserRepository(conn)
    workshops_repo = MySQLWorkshopRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    archive_repo = MySQLArchiveRepository(conn)
    ledger_repo = MySQLClosureLedgerRepository(conn)
    checkpoints_repo = MySQLCheckpointRepository(conn)
    locks_repo = MySQLClosureLockRepository(conn)

    closure_service = YearClosureService(
        users_repo,
        workshops_repo,
        attendance_repo,
        archive_repo,
        ledger_repo,
        checkpoints_repo,
        locks_repo,
        lock_ttl_minutes=lock_ttl_minutes,
    )
    restore_service = RestoreService(ledger_repo)
    year_export_service = YearExportService(users_repo, workshops_repo, attendance_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        workshops_repo=workshops_repo,
        attendance_repo=attendance_repo,
        archive_repo=archive_repo,
        ledger_repo=ledger_repo,
        checkpoints_repo=checkpoints_repo,
        locks_repo=locks_repo,
        closure_service=closure_service,
        restore_service=restore_service,
        year_export_service=year_export_service,
    )
