from __future__ import annotations

from datetime import datetime
from typing import Callable, Iterable, Optional, Sequence, TypeVar
from uuid import uuid4

import mysql.connector

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_school_year
from ..core.constants import ACTION_CONTACT_ADMIN, ACTION_RERUN, DEFAULT_HISTORY_LIMIT, DEFAULT_LOCK_TTL_MINUTES
from ..core.enums import ClosurePhase, PhaseStatus
from ..core.exceptions import ClosureInProgressError, ClosurePhaseError, DomainError, YearAlreadyClosedError
from ..logging_config import get_logger
from ..users.repository import UserRepository
from ..workshops.repository import WorkshopRepository
from .events import ClosureListener, ClosureProgress
from .guard import CLOSE_GUARD, ConfirmationGuard
from .model import ClosurePreview, ClosureRecord, ClosureResult
from .phases import ArchiveWriter, CleanupCounts, CleanupExecutor, MutationExecutor
from .repository import ArchiveRepository, CheckpointRepository, ClosureLedgerRepository, ClosureLockRepository
from .statistics import aggregate_statistics

logger = get_logger("closure.service")

T = TypeVar("T")

CHECKPOINTED = (
    ClosurePhase.ARCHIVE,
    ClosurePhase.LEDGER,
    ClosurePhase.PROMOTION,
    ClosurePhase.CLEANUP,
)


def idempotency_key(year: str, phase: ClosurePhase) -> str:
    return f"{year}:{phase.value}"


class YearClosureService:
    """Orchestrates the year closure: archive, ledger, promotion, cleanup.

    Phases run strictly in order. Each completed phase leaves a checkpoint so
    an interrupted run can be resumed instead of restarted; a lock row keeps
    two operators from closing the same year at once.
    """

    def __init__(
        self,
        users: UserRepository,
        workshops: WorkshopRepository,
        attendance: AttendanceRepository,
        archive: ArchiveRepository,
        ledger: ClosureLedgerRepository,
        checkpoints: CheckpointRepository,
        locks: ClosureLockRepository,
        *,
        lock_ttl_minutes: int = DEFAULT_LOCK_TTL_MINUTES,
        guard: ConfirmationGuard = CLOSE_GUARD,
        clock: Callable[[], datetime] = now_local,
    ):
        self._users = users
        self._workshops = workshops
        self._attendance = attendance
        self._ledger = ledger
        self._checkpoints = checkpoints
        self._locks = locks
        self._guard = guard
        self._clock = clock
        self._lock_ttl_minutes = int(lock_ttl_minutes)

        self._archive_writer = ArchiveWriter(archive)
        self._mutation = MutationExecutor(archive, users)
        self._cleanup = CleanupExecutor(attendance, workshops)

    # ---- read side ----
    def expected_phrase(self, year: str) -> str:
        return self._guard.expected_phrase(require_school_year(year))

    def preview(self, year: str) -> ClosurePreview:
        year = require_school_year(year)
        stats = aggregate_statistics(
            self._users.list_all(),
            self._workshops.list_all(),
            self._attendance.list_sessions(),
        )
        return ClosurePreview(
            year=year,
            statistics=stats,
            expected_phrase=self._guard.expected_phrase(year),
            ledger_record=self._ledger.get(year),
            last_closed=self.last_closed_year(),
        )

    def last_closed_year(self) -> Optional[ClosureRecord]:
        """Latest completed ledger record, reported only while no live sessions remain."""
        record = self._ledger.latest()
        if record is None or not record.is_completed:
            return None
        if self._attendance.count_sessions() > 0:
            return None
        return record

    def history(self, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[ClosureRecord]:
        return self._ledger.list_recent(limit=limit)

    # ---- write side ----
    def execute(
        self,
        *,
        year: str,
        confirmation: str,
        operator: str,
        description: str = "",
        resume: bool = False,
        listeners: Optional[Iterable[ClosureListener]] = None,
    ) -> ClosureResult:
        year = require_school_year(year)
        self._guard.verify(confirmation, year)
        operator = require_non_empty(operator, "Operador")

        progress = ClosureProgress(year, listeners)
        progress.emit(ClosurePhase.PREFLIGHT, PhaseStatus.STARTED)

        existing = self._ledger.get(year)
        if existing is not None and (existing.is_completed or not resume):
            if existing.is_completed:
                err = YearAlreadyClosedError(year)
            else:
                err = YearAlreadyClosedError(
                    year, f"El cierre del año {year} quedó incompleto; reanúdelo para continuar"
                )
            progress.emit(ClosurePhase.PREFLIGHT, PhaseStatus.FAILED, error=str(err))
            logger.warning("closure rejected year=%s status=%s", year, existing.status.value)
            raise err

        # One token per run: a second request from the same operator is still blocked.
        holder = f"{operator}:{uuid4().hex}"
        if not self._locks.acquire(year=year, holder=holder, now=self._clock(), ttl_minutes=self._lock_ttl_minutes):
            lock = self._locks.get(year)
            err = ClosureInProgressError(year, lock.operator if lock else None)
            progress.emit(ClosurePhase.PREFLIGHT, PhaseStatus.FAILED, error=str(err))
            logger.warning("closure lock busy year=%s holder=%s", year, lock.holder if lock else "?")
            raise err

        try:
            return self._run(year, operator, description, existing, progress)
        finally:
            try:
                self._locks.release(year=year, holder=holder)
            except mysql.connector.Error:
                # The lock expires on its own after the TTL.
                logger.exception("could not release closure lock year=%s", year)

    def _run(
        self,
        year: str,
        operator: str,
        description: str,
        existing: Optional[ClosureRecord],
        progress: ClosureProgress,
    ) -> ClosureResult:
        done = self._run_phase(
            progress, year, ClosurePhase.PREFLIGHT, lambda: self._checkpoints.completed_phases(year=year),
        )
        resumed = bool(done) or existing is not None
        if resumed:
            logger.info("resuming closure year=%s completed=%s", year, sorted(p.value for p in done))

        users = self._run_phase(progress, year, ClosurePhase.PREFLIGHT, self._users.list_all)
        workshops = self._run_phase(progress, year, ClosurePhase.PREFLIGHT, self._workshops.list_all)
        sessions = self._run_phase(progress, year, ClosurePhase.PREFLIGHT, self._attendance.list_sessions)
        stats = aggregate_statistics(users, workshops, sessions)
        progress.emit(ClosurePhase.PREFLIGHT, PhaseStatus.COMPLETED)

        archived = self._run_phase(
            progress,
            year,
            ClosurePhase.ARCHIVE,
            lambda: self._archive_writer.run(
                year=year,
                students=[u for u in users if u.is_student],
                workshops=workshops,
                sessions=sessions,
                now=self._clock(),
            ),
            done=done,
        ) or self._archive_writer.stored_counts(year=year)

        def write_ledger() -> ClosureRecord:
            if existing is not None:
                return existing
            record = ClosureRecord(
                year=year,
                closed_at=self._clock(),
                closed_by=operator,
                statistics=stats,
                description=description or f"Cierre del año escolar {year}",
            )
            if not self._ledger.create(record):
                raise YearAlreadyClosedError(year)
            return record

        self._run_phase(progress, year, ClosurePhase.LEDGER, write_ledger, done=done)

        promoted = self._run_phase(
            progress, year, ClosurePhase.PROMOTION, lambda: self._mutation.run(year=year), done=done,
        ) or 0

        cleanup = self._run_phase(
            progress, year, ClosurePhase.CLEANUP, lambda: self._cleanup.run(year=year), done=done,
        ) or CleanupCounts(sessions_deleted=0, workshops_reset=0)

        self._run_phase(
            progress,
            year,
            ClosurePhase.FINALIZE,
            lambda: self._ledger.mark_completed(year=year, completed_at=self._clock()),
            done=done,
        )

        record = self._ledger.get(year)
        logger.info(
            "closure completed year=%s by=%s promoted=%d sessions_deleted=%d workshops_reset=%d",
            year, operator, promoted, cleanup.sessions_deleted, cleanup.workshops_reset,
        )
        return ClosureResult(
            year=year,
            record=record,
            archived=archived,
            promoted=promoted,
            sessions_deleted=cleanup.sessions_deleted,
            workshops_reset=cleanup.workshops_reset,
            resumed=resumed,
            events=progress.events,
        )

    def _run_phase(
        self,
        progress: ClosureProgress,
        year: str,
        phase: ClosurePhase,
        action: Callable[[], T],
        *,
        done: Optional[set[ClosurePhase]] = None,
    ) -> Optional[T]:
        """Run one step of `phase`.

        With `done` given, the step is a whole write phase: it is skipped
        when already checkpointed and emits STARTED/COMPLETED events itself.
        """
        checkpointed = done is not None
        if checkpointed and phase in done:
            progress.emit(phase, PhaseStatus.SKIPPED)
            logger.info("phase skipped year=%s phase=%s (checkpoint)", year, phase.value)
            return None

        if checkpointed:
            progress.emit(phase, PhaseStatus.STARTED)
        try:
            result = action()
            if checkpointed and phase in CHECKPOINTED:
                self._checkpoints.mark_completed(
                    year=year,
                    phase=phase,
                    idempotency_key=idempotency_key(year, phase),
                    completed_at=self._clock(),
                )
        except DomainError as e:
            progress.emit(phase, PhaseStatus.FAILED, error=str(e))
            logger.warning("phase rejected year=%s phase=%s: %s", year, phase.value, e)
            raise
        except (mysql.connector.Error, OSError) as e:
            progress.emit(phase, PhaseStatus.FAILED, error=str(e))
            logger.exception("phase failed year=%s phase=%s", year, phase.value)
            raise ClosurePhaseError(phase, str(e), corrective_action=ACTION_RERUN) from e
        except Exception as e:
            progress.emit(phase, PhaseStatus.FAILED, error=str(e))
            logger.exception("phase crashed year=%s phase=%s", year, phase.value)
            raise ClosurePhaseError(phase, str(e), corrective_action=ACTION_CONTACT_ADMIN) from e

        if checkpointed:
            progress.emit(phase, PhaseStatus.COMPLETED)
            logger.info("phase completed year=%s phase=%s", year, phase.value)
        return result
