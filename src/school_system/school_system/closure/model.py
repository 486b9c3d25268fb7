from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional, Tuple

from ..core.enums import ClosurePhase, ClosureStatus, PhaseStatus, RestoreStatus


@dataclass(frozen=True)
class ClosureStatistics:
    """Counts shown in the closure preview and stored in the ledger."""

    total_users: int = 0
    total_students: int = 0
    students_to_promote: int = 0
    students_to_graduate: int = 0
    students_unchanged: int = 0
    total_staff: int = 0
    total_teachers: int = 0
    total_admins: int = 0
    total_workshops: int = 0
    active_workshops: int = 0
    total_attendance_sessions: int = 0
    total_attendance_records: int = 0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ClosureStatistics":
        data = data or {}
        known = {k: int(v or 0) for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)


@dataclass(frozen=True)
class ClosureRecord:
    year: str
    closed_at: datetime
    closed_by: str
    statistics: ClosureStatistics
    description: str = ""
    status: ClosureStatus = ClosureStatus.IN_PROGRESS
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == ClosureStatus.COMPLETED


@dataclass(frozen=True)
class ArchiveCounts:
    students: int = 0
    workshops: int = 0
    attendance: int = 0


@dataclass(frozen=True)
class ClosureLock:
    year: str
    holder: str
    acquired_at: datetime
    expires_at: datetime

    @property
    def operator(self) -> str:
        """Operator part of the `operator:run-token` holder."""
        return self.holder.rsplit(":", 1)[0]


@dataclass(frozen=True)
class ClosureEvent:
    year: str
    phase: ClosurePhase
    status: PhaseStatus
    progress: int
    at: datetime
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "phase": self.phase.value,
            "status": self.status.value,
            "progress": self.progress,
            "at": self.at.isoformat(),
            "error": self.error,
        }


@dataclass(frozen=True)
class ClosurePreview:
    year: str
    statistics: ClosureStatistics
    expected_phrase: str
    ledger_record: Optional[ClosureRecord] = None
    last_closed: Optional[ClosureRecord] = None

    @property
    def can_execute(self) -> bool:
        return self.ledger_record is None or not self.ledger_record.is_completed


@dataclass(frozen=True)
class ClosureResult:
    year: str
    record: ClosureRecord
    archived: ArchiveCounts
    promoted: int
    sessions_deleted: int
    workshops_reset: int
    resumed: bool = False
    events: Tuple[ClosureEvent, ...] = field(default_factory=tuple)

    @property
    def next_year(self) -> str:
        return str(int(self.year) + 1)


@dataclass(frozen=True)
class RestoreOutcome:
    year: str
    status: RestoreStatus
    message: str
