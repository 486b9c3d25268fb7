from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles stored on the users table."""

    ADMIN = "admin"
    TEACHER = "teacher"
    STUDENT = "student"
    PARENT = "parent"


class Grade(str, Enum):
    """Grade ladder. GRADUADO is terminal."""

    PRIMERO = "PRIMERO"
    SEGUNDO = "SEGUNDO"
    TERCERO = "TERCERO"
    CUARTO = "CUARTO"
    QUINTO = "QUINTO"
    GRADUADO = "GRADUADO"


class WorkshopStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class AttendanceMark(str, Enum):
    """Per-student mark inside an attendance session."""

    PRESENT = "present"
    LATE = "late"
    JUSTIFIED = "justified"
    ABSENT = "absent"
    NONE = "none"


class ClosurePhase(str, Enum):
    """Ordered phases of the year closure workflow."""

    PREFLIGHT = "PREFLIGHT"
    ARCHIVE = "ARCHIVE"
    LEDGER = "LEDGER"
    PROMOTION = "PROMOTION"
    CLEANUP = "CLEANUP"
    FINALIZE = "FINALIZE"


class PhaseStatus(str, Enum):
    STARTED = "STARTED"
    COMPLETED = "COMPLETED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"


class ClosureStatus(str, Enum):
    """State of a ledger record."""

    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"


class RestoreStatus(str, Enum):
    UNSUPPORTED = "UNSUPPORTED"
