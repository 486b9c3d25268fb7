from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional, Tuple

from ..core.enums import AttendanceMark


@dataclass(frozen=True)
class AttendanceRecord:
    student_id: str
    student_name: str
    status: AttendanceMark


@dataclass(frozen=True)
class AttendanceSession:
    """One attendance sheet: a date plus a grade/section or a workshop."""

    session_id: str
    session_date: date
    grade: Optional[str] = None
    section: Optional[str] = None
    workshop_id: Optional[str] = None
    records: Tuple[AttendanceRecord, ...] = ()
