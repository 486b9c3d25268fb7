from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from types import SimpleNamespace
from typing import Optional

import pytest

from src.school_system.school_system.attendance.model import AttendanceRecord, AttendanceSession
from src.school_system.school_system.closure.model import ArchiveCounts, ClosureLock, ClosureRecord
from src.school_system.school_system.closure.restore import RestoreService
from src.school_system.school_system.closure.service import YearClosureService
from src.school_system.school_system.core.constants import ARCHIVE_ATTENDANCE, ARCHIVE_STUDENTS, ARCHIVE_WORKSHOPS
from src.school_system.school_system.core.enums import AttendanceMark, ClosurePhase, ClosureStatus, Role, WorkshopStatus
from src.school_system.school_system.users.model import User
from src.school_system.school_system.workshops.model import Workshop


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, minutes: int) -> None:
        self.now = self.now + timedelta(minutes=minutes)


class InMemoryUsers:
    def __init__(self, users):
        self.by_id: dict[str, User] = {u.user_id: u for u in users}
        self.promotion_calls = 0

    def list_all(self):
        return list(self.by_id.values())

    def apply_promotions(self, *, changes):
        self.promotion_calls += 1
        updated = 0
        for ch in changes:
            u = self.by_id.get(ch.user_id)
            if not u or u.role != Role.STUDENT or u.grade != ch.from_grade:
                continue
            self.by_id[ch.user_id] = replace(
                u,
                grade=ch.to_grade,
                section="",
                graduated_year=ch.graduated_year or u.graduated_year,
            )
            updated += 1
        return updated


class InMemoryWorkshops:
    def __init__(self, workshops):
        self.by_id: dict[str, Workshop] = {w.workshop_id: w for w in workshops}

    def list_all(self):
        return list(self.by_id.values())

    def reset_for_year(self, *, year):
        for wid, w in list(self.by_id.items()):
            self.by_id[wid] = replace(w, status=WorkshopStatus.INACTIVE, participants=(), archived_year=year)
        return len(self.by_id)


class InMemoryArchive:
    def __init__(self):
        self.items: dict[tuple[str, str], dict[str, object]] = {}
        self.write_calls = 0

    def _bucket(self, year, kind):
        return self.items.setdefault((str(year), kind), {})

    def write_snapshot(self, *, year, students, workshops, sessions, archived_at):
        self.write_calls += 1
        for s in students:
            self._bucket(year, ARCHIVE_STUDENTS).setdefault(s.user_id, s)
        for w in workshops:
            self._bucket(year, ARCHIVE_WORKSHOPS).setdefault(w.workshop_id, w)
        for a in sessions:
            self._bucket(year, ARCHIVE_ATTENDANCE).setdefault(a.session_id, a)
        return ArchiveCounts(students=len(students), workshops=len(workshops), attendance=len(sessions))

    def load_students(self, *, year):
        return list(self._bucket(year, ARCHIVE_STUDENTS).values())

    def archived_ids(self, *, year, kind):
        return set(self._bucket(year, kind).keys())


class InMemoryAttendance:
    def __init__(self, sessions, archive: InMemoryArchive):
        self.by_id: dict[str, AttendanceSession] = {s.session_id: s for s in sessions}
        self._archive = archive

    def list_sessions(self):
        return list(self.by_id.values())

    def count_sessions(self):
        return len(self.by_id)

    def delete_archived(self, *, year):
        archived = self._archive.archived_ids(year=year, kind=ARCHIVE_ATTENDANCE)
        deleted = 0
        for sid in list(self.by_id):
            if sid in archived:
                del self.by_id[sid]
                deleted += 1
        return deleted


class InMemoryLedger:
    def __init__(self):
        self.records: dict[str, ClosureRecord] = {}

    def get(self, year):
        return self.records.get(str(year))

    def create(self, record):
        if record.year in self.records:
            return False
        self.records[record.year] = record
        return True

    def mark_completed(self, *, year, completed_at):
        rec = self.records.get(str(year))
        if not rec:
            return False
        self.records[rec.year] = replace(rec, status=ClosureStatus.COMPLETED, completed_at=completed_at)
        return True

    def latest(self):
        rows = self.list_recent(limit=1)
        return rows[0] if rows else None

    def list_recent(self, *, limit=10):
        return sorted(self.records.values(), key=lambda r: r.closed_at, reverse=True)[:limit]


class InMemoryCheckpoints:
    def __init__(self):
        self.rows: dict[tuple[str, str], str] = {}

    def completed_phases(self, *, year):
        return {ClosurePhase(phase) for (y, phase) in self.rows if y == str(year)}

    def mark_completed(self, *, year, phase, idempotency_key, completed_at):
        self.rows.setdefault((str(year), phase.value), idempotency_key)


class InMemoryLocks:
    def __init__(self):
        self.locks: dict[str, ClosureLock] = {}
        self.released: list[tuple[str, str]] = []

    def acquire(self, *, year, holder, now, ttl_minutes):
        current = self.locks.get(year)
        if current and current.expires_at >= now:
            return False
        self.locks[year] = ClosureLock(
            year=year, holder=holder, acquired_at=now, expires_at=now + timedelta(minutes=ttl_minutes)
        )
        return True

    def release(self, *, year, holder):
        current = self.locks.get(year)
        if current and current.holder == holder:
            del self.locks[year]
            self.released.append((year, holder))

    def get(self, year):
        return self.locks.get(year)


def scenario_users():
    return [
        User(user_id="admin-1", full_name="Admin", role=Role.ADMIN),
        User(user_id="teacher-1", full_name="Prof. Garcia", role=Role.TEACHER),
        User(user_id="A", full_name="Ana Morales", role=Role.STUDENT, grade="PRIMERO", section="1A"),
        User(user_id="B", full_name="Luis Jiménez", role=Role.STUDENT, grade="QUINTO", section="5B"),
        User(user_id="C", full_name="Carla Solís", role=Role.STUDENT, grade="SEGUNDO", section="2A"),
    ]


def scenario_workshops():
    return [
        Workshop(
            workshop_id="W",
            title="Arte Creativo",
            status=WorkshopStatus.ACTIVE,
            participants=("A", "B"),
            teacher_id="teacher-1",
            max_participants=20,
        )
    ]


def scenario_sessions():
    marks = [
        AttendanceMark.PRESENT,
        AttendanceMark.LATE,
        AttendanceMark.ABSENT,
        AttendanceMark.JUSTIFIED,
        AttendanceMark.PRESENT,
    ]
    records = tuple(
        AttendanceRecord(student_id=f"S{i}", student_name=f"Student {i}", status=m) for i, m in enumerate(marks)
    )
    return [AttendanceSession(session_id="att-1", session_date=date(2024, 5, 20), workshop_id="W", records=records)]


def build_store(users=None, workshops=None, sessions=None, *, users_cls=InMemoryUsers):
    archive = InMemoryArchive()
    return SimpleNamespace(
        users=users_cls(scenario_users() if users is None else users),
        workshops=InMemoryWorkshops(scenario_workshops() if workshops is None else workshops),
        attendance=InMemoryAttendance(scenario_sessions() if sessions is None else sessions, archive),
        archive=archive,
        ledger=InMemoryLedger(),
        checkpoints=InMemoryCheckpoints(),
        locks=InMemoryLocks(),
    )


def build_service(store, clock, **kwargs) -> YearClosureService:
    return YearClosureService(
        store.users,
        store.workshops,
        store.attendance,
        store.archive,
        store.ledger,
        store.checkpoints,
        store.locks,
        clock=clock,
        **kwargs,
    )


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 12, 20, 10, 0, 0))


@pytest.fixture
def store():
    return build_store()


@pytest.fixture
def closure_service(store, clock):
    return build_service(store, clock, lock_ttl_minutes=30)


@pytest.fixture
def restore_service(store):
    return RestoreService(store.ledger)


@pytest.fixture
def make_store():
    return build_store


@pytest.fixture
def make_service(clock):
    def factory(store, **kwargs):
        return build_service(store, clock, **kwargs)

    return factory


@pytest.fixture
def in_memory_users_cls():
    return InMemoryUsers
