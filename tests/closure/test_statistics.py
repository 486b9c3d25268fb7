from __future__ import annotations

from datetime import date

from src.school_system.school_system.attendance.model import AttendanceRecord, AttendanceSession
from src.school_system.school_system.closure.model import ClosureStatistics
from src.school_system.school_system.closure.statistics import aggregate_statistics
from src.school_system.school_system.core.enums import AttendanceMark, Role, WorkshopStatus
from src.school_system.school_system.users.model import User
from src.school_system.school_system.workshops.model import Workshop


def test_missing_input_counts_as_zero():
    stats = aggregate_statistics(None, None, None)

    assert stats.total_users == 0
    assert stats.total_students == 0
    assert stats.total_attendance_records == 0
    assert stats.active_workshops == 0


def test_counts_split_promotion_graduation_and_staff():
    users = [
        User(user_id="a", full_name="Admin", role=Role.ADMIN),
        User(user_id="t", full_name="Teacher", role=Role.TEACHER),
        User(user_id="p", full_name="Parent", role=Role.PARENT),
        User(user_id="s1", full_name="S1", role=Role.STUDENT, grade="PRIMERO"),
        User(user_id="s2", full_name="S2", role=Role.STUDENT, grade="quinto"),
        User(user_id="s3", full_name="S3", role=Role.STUDENT, grade=None),
    ]
    workshops = [
        Workshop(workshop_id="w1", title="Arte", status=WorkshopStatus.ACTIVE, participants=("s1",)),
        Workshop(workshop_id="w2", title="Música", status=WorkshopStatus.INACTIVE),
    ]
    rec = AttendanceRecord(student_id="s1", student_name="S1", status=AttendanceMark.PRESENT)
    sessions = [
        AttendanceSession(session_id="x", session_date=date(2024, 3, 1), records=(rec, rec)),
        AttendanceSession(session_id="y", session_date=date(2024, 3, 2), records=(rec,)),
    ]

    stats = aggregate_statistics(users, workshops, sessions)

    assert stats.total_users == 6
    assert stats.total_students == 3
    assert stats.students_to_promote == 1
    assert stats.students_to_graduate == 1
    assert stats.students_unchanged == 1
    assert stats.total_staff == 2
    assert stats.total_teachers == 1
    assert stats.total_admins == 1
    assert stats.total_workshops == 2
    assert stats.active_workshops == 1
    assert stats.total_attendance_sessions == 2
    assert stats.total_attendance_records == 3


def test_statistics_round_trip_through_ledger_dict():
    stats = aggregate_statistics([User(user_id="s", full_name="S", role=Role.STUDENT, grade="CUARTO")], [], [])

    data = stats.to_dict()
    data["unknown_key"] = 7

    assert ClosureStatistics.from_dict(data) == stats
