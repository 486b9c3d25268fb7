from __future__ import annotations

from typing import Optional, Sequence

from ..attendance.model import AttendanceSession
from ..core.enums import Role
from ..users.model import User
from ..workshops.model import Workshop
from .model import ClosureStatistics
from .promotion import PromotionKind, resolve_promotion


def aggregate_statistics(
    users: Optional[Sequence[User]],
    workshops: Optional[Sequence[Workshop]],
    sessions: Optional[Sequence[AttendanceSession]],
) -> ClosureStatistics:
    """Pure count of what a closure would touch. Missing input counts as zero."""
    users = users or []
    workshops = workshops or []
    sessions = sessions or []

    to_promote = to_graduate = unchanged = 0
    students = teachers = admins = 0
    for u in users:
        if u.role == Role.STUDENT:
            students += 1
            kind = resolve_promotion(u.grade).kind
            if kind == PromotionKind.PROMOTED:
                to_promote += 1
            elif kind == PromotionKind.GRADUATED:
                to_graduate += 1
            else:
                unchanged += 1
        elif u.role == Role.TEACHER:
            teachers += 1
        elif u.role == Role.ADMIN:
            admins += 1

    return ClosureStatistics(
        total_users=len(users),
        total_students=students,
        students_to_promote=to_promote,
        students_to_graduate=to_graduate,
        students_unchanged=unchanged,
        total_staff=teachers + admins,
        total_teachers=teachers,
        total_admins=admins,
        total_workshops=len(workshops),
        active_workshops=sum(1 for w in workshops if w.is_active),
        total_attendance_sessions=len(sessions),
        total_attendance_records=sum(len(s.records) for s in sessions),
    )
