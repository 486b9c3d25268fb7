"""Grade ladder promotion.

The ladder is closed: PRIMERO -> SEGUNDO -> TERCERO -> CUARTO -> QUINTO ->
GRADUADO. GRADUADO is terminal and any token outside the ladder resolves to
an explicit UNCHANGED result.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from ..core.enums import Grade
from ..users.model import GradeChange, User


class PromotionKind(str, Enum):
    PROMOTED = "PROMOTED"
    GRADUATED = "GRADUATED"
    UNCHANGED = "UNCHANGED"


_SUCCESSOR = {
    Grade.PRIMERO: Grade.SEGUNDO,
    Grade.SEGUNDO: Grade.TERCERO,
    Grade.TERCERO: Grade.CUARTO,
    Grade.CUARTO: Grade.QUINTO,
    Grade.QUINTO: Grade.GRADUADO,
}


@dataclass(frozen=True)
class PromotionResult:
    kind: PromotionKind
    grade: Optional[Grade] = None

    @property
    def changes(self) -> bool:
        return self.kind != PromotionKind.UNCHANGED


UNCHANGED = PromotionResult(PromotionKind.UNCHANGED)


def parse_grade(token: Optional[str]) -> Optional[Grade]:
    """Case-insensitive lookup of a ladder token; None when unknown."""
    if not token:
        return None
    try:
        return Grade(token.strip().upper())
    except ValueError:
        return None


def next_grade(grade: Grade) -> Optional[Grade]:
    """Successor on the ladder; None for the terminal GRADUADO."""
    return _SUCCESSOR.get(grade)


def resolve_promotion(token: Optional[str]) -> PromotionResult:
    grade = parse_grade(token)
    if grade is None:
        return UNCHANGED

    successor = next_grade(grade)
    if successor is None:
        return UNCHANGED
    if successor == Grade.GRADUADO:
        return PromotionResult(PromotionKind.GRADUATED, successor)
    return PromotionResult(PromotionKind.PROMOTED, successor)


def plan_promotions(students: Sequence[User], *, year: str) -> list[GradeChange]:
    """Grade changes for every student whose token is on the ladder."""
    changes: list[GradeChange] = []
    for s in students:
        if not s.is_student:
            continue
        result = resolve_promotion(s.grade)
        if not result.changes:
            continue
        changes.append(
            GradeChange(
                user_id=s.user_id,
                from_grade=s.grade or "",
                to_grade=result.grade.value,
                graduated_year=str(year) if result.kind == PromotionKind.GRADUATED else None,
            )
        )
    return changes
