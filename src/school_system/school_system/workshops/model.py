from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.enums import WorkshopStatus


@dataclass(frozen=True)
class Workshop:
    workshop_id: str
    title: str
    status: WorkshopStatus
    participants: Tuple[str, ...] = ()
    teacher_id: Optional[str] = None
    max_participants: int = 0
    archived_year: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == WorkshopStatus.ACTIVE
