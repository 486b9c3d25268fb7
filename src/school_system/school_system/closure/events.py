from __future__ import annotations

from typing import Callable, Iterable, Optional

from ..common.datetime_utils import now_local
from ..core.enums import ClosurePhase, PhaseStatus
from .model import ClosureEvent

ClosureListener = Callable[[ClosureEvent], None]

# Phases that write; PREFLIGHT only reads and does not move the progress bar.
WRITE_PHASES = (
    ClosurePhase.ARCHIVE,
    ClosurePhase.LEDGER,
    ClosurePhase.PROMOTION,
    ClosurePhase.CLEANUP,
    ClosurePhase.FINALIZE,
)


class ClosureProgress:
    """Typed event stream for one closure run.

    Replaces a free-text step label: every phase transition is a
    `ClosureEvent` delivered to listeners and kept for the final result.
    """

    def __init__(self, year: str, listeners: Optional[Iterable[ClosureListener]] = None):
        self._year = year
        self._listeners = list(listeners or [])
        self._events: list[ClosureEvent] = []
        self._done: set[ClosurePhase] = set()

    @property
    def events(self) -> tuple[ClosureEvent, ...]:
        return tuple(self._events)

    @property
    def percent(self) -> int:
        return len(self._done) * 100 // len(WRITE_PHASES)

    def emit(self, phase: ClosurePhase, status: PhaseStatus, *, error: Optional[str] = None) -> ClosureEvent:
        if status in (PhaseStatus.COMPLETED, PhaseStatus.SKIPPED) and phase in WRITE_PHASES:
            self._done.add(phase)
        event = ClosureEvent(
            year=self._year,
            phase=phase,
            status=status,
            progress=self.percent,
            at=now_local(),
            error=error,
        )
        self._events.append(event)
        for listener in self._listeners:
            listener(event)
        return event
