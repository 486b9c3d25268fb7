from __future__ import annotations

from typing import Optional

from .enums import ClosurePhase


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConfirmationMismatchError(ValidationError):
    """Raised when the typed confirmation phrase does not match exactly."""

    def __init__(self, expected: str):
        super().__init__(f"Confirmación incorrecta. Escriba exactamente: {expected}")
        self.expected = expected


class YearAlreadyClosedError(DomainError):
    """Raised when the ledger already holds a record for the target year."""

    def __init__(self, year: str, message: Optional[str] = None):
        super().__init__(message or f"El año {year} ya fue cerrado")
        self.year = year


class ClosureInProgressError(DomainError):
    """Raised when another operator holds the closure lock for the year."""

    def __init__(self, year: str, holder: Optional[str] = None):
        who = f" por {holder}" if holder else ""
        super().__init__(f"Ya hay un cierre del año {year} en curso{who}")
        self.year = year
        self.holder = holder


class ClosurePhaseError(DomainError):
    """Raised when a write group of the closure fails.

    Earlier phases are not rolled back; `corrective_action` tells the operator
    what to do next.
    """

    def __init__(self, phase: ClosurePhase, message: str, *, corrective_action: str):
        super().__init__(f"Falló la fase {phase.value}: {message}")
        self.phase = phase
        self.corrective_action = corrective_action
