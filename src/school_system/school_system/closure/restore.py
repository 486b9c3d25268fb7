from __future__ import annotations

from ..common.validators import require_school_year
from ..core.enums import RestoreStatus
from ..core.exceptions import ValidationError
from ..logging_config import get_logger
from .guard import RESTORE_GUARD, ConfirmationGuard
from .model import RestoreOutcome
from .repository import ClosureLedgerRepository

logger = get_logger("closure.restore")

UNSUPPORTED_MESSAGE = (
    "La restauración de un año cerrado no está disponible. "
    "Los datos del año {year} siguen en el archivo; contacte al administrador del sistema."
)


class RestoreService:
    """Second confirmation gate in front of a restore that is not implemented.

    It never touches data: which phases a restore should reverse is still an
    open decision, so every confirmed request ends as UNSUPPORTED.
    """

    def __init__(self, ledger: ClosureLedgerRepository, *, guard: ConfirmationGuard = RESTORE_GUARD):
        self._ledger = ledger
        self._guard = guard

    def expected_phrase(self, year: str) -> str:
        return self._guard.expected_phrase(require_school_year(year))

    def restore(self, *, year: str, confirmation: str, operator: str) -> RestoreOutcome:
        year = require_school_year(year)
        self._guard.verify(confirmation, year)

        if self._ledger.get(year) is None:
            raise ValidationError(f"No existe un cierre registrado para el año {year}")

        logger.warning("restore requested year=%s by=%s: unsupported", year, operator)
        return RestoreOutcome(
            year=year,
            status=RestoreStatus.UNSUPPORTED,
            message=UNSUPPORTED_MESSAGE.format(year=year),
        )
