from __future__ import annotations

from dataclasses import dataclass

from ..core.constants import CLOSE_PHRASE_TEMPLATE, RESTORE_PHRASE_TEMPLATE
from ..core.exceptions import ConfirmationMismatchError


@dataclass(frozen=True)
class ConfirmationGuard:
    """Exact-phrase gate in front of a destructive action.

    No trimming and no case folding: the typed text must equal the phrase
    byte for byte.
    """

    template: str = CLOSE_PHRASE_TEMPLATE

    def expected_phrase(self, year: str) -> str:
        return self.template.format(year=year)

    def matches(self, typed: str, year: str) -> bool:
        return isinstance(typed, str) and typed == self.expected_phrase(year)

    def verify(self, typed: str, year: str) -> None:
        if not self.matches(typed, year):
            raise ConfirmationMismatchError(self.expected_phrase(year))


CLOSE_GUARD = ConfirmationGuard(CLOSE_PHRASE_TEMPLATE)
RESTORE_GUARD = ConfirmationGuard(RESTORE_PHRASE_TEMPLATE)
