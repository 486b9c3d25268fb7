from __future__ import annotations

import pytest

from src.school_system.school_system.closure.guard import CLOSE_GUARD, RESTORE_GUARD
from src.school_system.school_system.core.exceptions import ConfirmationMismatchError


def test_expected_phrases():
    assert CLOSE_GUARD.expected_phrase("2024") == "CERRAR AÑO 2024"
    assert RESTORE_GUARD.expected_phrase("2024") == "RESTAURAR 2024"


def test_exact_phrase_passes():
    CLOSE_GUARD.verify("CERRAR AÑO 2024", "2024")


@pytest.mark.parametrize(
    "typed",
    [
        "cerrar año 2024",
        "CERRAR ANO 2024",
        "CERRAR AÑO 2024 ",
        " CERRAR AÑO 2024",
        "CERRAR  AÑO 2024",
        "CERRAR AÑO 2025",
        "",
        None,
    ],
)
def test_anything_else_is_rejected(typed):
    assert not CLOSE_GUARD.matches(typed, "2024")
    with pytest.raises(ConfirmationMismatchError) as exc:
        CLOSE_GUARD.verify(typed, "2024")
    assert exc.value.expected == "CERRAR AÑO 2024"
