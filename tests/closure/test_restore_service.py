from __future__ import annotations

import pytest

from src.school_system.school_system.core.enums import RestoreStatus, WorkshopStatus
from src.school_system.school_system.core.exceptions import ConfirmationMismatchError, ValidationError


def test_restore_requires_exact_phrase(closure_service, restore_service):
    closure_service.execute(year="2024", confirmation="CERRAR AÑO 2024", operator="Admin")

    with pytest.raises(ConfirmationMismatchError):
        restore_service.restore(year="2024", confirmation="restaurar 2024", operator="Admin")


def test_restore_without_ledger_record_is_rejected(restore_service):
    with pytest.raises(ValidationError):
        restore_service.restore(year="2024", confirmation="RESTAURAR 2024", operator="Admin")


def test_confirmed_restore_is_unsupported_and_changes_nothing(closure_service, restore_service, store):
    closure_service.execute(year="2024", confirmation="CERRAR AÑO 2024", operator="Admin")

    outcome = restore_service.restore(year="2024", confirmation="RESTAURAR 2024", operator="Admin")

    assert outcome.status == RestoreStatus.UNSUPPORTED
    assert outcome.year == "2024"
    assert "2024" in outcome.message
    assert store.users.by_id["A"].grade == "SEGUNDO"
    assert store.workshops.by_id["W"].status == WorkshopStatus.INACTIVE
    assert store.attendance.count_sessions() == 0
    assert store.ledger.get("2024").is_completed
