from __future__ import annotations

from types import SimpleNamespace

import mysql.connector
import pytest
from flask import Flask

from src.school_system.school_system.closure.controller import register
from src.school_system.school_system.reports.year_export import YearExportService


@pytest.fixture
def app(store, closure_service, restore_service):
    app = Flask(__name__)
    app.secret_key = "test-secret"
    container = SimpleNamespace(
        closure_service=closure_service,
        restore_service=restore_service,
        year_export_service=YearExportService(store.users, store.workshops, store.attendance),
    )
    register(app, container)
    return app


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess["user_id"] = "admin-1"
        sess["name"] = "Admin"
        sess["role"] = "admin"
    return client


def test_non_admin_is_forbidden(app):
    client = app.test_client()
    with client.session_transaction() as sess:
        sess["user_id"] = "teacher-1"
        sess["role"] = "teacher"

    resp = client.post("/api/year-closure/execute", json={"year": "2024", "confirmation": "CERRAR AÑO 2024"})

    assert resp.status_code == 403


def test_anonymous_is_unauthorized(app):
    resp = app.test_client().get("/api/year-closure/preview?year=2024")

    assert resp.status_code == 401


def test_preview_returns_statistics_and_phrase(admin_client):
    resp = admin_client.get("/api/year-closure/preview?year=2024")
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["expected_phrase"] == "CERRAR AÑO 2024"
    assert body["restore_phrase"] == "RESTAURAR 2024"
    assert body["statistics"]["total_students"] == 3
    assert body["can_execute"] is True
    assert body["ledger_record"] is None


def test_execute_then_repeat_is_conflict(admin_client, store):
    resp = admin_client.post("/api/year-closure/execute", json={"year": "2024", "confirmation": "CERRAR AÑO 2024"})
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["success"] is True
    assert body["next_year"] == "2025"
    assert body["record"]["statistics"]["total_students"] == 3
    assert body["record"]["closed_by"] == "admin-1"
    assert body["events"][-1]["progress"] == 100

    again = admin_client.post("/api/year-closure/execute", json={"year": "2024", "confirmation": "CERRAR AÑO 2024"})
    assert again.status_code == 409


def test_execute_with_wrong_phrase_is_bad_request(admin_client, store):
    resp = admin_client.post("/api/year-closure/execute", json={"year": "2024", "confirmation": "CERRAR AÑO"})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False
    assert store.ledger.records == {}


def test_phase_failure_reports_phase_and_action(admin_client, store):
    def boom(**kwargs):
        raise mysql.connector.errors.OperationalError("gone away")

    store.archive.write_snapshot = boom

    resp = admin_client.post("/api/year-closure/execute", json={"year": "2024", "confirmation": "CERRAR AÑO 2024"})
    body = resp.get_json()

    assert resp.status_code == 500
    assert body["failed_phase"] == "ARCHIVE"
    assert body["corrective_action"]


def test_restore_is_not_implemented(admin_client):
    admin_client.post("/api/year-closure/execute", json={"year": "2024", "confirmation": "CERRAR AÑO 2024"})

    resp = admin_client.post("/api/year-closure/restore", json={"year": "2024", "confirmation": "RESTAURAR 2024"})
    body = resp.get_json()

    assert resp.status_code == 501
    assert body["success"] is False
    assert body["status"] == "UNSUPPORTED"
    assert body["year"] == "2024"


def test_history_lists_closed_years(admin_client):
    admin_client.post("/api/year-closure/execute", json={"year": "2024", "confirmation": "CERRAR AÑO 2024"})

    resp = admin_client.get("/api/year-closure/history")

    assert [r["year"] for r in resp.get_json()["records"]] == ["2024"]


def test_history_database_error_is_json(admin_client, store):
    def boom(**kwargs):
        raise mysql.connector.errors.OperationalError("gone away")

    store.ledger.list_recent = boom

    resp = admin_client.get("/api/year-closure/history")

    assert resp.status_code == 500
    assert resp.get_json()["success"] is False


def test_export_downloads_workbook(admin_client):
    resp = admin_client.get("/admin/year-closure/export?year=2024")

    assert resp.status_code == 200
    assert resp.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert "Cierre_2024.xlsx" in resp.headers["Content-Disposition"]
