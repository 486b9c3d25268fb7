from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, send_file, session

from ..common.datetime_utils import current_school_year
from ..core.enums import Role
from ..core.exceptions import (
    ClosureInProgressError,
    ClosurePhaseError,
    ValidationError,
    YearAlreadyClosedError,
)
from ..container import Container
from ..logging_config import get_logger
from .model import ClosureRecord

logger = get_logger("closure.controller")


def record_to_dict(record: Optional[ClosureRecord]) -> Optional[dict]:
    if record is None:
        return None
    return {
        "year": record.year,
        "closed_at": record.closed_at.strftime("%d/%m/%Y %H:%M"),
        "closed_by": record.closed_by,
        "description": record.description,
        "status": record.status.value,
        "completed_at": record.completed_at.strftime("%d/%m/%Y %H:%M") if record.completed_at else None,
        "statistics": record.statistics.to_dict(),
    }


def register(app: Flask, container: Container) -> None:
    def admin_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Inicie sesión para continuar"}), 401
            if session.get("role") != Role.ADMIN.value:
                return jsonify({"success": False, "message": "Acceso denegado"}), 403
            return view(*args, **kwargs)

        return wrapper

    def _operator() -> str:
        return str(session["user_id"])

    def _error(message: str, http_status: int, **extra):
        body = {"success": False, "message": message}
        body.update(extra)
        return jsonify(body), http_status

    def _system_error(action: str, e: Exception):
        logger.exception("%s failed", action)
        if bool(app.config.get("DEBUG", False)):
            return _error(f"Error del sistema en {action}: {e}", 500)
        return _error(f"Error del sistema en {action}", 500)

    @app.route("/api/year-closure/preview", methods=["GET"], endpoint="year_closure_preview")
    @admin_required
    def year_closure_preview():
        year = request.args.get("year") or current_school_year()
        try:
            preview = container.closure_service.preview(year)
        except ValidationError as e:
            return _error(str(e), 400)
        except Exception as e:
            return _system_error("la vista previa", e)

        return jsonify(
            {
                "success": True,
                "year": preview.year,
                "expected_phrase": preview.expected_phrase,
                "restore_phrase": container.restore_service.expected_phrase(preview.year),
                "statistics": preview.statistics.to_dict(),
                "can_execute": preview.can_execute,
                "ledger_record": record_to_dict(preview.ledger_record),
                "last_closed": record_to_dict(preview.last_closed),
            }
        )

    @app.route("/api/year-closure/execute", methods=["POST"], endpoint="year_closure_execute")
    @admin_required
    def year_closure_execute():
        data = request.get_json(silent=True) or {}
        try:
            result = container.closure_service.execute(
                year=str(data.get("year", "")),
                confirmation=data.get("confirmation", ""),
                operator=_operator(),
                description=str(data.get("description") or ""),
                resume=bool(data.get("resume", False)),
            )
        except ValidationError as e:
            return _error(str(e), 400)
        except (YearAlreadyClosedError, ClosureInProgressError) as e:
            return _error(str(e), 409)
        except ClosurePhaseError as e:
            return _error(
                str(e),
                500,
                failed_phase=e.phase.value,
                corrective_action=e.corrective_action,
            )
        except Exception as e:
            return _system_error("el cierre de año", e)

        return jsonify(
            {
                "success": True,
                "message": f"Cierre del año {result.year} completado",
                "year": result.year,
                "next_year": result.next_year,
                "resumed": result.resumed,
                "promoted": result.promoted,
                "sessions_deleted": result.sessions_deleted,
                "workshops_reset": result.workshops_reset,
                "record": record_to_dict(result.record),
                "events": [ev.to_dict() for ev in result.events],
            }
        )

    @app.route("/api/year-closure/restore", methods=["POST"], endpoint="year_closure_restore")
    @admin_required
    def year_closure_restore():
        data = request.get_json(silent=True) or {}
        try:
            outcome = container.restore_service.restore(
                year=str(data.get("year", "")),
                confirmation=data.get("confirmation", ""),
                operator=_operator(),
            )
        except ValidationError as e:
            return _error(str(e), 400)
        except Exception as e:
            return _system_error("la restauración", e)

        return _error(outcome.message, 501, status=outcome.status.value, year=outcome.year)

    @app.route("/api/year-closure/history", methods=["GET"], endpoint="year_closure_history")
    @admin_required
    def year_closure_history():
        limit = request.args.get("limit", type=int) or 10
        try:
            records = container.closure_service.history(limit=limit)
        except Exception as e:
            return _system_error("el historial", e)

        return jsonify({"success": True, "records": [record_to_dict(r) for r in records]})

    @app.route("/admin/year-closure/export", methods=["GET"], endpoint="year_closure_export")
    @admin_required
    def year_closure_export():
        year = request.args.get("year") or current_school_year()
        try:
            out = container.year_export_service.to_excel(year)
        except ValidationError as e:
            return _error(str(e), 400)
        except Exception as e:
            return _system_error("la exportación", e)

        return send_file(
            out,
            mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            as_attachment=True,
            download_name=container.year_export_service.filename(year),
        )
