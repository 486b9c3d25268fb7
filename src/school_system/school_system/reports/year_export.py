from __future__ import annotations

import io
from dataclasses import dataclass

import pandas as pd

from ..attendance.repository import AttendanceRepository
from ..closure.statistics import aggregate_statistics
from ..common.validators import require_school_year
from ..users.repository import UserRepository
from ..workshops.repository import WorkshopRepository

SUMMARY_LABELS = {
    "total_users": "Usuarios",
    "total_students": "Estudiantes",
    "students_to_promote": "Estudiantes a promover",
    "students_to_graduate": "Estudiantes a egresar",
    "students_unchanged": "Estudiantes sin cambio",
    "total_staff": "Personal",
    "total_teachers": "Docentes",
    "total_admins": "Administradores",
    "total_workshops": "Talleres",
    "active_workshops": "Talleres activos",
    "total_attendance_sessions": "Sesiones de asistencia",
    "total_attendance_records": "Registros de asistencia",
}


@dataclass(frozen=True)
class YearExportData:
    summary: pd.DataFrame
    students: pd.DataFrame
    workshops: pd.DataFrame
    attendance: pd.DataFrame


class YearExportService:
    """Spreadsheet of the live year, downloaded before running the closure."""

    def __init__(self, users: UserRepository, workshops: WorkshopRepository, attendance: AttendanceRepository):
        self._users = users
        self._workshops = workshops
        self._attendance = attendance

    def build(self, year: str) -> YearExportData:
        year = require_school_year(year)
        users = self._users.list_all()
        workshops = self._workshops.list_all()
        sessions = self._attendance.list_sessions()
        stats = aggregate_statistics(users, workshops, sessions).to_dict()

        summary = pd.DataFrame(
            [{"Indicador": "Año escolar", "Valor": year}]
            + [{"Indicador": label, "Valor": stats[key]} for key, label in SUMMARY_LABELS.items()]
        )

        students = pd.DataFrame(
            [
                {"ID": u.user_id, "Nombre": u.full_name, "Grado": u.grade or "", "Sección": u.section or ""}
                for u in users
                if u.is_student
            ],
            columns=["ID", "Nombre", "Grado", "Sección"],
        )

        workshop_df = pd.DataFrame(
            [
                {
                    "ID": w.workshop_id,
                    "Taller": w.title,
                    "Estado": w.status.value,
                    "Inscritos": len(w.participants),
                    "Cupo": w.max_participants,
                }
                for w in workshops
            ],
            columns=["ID", "Taller", "Estado", "Inscritos", "Cupo"],
        )

        attendance_rows = []
        for s in sessions:
            for r in s.records:
                attendance_rows.append(
                    {
                        "Fecha": s.session_date.strftime("%Y-%m-%d"),
                        "Grado": s.grade or "",
                        "Sección": s.section or "",
                        "Taller": s.workshop_id or "",
                        "Estudiante": r.student_name or r.student_id,
                        "Estado": r.status.value,
                    }
                )
        attendance = pd.DataFrame(
            attendance_rows, columns=["Fecha", "Grado", "Sección", "Taller", "Estudiante", "Estado"]
        )

        return YearExportData(summary=summary, students=students, workshops=workshop_df, attendance=attendance)

    def to_excel(self, year: str) -> io.BytesIO:
        data = self.build(year)
        out = io.BytesIO()
        with pd.ExcelWriter(out, engine="openpyxl") as writer:
            data.summary.to_excel(writer, sheet_name="Resumen", index=False)
            data.students.to_excel(writer, sheet_name="Estudiantes", index=False)
            data.workshops.to_excel(writer, sheet_name="Talleres", index=False)
            data.attendance.to_excel(writer, sheet_name="Asistencia", index=False)
        out.seek(0)
        return out

    @staticmethod
    def filename(year: str) -> str:
        return f"Cierre_{year}.xlsx"
