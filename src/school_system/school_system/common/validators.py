from __future__ import annotations

import re

from ..core.exceptions import ValidationError

_YEAR_RE = re.compile(r"^\d{4}$")


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} no es válido")
    return value.strip()


def require_school_year(value: str) -> str:
    year = (value or "").strip()
    if not _YEAR_RE.match(year):
        raise ValidationError("El año escolar debe tener 4 dígitos (ej. 2024)")
    return year
