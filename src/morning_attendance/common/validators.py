from __future__ import annotations

from ..core.constants import STUDENT_ID_LENGTH
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} must not be empty")
    return value.strip()


def require_student_id(value: str) -> str:
    v = (value or "").strip()
    if len(v) != STUDENT_ID_LENGTH or not (v.isascii() and v.isdigit()):
        raise ValidationError(f"Student id must be {STUDENT_ID_LENGTH} digits")
    return v
