from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} es obligatorio")
    return value.strip()


def require_positive(value, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} no es un número válido")
    if number <= 0:
        raise ValidationError(f"{field_name} debe ser mayor a 0")
    return number


def require_non_negative(value, field_name: str) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} no es un número válido")
    if number < 0:
        raise ValidationError(f"{field_name} no puede ser negativo")
    return number


def optional_text(value: Optional[str]) -> Optional[str]:
    return (value or "").strip() or None
