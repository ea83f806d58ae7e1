from __future__ import annotations

from typing import Any

from ..core.exceptions import ValidationError
from .text import clean


def require_non_empty(value: Any, field_name: str) -> str:
    text = clean(value)
    if not text:
        raise ValidationError(f"Missing {field_name}.")
    return text


def clamp_limit(value: Any, *, default: int, minimum: int, maximum: int) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return default
    return max(minimum, min(maximum, n))
