from __future__ import annotations

from typing import Any

from ..core.enums import Methodology, RankLevel
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} must not be empty")
    return str(value).strip()


def require_int(value: Any, field_name: str) -> int:
    # bool is an int subclass; a checkbox value is never a valid code or id
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be an integer")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError(f"{field_name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer") from None


def decode_rank(code: Any) -> RankLevel:
    """Decode a raw rank code coming from the presentation layer."""
    raw = require_int(code, "Rank")
    try:
        return RankLevel(raw)
    except ValueError:
        raise ValidationError(f"Invalid rank value: {raw}") from None


def decode_methodology(code: Any) -> Methodology:
    """Decode a raw methodology code coming from the presentation layer."""
    raw = require_int(code, "Methodology")
    try:
        return Methodology(raw)
    except ValueError:
        raise ValidationError(f"Invalid methodology value: {raw}") from None
