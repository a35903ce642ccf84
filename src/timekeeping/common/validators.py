from __future__ import annotations

from datetime import datetime
from typing import Union

from ..core.enums import BreakType
from ..core.exceptions import ValidationError


def require_after(later: datetime, earlier: datetime, field_name: str) -> datetime:
    if later <= earlier:
        raise ValidationError(f"{field_name} must be after {earlier.isoformat()}")
    return later


def require_not_before(value: datetime, floor: datetime, field_name: str) -> datetime:
    if value < floor:
        raise ValidationError(f"{field_name} cannot be before {floor.isoformat()}")
    return value


def parse_break_type(value: Union[str, BreakType]) -> BreakType:
    if isinstance(value, BreakType):
        return value
    try:
        return BreakType((value or "").strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in BreakType)
        raise ValidationError(f"Unknown break type {value!r} (expected one of: {allowed})")
