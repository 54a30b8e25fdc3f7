from __future__ import annotations

import re
from datetime import date, datetime, time
from typing import Any, Iterable, Mapping, Optional

from ..core.exceptions import ValidationError

_INT_RE = re.compile(r"^[+-]?\d+$")


def require_non_empty(value: str, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_length(value: str, field_name: str, *, min_len: int = 0, max_len: Optional[int] = None) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string")
    value = value.strip()
    if len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    if max_len is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} cannot exceed {max_len} characters")
    return value


def optional_text(value: Any, field_name: str, *, max_len: int) -> Optional[str]:
    """Blank strings collapse to None."""
    if value is None:
        return None
    text = require_length(value, field_name, max_len=max_len)
    return text or None


def require_int(value: Any, field_name: str, *, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    # bool is an int subclass; a JSON true must not pass as 1
    if isinstance(value, bool) or not isinstance(value, int):
        if isinstance(value, str) and _INT_RE.match(value.strip()):
            value = int(value.strip())
        else:
            raise ValidationError(f"{field_name} must be an integer")
    if min_value is not None and value < min_value:
        raise ValidationError(f"{field_name} must be at least {min_value}")
    if max_value is not None and value > max_value:
        raise ValidationError(f"{field_name} cannot exceed {max_value}")
    return value


def require_positive_id(value: Any, field_name: str) -> int:
    return require_int(value, field_name, min_value=1)


def require_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{field_name} must be true or false")
    return value


def optional_bool(value: Any, field_name: str) -> Optional[bool]:
    if value is None:
        return None
    return require_bool(value, field_name)


def require_date(value: Any, field_name: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            text = value.strip()
            if len(text) == 10:
                return datetime.strptime(text, "%Y-%m-%d").date()
            return datetime.fromisoformat(text).date()
        except ValueError:
            pass
    raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)")


def require_time(value: Any, field_name: str) -> time:
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%H:%M").time()
        except ValueError:
            pass
    raise ValidationError(f"{field_name} must be a time (HH:MM)")


def require_id_list(value: Any, field_name: str) -> tuple[int, ...]:
    """Positive ids, duplicates collapsed, first-seen order kept."""
    if not isinstance(value, (list, tuple)):
        raise ValidationError(f"{field_name} must be a list of ids")
    seen: dict[int, None] = {}
    for item in value:
        seen[require_positive_id(item, f"{field_name} item")] = None
    return tuple(seen)


def reject_unknown_fields(payload: Mapping[str, Any], allowed: Iterable[str]) -> None:
    unknown = sorted(set(payload) - set(allowed))
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(unknown)}")


def require_fields(payload: Mapping[str, Any], required: Iterable[str]) -> None:
    missing = [name for name in required if payload.get(name) is None]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}")


def require_mapping(payload: Any) -> Mapping[str, Any]:
    if not isinstance(payload, Mapping):
        raise ValidationError("Request body must be a JSON object")
    return payload
