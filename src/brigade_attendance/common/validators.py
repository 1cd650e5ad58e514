from __future__ import annotations

from typing import Any, Iterable, Optional

from ..core.enums import AttendanceStatus, Session
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_id(value: Any, field_name: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} is invalid")
    try:
        out = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required")
    if out <= 0:
        raise ValidationError(f"{field_name} is invalid")
    return out


def optional_id(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    return require_id(value, field_name)


def require_ids(values: Any, field_name: str) -> list[int]:
    """Validate a non-empty list of ids; duplicates are dropped, order kept."""

    if not isinstance(values, (list, tuple)):
        raise ValidationError(f"{field_name} must be an array")
    out: list[int] = []
    seen: set[int] = set()
    for v in values:
        i = require_id(v, field_name)
        if i not in seen:
            seen.add(i)
            out.append(i)
    if not out:
        raise ValidationError(f"{field_name} must not be empty")
    return out


def parse_session(value: Any) -> Session:
    if isinstance(value, Session):
        return value
    try:
        return Session(str(value or "").strip().upper())
    except ValueError:
        raise ValidationError("Invalid session")


def optional_session(value: Any) -> Optional[Session]:
    if value is None or value == "":
        return None
    return parse_session(value)


def parse_status(value: Any, default: AttendanceStatus = AttendanceStatus.PRESENT) -> AttendanceStatus:
    if value is None or value == "":
        return default
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value).strip().upper())
    except ValueError:
        raise ValidationError("Invalid status")


def require_positive_int(value: Any, field_name: str, *, default: int, maximum: Optional[int] = None) -> int:
    if value is None or value == "":
        return default
    try:
        out = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a positive integer")
    if out <= 0:
        raise ValidationError(f"{field_name} must be a positive integer")
    if maximum is not None and out > maximum:
        raise ValidationError(f"{field_name} must be at most {maximum}")
    return out


def as_bool(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    raise ValidationError(f"{field_name} must be a boolean")


def join_names(parts: Iterable[Optional[str]]) -> str:
    return " ".join(p for p in parts if p).strip()
