from __future__ import annotations

from datetime import date, datetime, time

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    try:
        return datetime.strptime((value or "").strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def parse_hhmm(value: str, field_name: str = "time") -> time:
    """Parse an HH:MM wall-clock time (hours 0-23)."""
    v = (value or "").strip()
    try:
        return datetime.strptime(v, "%H:%M").time()
    except ValueError:
        raise ValidationError(f"Invalid {field_name} format (HH:MM)")


def format_hhmm(value: time) -> str:
    return value.strftime("%H:%M")


def to_minute(moment: datetime) -> time:
    """Time-of-day of ``moment`` truncated to the minute."""
    return moment.time().replace(second=0, microsecond=0)


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
