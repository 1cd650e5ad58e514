from __future__ import annotations

from typing import Iterable, Union

from ..core.enums import AttendanceStatus, Session

Percentage = str


def attendance_percentage(present: int, total: int) -> Percentage:
    """present / total * 100 with two decimals, or "0" when there is nothing to count."""

    if total <= 0:
        return "0"
    return f"{round(present / total * 100, 2):.2f}"


def count_statuses(records: Iterable) -> dict[str, int]:
    """Count total/present/absent/late over anything with a ``status`` attribute."""

    out = {"total": 0, "present": 0, "absent": 0, "late": 0}
    for r in records:
        out["total"] += 1
        out[AttendanceStatus(r.status).value.lower()] += 1
    return out


def session_breakdown(records: Iterable, session: Union[Session, str]) -> dict:
    subset = [r for r in records if Session(r.session) == Session(session)]
    counts = count_statuses(subset)
    counts["percentage"] = attendance_percentage(counts["present"], counts["total"])
    return counts
