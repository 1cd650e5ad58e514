from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Optional

from ..common.datetime_utils import format_hhmm
from ..core.enums import Session


@dataclass(frozen=True)
class SessionWindow:
    """One session's configuration on a day: enabled flag plus an inclusive time-of-day range."""

    enabled: bool
    start: time
    end: time

    def contains(self, moment: time) -> bool:
        return self.start <= moment <= self.end

    def describe(self) -> str:
        return f"{format_hhmm(self.start)} - {format_hhmm(self.end)}"


@dataclass(frozen=True)
class EventDay:
    event_day_id: int
    event_id: int
    day_date: date
    fn: SessionWindow
    an: SessionWindow
    is_active: bool = True

    def window(self, session: Session) -> SessionWindow:
        return self.fn if Session(session) is Session.FN else self.an

    def to_dict(self) -> dict:
        return {
            "id": self.event_day_id,
            "event_id": self.event_id,
            "date": self.day_date.isoformat(),
            "fn_enabled": self.fn.enabled,
            "fn_start_time": format_hhmm(self.fn.start),
            "fn_end_time": format_hhmm(self.fn.end),
            "an_enabled": self.an.enabled,
            "an_start_time": format_hhmm(self.an.start),
            "an_end_time": format_hhmm(self.an.end),
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class Event:
    event_id: int
    name: str
    description: Optional[str]
    start_date: date
    end_date: date
    is_active: bool = True
    days: tuple[EventDay, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {
            "id": self.event_id,
            "name": self.name,
            "description": self.description,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "is_active": self.is_active,
            "event_days": [d.to_dict() for d in sorted(self.days, key=lambda d: d.day_date)],
        }


@dataclass(frozen=True)
class NewEventDay:
    """Input for creating an EventDay; windows already parsed and validated."""

    day_date: date
    fn: SessionWindow
    an: SessionWindow
