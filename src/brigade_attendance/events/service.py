from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Any, Optional, Sequence

from ..attendance.window import active_session, session_status
from ..common.datetime_utils import now_local, parse_hhmm, parse_iso_date
from ..common.validators import as_bool, require_non_empty
from ..core import constants
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Event, EventDay, NewEventDay, SessionWindow
from .repository import EventRepository

logger = logging.getLogger(__name__)


def _window_from_payload(payload: dict, prefix: str, default_start: str, default_end: str) -> SessionWindow:
    enabled = True
    if payload.get(f"{prefix}_enabled") is not None:
        enabled = as_bool(payload[f"{prefix}_enabled"], f"{prefix}_enabled")
    start = parse_hhmm(payload.get(f"{prefix}_start_time") or default_start, f"{prefix}_start_time")
    end = parse_hhmm(payload.get(f"{prefix}_end_time") or default_end, f"{prefix}_end_time")
    if end < start:
        raise ValidationError(f"{prefix.upper()} end time must not be before start time")
    return SessionWindow(enabled=enabled, start=start, end=end)


def parse_new_day(payload: dict) -> NewEventDay:
    """Build a NewEventDay from request data, applying the default session windows."""

    if not isinstance(payload, dict):
        raise ValidationError("Event day must be an object")
    return NewEventDay(
        day_date=parse_iso_date(payload.get("date") or ""),
        fn=_window_from_payload(payload, "fn", constants.DEFAULT_FN_START, constants.DEFAULT_FN_END),
        an=_window_from_payload(payload, "an", constants.DEFAULT_AN_START, constants.DEFAULT_AN_END),
    )


class ScheduleService:
    """Read model over events/days plus the admin operations that maintain them."""

    def __init__(self, events: EventRepository):
        self._events = events

    def get_day(self, event_day_id: int) -> EventDay:
        day = self._events.get_day(int(event_day_id))
        if not day:
            raise NotFoundError("Event day not found")
        return day

    def current_event_day(self, now: datetime | None = None) -> tuple[Event, EventDay]:
        now = now or now_local()
        matches = self._events.find_active_days_on(now.date())
        if not matches:
            raise NotFoundError("No active event found for today")
        return matches[0]

    def current_status(self, now: datetime | None = None) -> dict:
        now = now or now_local()
        event, day = self.current_event_day(now)
        session = active_session(day, now)
        return {
            "event": event.to_dict(),
            "current_day": day.to_dict(),
            "active_session": session.value if session else None,
            "session_status": session_status(day, now),
        }

    def list_events(self) -> list[dict]:
        return [e.to_dict() for e in self._events.list_active_events()]

    def get_event(self, event_id: int) -> dict:
        event = self._events.get_event(int(event_id))
        if not event:
            raise NotFoundError("Event not found")
        return event.to_dict()

    def list_days(self, event_id: int) -> list[dict]:
        out = []
        for day, count in self._events.list_days_with_counts(int(event_id)):
            d = day.to_dict()
            d["attendance_record_count"] = count
            out.append(d)
        return out

    def create_event(
        self,
        *,
        current_role: Role,
        name: str,
        description: Optional[str],
        start_date: str,
        end_date: str,
        days: Sequence[dict],
    ) -> dict:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

        name = require_non_empty(name, "Event name")
        start = parse_iso_date(start_date)
        end = parse_iso_date(end_date)
        if end <= start:
            raise ValidationError("End date must be after start date")
        if not isinstance(days, (list, tuple)):
            raise ValidationError("Event days must be an array")

        new_days = [parse_new_day(d) for d in days]
        for d in new_days:
            if not start <= d.day_date <= end:
                raise ValidationError(f"Event day {d.day_date.isoformat()} is outside the event dates")
        if len({d.day_date for d in new_days}) != len(new_days):
            raise ValidationError("Event days must have distinct dates")

        description = description.strip() if description else None
        event_id = self._events.create_event(
            name=name,
            description=description,
            start_date=start,
            end_date=end,
            days=new_days,
        )
        logger.info("Event created: %s (%d days)", name, len(new_days))
        return self.get_event(event_id)

    def add_day(self, *, current_role: Role, event_id: int, payload: dict) -> dict:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

        event = self._events.get_event(int(event_id))
        if not event:
            raise NotFoundError("Event not found")

        new_day = parse_new_day(payload)
        if any(d.day_date == new_day.day_date and d.is_active for d in event.days):
            raise ValidationError("Event already has a day on this date")

        day_id = self._events.add_day(event_id=event.event_id, day=new_day)
        logger.info("Event day added: event=%s date=%s", event.event_id, new_day.day_date)
        return self.get_day(day_id).to_dict()

    def update_day(self, *, current_role: Role, event_day_id: int, payload: dict[str, Any]) -> dict:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Admin access required")

        day = self.get_day(event_day_id)

        def merged(window: SessionWindow, prefix: str) -> SessionWindow:
            enabled = window.enabled
            if f"{prefix}_enabled" in payload:
                enabled = as_bool(payload[f"{prefix}_enabled"], f"{prefix}_enabled")
            start = window.start
            end = window.end
            if payload.get(f"{prefix}_start_time"):
                start = parse_hhmm(payload[f"{prefix}_start_time"], f"{prefix}_start_time")
            if payload.get(f"{prefix}_end_time"):
                end = parse_hhmm(payload[f"{prefix}_end_time"], f"{prefix}_end_time")
            if end < start:
                raise ValidationError(f"{prefix.upper()} end time must not be before start time")
            return SessionWindow(enabled=enabled, start=start, end=end)

        is_active = day.is_active
        if "is_active" in payload:
            is_active = as_bool(payload["is_active"], "is_active")

        updated = replace(day, fn=merged(day.fn, "fn"), an=merged(day.an, "an"), is_active=is_active)
        self._events.update_day(event_day_id=day.event_day_id, day=updated)
        logger.info("Event day updated: %s", day.day_date)
        return updated.to_dict()
