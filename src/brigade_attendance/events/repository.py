from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Event, EventDay, NewEventDay


class EventRepository(Protocol):
    def get_event(self, event_id: int) -> Optional[Event]:
        """Event with all of its days."""

        raise NotImplementedError

    def list_active_events(self) -> Sequence[Event]:
        """Active events, newest start date first, each with its days."""

        raise NotImplementedError

    def first_active_event(self) -> Optional[Event]:
        raise NotImplementedError

    def get_day(self, event_day_id: int) -> Optional[EventDay]:
        raise NotImplementedError

    def find_active_days_on(self, day_date: date) -> Sequence[tuple[Event, EventDay]]:
        """Active days dated ``day_date`` that belong to active events."""

        raise NotImplementedError

    def create_event(
        self,
        *,
        name: str,
        description: Optional[str],
        start_date: date,
        end_date: date,
        days: Sequence[NewEventDay],
    ) -> int:
        """Create the event and its days in one transaction. Returns event_id."""

        raise NotImplementedError

    def add_day(self, *, event_id: int, day: NewEventDay) -> int:
        raise NotImplementedError

    def update_day(self, *, event_day_id: int, day: EventDay) -> bool:
        raise NotImplementedError

    def list_days_with_counts(self, event_id: int) -> Sequence[tuple[EventDay, int]]:
        """Active days of an event with their attendance record counts."""

        raise NotImplementedError
