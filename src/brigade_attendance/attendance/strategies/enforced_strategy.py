from __future__ import annotations

from datetime import datetime

from ...common.datetime_utils import to_minute
from ...core.enums import Session
from ...events.model import EventDay
from .base import ALLOWED, WindowDecision, WindowStrategy


class EnforcedWindowStrategy(WindowStrategy):
    """The day is today: the current minute must fall inside [start, end]."""

    def check(self, *, day: EventDay, session: Session, now: datetime) -> WindowDecision:
        window = day.window(session)
        if window.contains(to_minute(now)):
            return ALLOWED
        return WindowDecision(
            allowed=False,
            reason=f"{session.label} attendance can only be marked between {window.describe()}",
        )
