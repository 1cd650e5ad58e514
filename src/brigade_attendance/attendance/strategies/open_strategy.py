from __future__ import annotations

from datetime import datetime

from ...core.enums import Session
from ...events.model import EventDay
from .base import ALLOWED, WindowDecision, WindowStrategy


class OpenWindowStrategy(WindowStrategy):
    """The day is not today (past or future): no time-of-day restriction."""

    def check(self, *, day: EventDay, session: Session, now: datetime) -> WindowDecision:
        return ALLOWED
