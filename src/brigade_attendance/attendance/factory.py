from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..events.model import EventDay
from .strategies.base import WindowStrategy
from .strategies.enforced_strategy import EnforcedWindowStrategy
from .strategies.open_strategy import OpenWindowStrategy


@dataclass
class WindowStrategyFactory:
    """Factory Pattern: the window is only enforced on the day's own calendar date."""

    def for_day(self, *, day: EventDay, now: datetime) -> WindowStrategy:
        if day.day_date == now.date():
            return EnforcedWindowStrategy()
        return OpenWindowStrategy()
