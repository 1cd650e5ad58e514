from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import Session
from ...events.model import EventDay


@dataclass(frozen=True)
class WindowDecision:
    allowed: bool
    reason: Optional[str] = None


ALLOWED = WindowDecision(allowed=True)


class WindowStrategy(ABC):
    """Strategy Pattern: encapsulate how the time-of-day window is checked for a day."""

    @abstractmethod
    def check(self, *, day: EventDay, session: Session, now: datetime) -> WindowDecision:
        raise NotImplementedError
