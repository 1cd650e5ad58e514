"""Session window rules: whether a mark is allowed now, and display states.

Everything here is pure and recomputed per request.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ..common.datetime_utils import to_minute
from ..core.enums import Session, SessionState
from ..events.model import EventDay
from .factory import WindowStrategyFactory
from .strategies.base import WindowDecision

DAY_UNAVAILABLE = "Event day not found or inactive"


class SessionWindowValidator:
    def __init__(self, factory: WindowStrategyFactory | None = None):
        self._factory = factory or WindowStrategyFactory()

    def can_mark(self, day: Optional[EventDay], session: Session, now: datetime) -> WindowDecision:
        if day is None or not day.is_active:
            return WindowDecision(allowed=False, reason=DAY_UNAVAILABLE)

        session = Session(session)
        if not day.window(session).enabled:
            return WindowDecision(allowed=False, reason=f"{session.label} session is not enabled for this day")

        strategy = self._factory.for_day(day=day, now=now)
        return strategy.check(day=day, session=session, now=now)


def session_state(day: EventDay, session: Session, now: datetime) -> SessionState:
    if day.day_date != now.date():
        return SessionState.INACTIVE

    window = day.window(session)
    moment = to_minute(now)
    if moment < window.start:
        return SessionState.UPCOMING
    if moment > window.end:
        return SessionState.ENDED
    return SessionState.ACTIVE


def active_session(day: EventDay, now: datetime) -> Optional[Session]:
    # FN is evaluated first so it wins if windows were ever configured to overlap.
    for session in (Session.FN, Session.AN):
        if day.window(session).enabled and session_state(day, session, now) is SessionState.ACTIVE:
            return session
    return None


def session_status(day: EventDay, now: datetime) -> dict:
    out: dict = {}
    for session in (Session.FN, Session.AN):
        window = day.window(session)
        state = session_state(day, session, now)
        out[session.value.lower()] = {
            "enabled": window.enabled,
            "time": window.describe(),
            "state": state.value,
            "is_active": window.enabled and state is SessionState.ACTIVE,
        }
    return out
