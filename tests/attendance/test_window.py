from dataclasses import replace
from datetime import timedelta

from brigade_attendance.attendance.factory import WindowStrategyFactory
from brigade_attendance.attendance.strategies.enforced_strategy import EnforcedWindowStrategy
from brigade_attendance.attendance.strategies.open_strategy import OpenWindowStrategy
from brigade_attendance.attendance.window import (
    DAY_UNAVAILABLE,
    SessionWindowValidator,
    active_session,
    session_state,
    session_status,
)
from brigade_attendance.core.enums import Session, SessionState

from fakes import AN_WINDOW, TODAY, at, make_day


def test_factory_enforces_window_only_on_the_days_own_date():
    factory = WindowStrategyFactory()
    day = make_day(10, TODAY)

    assert isinstance(factory.for_day(day=day, now=at(9, 15)), EnforcedWindowStrategy)
    assert isinstance(factory.for_day(day=day, now=at(9, 15, day=TODAY + timedelta(days=1))), OpenWindowStrategy)
    assert isinstance(factory.for_day(day=day, now=at(9, 15, day=TODAY - timedelta(days=1))), OpenWindowStrategy)


def test_mark_inside_forenoon_window_is_allowed():
    decision = SessionWindowValidator().can_mark(make_day(10, TODAY), Session.FN, at(9, 15))
    assert decision.allowed
    assert decision.reason is None


def test_window_bounds_are_inclusive_at_minute_precision():
    validator = SessionWindowValidator()
    day = make_day(10, TODAY)

    assert validator.can_mark(day, Session.FN, at(9, 0)).allowed
    assert validator.can_mark(day, Session.FN, at(9, 30)).allowed
    assert validator.can_mark(day, Session.FN, at(9, 30, 59)).allowed


def test_mark_outside_window_names_the_window():
    validator = SessionWindowValidator()
    day = make_day(10, TODAY)

    for now in (at(8, 59), at(9, 31)):
        decision = validator.can_mark(day, Session.FN, now)
        assert not decision.allowed
        assert "09:00" in decision.reason
        assert "09:30" in decision.reason
        assert decision.reason.startswith("Forenoon")


def test_afternoon_window_reason():
    decision = SessionWindowValidator().can_mark(make_day(10, TODAY), Session.AN, at(9, 15))
    assert decision.reason == "Afternoon attendance can only be marked between 14:00 - 14:30"


def test_day_other_than_today_bypasses_time_window():
    validator = SessionWindowValidator()
    past = make_day(11, TODAY - timedelta(days=1))
    future = make_day(12, TODAY + timedelta(days=1))

    assert validator.can_mark(past, Session.FN, at(23, 0)).allowed
    assert validator.can_mark(future, Session.AN, at(3, 0)).allowed


def test_disabled_session_is_rejected_even_off_day():
    day = make_day(14, TODAY + timedelta(days=3), an=replace(AN_WINDOW, enabled=False))
    decision = SessionWindowValidator().can_mark(day, Session.AN, at(14, 10))
    assert not decision.allowed
    assert decision.reason == "Afternoon session is not enabled for this day"


def test_missing_or_inactive_day_is_unavailable():
    validator = SessionWindowValidator()
    assert validator.can_mark(None, Session.FN, at(9, 15)).reason == DAY_UNAVAILABLE
    inactive = make_day(13, TODAY, is_active=False)
    assert validator.can_mark(inactive, Session.FN, at(9, 15)).reason == DAY_UNAVAILABLE


def test_session_state_progression_today():
    day = make_day(10, TODAY)
    assert session_state(day, Session.FN, at(8, 0)) is SessionState.UPCOMING
    assert session_state(day, Session.FN, at(9, 10)) is SessionState.ACTIVE
    assert session_state(day, Session.FN, at(10, 0)) is SessionState.ENDED


def test_session_state_is_inactive_on_other_days():
    day = make_day(12, TODAY + timedelta(days=1))
    assert session_state(day, Session.FN, at(9, 10)) is SessionState.INACTIVE


def test_active_session_and_status():
    day = make_day(10, TODAY)
    assert active_session(day, at(9, 10)) is Session.FN
    assert active_session(day, at(14, 30)) is Session.AN
    assert active_session(day, at(12, 0)) is None

    status = session_status(day, at(14, 5))
    assert status["fn"]["state"] == "ended"
    assert status["an"] == {"enabled": True, "time": "14:00 - 14:30", "state": "active", "is_active": True}


def test_disabled_session_is_never_active():
    day = make_day(10, TODAY, an=replace(AN_WINDOW, enabled=False))
    assert active_session(day, at(14, 10)) is None
    assert session_status(day, at(14, 10))["an"]["is_active"] is False
