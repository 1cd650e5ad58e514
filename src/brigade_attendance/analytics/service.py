from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Iterable

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository, RecordCriteria
from ..brigades.repository import BrigadeRepository, StudentRepository
from ..common.datetime_utils import now_local
from ..common.stats import attendance_percentage, count_statuses, session_breakdown
from ..common.validators import optional_id, require_id, require_positive_int
from ..core import constants
from ..core.enums import AttendanceStatus, Session
from ..core.exceptions import AuthorizationError, NotFoundError
from ..events.repository import EventRepository
from ..visibility.caller import AdminCaller, BrigadeLeadCaller, Caller, StudentCaller
from ..visibility.policy import VisibilityFilter


def _day_bounds(day: date) -> tuple[datetime, datetime]:
    return datetime.combine(day, time.min), datetime.combine(day, time.max)


def _daily_buckets(records: Iterable[AttendanceRecord], key) -> dict[str, dict]:
    """Group records by ``key(record)`` (a date) into per-day counts, FN/AN split included."""

    out: dict[str, dict] = {}
    for r in records:
        day = key(r).isoformat()
        bucket = out.setdefault(
            day,
            {
                "date": day,
                "total": 0,
                "present": 0,
                "absent": 0,
                "late": 0,
                "fn_total": 0,
                "fn_present": 0,
                "an_total": 0,
                "an_present": 0,
            },
        )
        bucket["total"] += 1
        bucket[r.status.value.lower()] += 1
        prefix = "fn" if r.session is Session.FN else "an"
        bucket[f"{prefix}_total"] += 1
        if r.status is AttendanceStatus.PRESENT:
            bucket[f"{prefix}_present"] += 1
    return out


class AnalyticsService:
    """Read-only aggregates over the caller's visible attendance records."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        brigades: BrigadeRepository,
        events: EventRepository,
        visibility: VisibilityFilter,
        *,
        default_trend_days: int = constants.DEFAULT_TREND_DAYS,
    ):
        self._attendance = attendance
        self._students = students
        self._brigades = brigades
        self._events = events
        self._visibility = visibility
        self._default_trend_days = default_trend_days

    # ---- dashboard ----

    def dashboard_stats(self, caller: Caller, now: datetime | None = None) -> dict:
        now = now or now_local()
        if isinstance(caller, AdminCaller):
            return {"admin": self._admin_dashboard(now)}
        if isinstance(caller, BrigadeLeadCaller):
            return {"brigade_lead": self._lead_dashboard(caller, now)}
        if isinstance(caller, StudentCaller):
            stats = self._student_dashboard(caller, now)
            return {"student": stats} if stats else {}
        return {}

    def _admin_dashboard(self, now: datetime) -> dict:
        start, end = _day_bounds(now.date())
        total = self._attendance.count(RecordCriteria())
        present = self._attendance.count(RecordCriteria(status=AttendanceStatus.PRESENT))
        event = self._events.first_active_event()
        return {
            "total_students": self._students.count_active(),
            "total_brigades": self._brigades.count_active(),
            "total_brigade_leads": self._brigades.count_active_leads(),
            "today_attendance": self._attendance.count(
                RecordCriteria(status=AttendanceStatus.PRESENT, created_from=start, created_to=end)
            ),
            "overall_attendance_percentage": attendance_percentage(present, total),
            "current_event": {"name": event.name, "total_days": len(event.days)} if event else None,
        }

    def _lead_dashboard(self, caller: BrigadeLeadCaller, now: datetime) -> dict:
        brigades = list(self._brigades.list_led_by(caller.user_id))
        ids = frozenset(b.brigade_id for b in brigades)
        per_brigade = self._students.count_active_by_brigade(ids) if ids else {}

        start, end = _day_bounds(now.date())
        scoped = RecordCriteria(brigade_ids=ids, active_students_only=True)
        total = self._attendance.count(scoped)
        present = self._attendance.count(
            RecordCriteria(brigade_ids=ids, status=AttendanceStatus.PRESENT, active_students_only=True)
        )
        today = self._attendance.count(
            RecordCriteria(
                brigade_ids=ids,
                status=AttendanceStatus.PRESENT,
                created_from=start,
                created_to=end,
                active_students_only=True,
            )
        )
        return {
            "total_brigades": len(brigades),
            "total_students": sum(per_brigade.values()),
            "today_attendance": today,
            "brigade_attendance_percentage": attendance_percentage(present, total),
            "brigades": [
                {"id": b.brigade_id, "name": b.name, "student_count": per_brigade.get(b.brigade_id, 0)}
                for b in brigades
            ],
        }

    def _student_dashboard(self, caller: StudentCaller, now: datetime) -> dict | None:
        student = self._students.get_by_user_id(caller.user_id)
        if not student:
            return None

        records = self._attendance.list_records(RecordCriteria(student_ids=frozenset({student.student_id})))
        counts = count_statuses(records)
        todays = [r for r in records if r.event_day_date == now.date()]
        return {
            "student_info": {
                "temp_roll_number": student.temp_roll_number,
                "name": student.full_name,
                "brigade": student.brigade_name or constants.NO_BRIGADE,
            },
            "attendance_percentage": attendance_percentage(counts["present"], counts["total"]),
            "total_sessions": counts["total"],
            "present_sessions": counts["present"],
            "today_sessions": len(todays),
            "today_present": sum(1 for r in todays if r.status is AttendanceStatus.PRESENT),
        }

    # ---- trends / comparisons ----

    def attendance_trends(
        self,
        caller: Caller,
        *,
        days: Any = None,
        brigade_id: Any = None,
        now: datetime | None = None,
    ) -> list[dict]:
        days = require_positive_int(
            days, "days", default=self._default_trend_days, maximum=constants.MAX_TREND_DAYS
        )
        brigade_id = optional_id(brigade_id, "Brigade ID")
        now = now or now_local()

        scope = self._visibility.for_caller(caller).scope(brigade_id)
        records = self._attendance.list_records(
            RecordCriteria.within(scope, created_from=now - timedelta(days=days), created_to=now)
        )
        buckets = _daily_buckets(records, lambda r: r.created_at.date())
        return [buckets[k] for k in sorted(buckets)]

    def brigade_comparison(self, caller: Caller) -> list[dict]:
        if not isinstance(caller, AdminCaller):
            raise AuthorizationError("Access denied")

        brigades = list(self._brigades.list_active())
        if not brigades:
            return []
        ids = frozenset(b.brigade_id for b in brigades)
        students = self._students.count_active_by_brigade(ids)
        records = self._attendance.list_records(RecordCriteria(brigade_ids=ids, active_students_only=True))

        by_brigade: dict[int, list[AttendanceRecord]] = {}
        for r in records:
            by_brigade.setdefault(r.brigade_id, []).append(r)

        out = []
        for b in brigades:
            counts = count_statuses(by_brigade.get(b.brigade_id, []))
            out.append(
                {
                    "id": b.brigade_id,
                    "name": b.name,
                    "total_students": students.get(b.brigade_id, 0),
                    "total_records": counts["total"],
                    "present_records": counts["present"],
                    "attendance_percentage": attendance_percentage(counts["present"], counts["total"]),
                }
            )
        return out

    def session_analysis(self, caller: Caller) -> dict:
        scope = self._visibility.for_caller(caller).scope()
        records = self._attendance.list_records(RecordCriteria.within(scope))
        return {
            "forenoon": session_breakdown(records, Session.FN),
            "afternoon": session_breakdown(records, Session.AN),
        }

    def brigade_stats(self, caller: Caller, *, brigade_id: Any) -> dict:
        brigade_id = require_id(brigade_id, "Brigade ID")
        policy = self._visibility.for_caller(caller)
        policy.ensure_marker()

        brigade = self._brigades.get_by_id(brigade_id)
        if not brigade:
            raise NotFoundError("Brigade not found")
        policy.ensure_can_view_brigade(brigade)

        records = self._attendance.list_records(
            RecordCriteria(brigade_ids=frozenset({brigade_id}), active_students_only=True)
        )
        counts = count_statuses(records)
        daily = _daily_buckets(
            [r for r in records if r.event_day_date is not None], lambda r: r.event_day_date
        )

        def session_stats(session: Session) -> dict:
            s = session_breakdown(records, session)
            return {"total": s["total"], "present": s["present"], "percentage": s["percentage"]}

        return {
            "brigade_info": {
                "id": brigade.brigade_id,
                "name": brigade.name,
                "total_students": self._students.count_active(brigade_ids=[brigade_id]),
            },
            "overall_stats": {
                "total_records": counts["total"],
                "present_records": counts["present"],
                "absent_records": counts["absent"],
                "late_records": counts["late"],
                "attendance_percentage": attendance_percentage(counts["present"], counts["total"]),
            },
            "session_stats": {"fn": session_stats(Session.FN), "an": session_stats(Session.AN)},
            "daily_stats": {k: daily[k] for k in sorted(daily)},
        }
