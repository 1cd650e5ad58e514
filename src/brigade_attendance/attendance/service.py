from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Sequence

from ..brigades.model import Student
from ..brigades.repository import StudentRepository
from ..common.datetime_utils import now_local
from ..common.stats import attendance_percentage, count_statuses
from ..common.validators import (
    optional_id,
    optional_session,
    parse_session,
    parse_status,
    require_id,
    require_ids,
    require_positive_int,
)
from ..core import constants
from ..core.enums import Session
from ..core.exceptions import BusinessRuleError, NotFoundError
from ..events.model import EventDay
from ..events.repository import EventRepository
from ..notifications.publisher import AttendanceNotifier, LoggingNotifier, notify_safely, user_channel
from ..visibility.caller import Caller
from ..visibility.policy import VisibilityFilter
from .model import AttendanceRecord
from .repository import AttendanceRepository, RecordCriteria
from .window import DAY_UNAVAILABLE, SessionWindowValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkMarkResult:
    count: int
    records: Sequence[AttendanceRecord]

    def to_dict(self) -> dict:
        return {
            "message": f"Attendance marked for {self.count} students",
            "count": self.count,
            "records": [r.to_dict() for r in self.records],
        }


class AttendanceService:
    """Use cases over the attendance record store.

    Order of checks on writes: input validation, role, student lookup,
    visibility, event day, session window. Nothing is written unless every
    check passes.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        events: EventRepository,
        visibility: VisibilityFilter,
        *,
        notifier: AttendanceNotifier | None = None,
        validator: SessionWindowValidator | None = None,
    ):
        self._attendance = attendance
        self._students = students
        self._events = events
        self._visibility = visibility
        self._notifier = notifier or LoggingNotifier()
        self._validator = validator or SessionWindowValidator()

    def _check_window(self, event_day_id: int, session: Session, now: datetime) -> EventDay:
        day = self._events.get_day(event_day_id)
        decision = self._validator.can_mark(day, session, now)
        if not decision.allowed:
            if decision.reason == DAY_UNAVAILABLE:
                raise NotFoundError(decision.reason)
            raise BusinessRuleError(decision.reason)
        return day

    def _notify(self, student: Student, session: Session, record: Optional[AttendanceRecord] = None) -> None:
        if not student.user_id:
            return
        payload: dict[str, Any] = {"message": f"Attendance marked for {session.value} session"}
        if record is not None:
            payload["record"] = record.to_dict()
        notify_safely(self._notifier, user_channel(student.user_id), constants.ATTENDANCE_MARKED_EVENT, payload)

    def mark(
        self,
        caller: Caller,
        *,
        student_id: Any,
        event_day_id: Any,
        session: Any,
        status: Any = None,
        now: datetime | None = None,
    ) -> AttendanceRecord:
        student_id = require_id(student_id, "Student ID")
        event_day_id = require_id(event_day_id, "Event day ID")
        session = parse_session(session)
        status = parse_status(status)
        now = now or now_local()

        policy = self._visibility.for_caller(caller)
        policy.ensure_marker()

        student = self._students.get_by_id(student_id)
        if not student or not student.is_active:
            raise NotFoundError("Student not found")
        policy.ensure_can_mark(student)

        self._check_window(event_day_id, session, now)

        record = self._attendance.upsert(
            student_id=student_id,
            event_day_id=event_day_id,
            session=session,
            status=status,
            marked_by=caller.user_id,
            marked_at=now,
        )

        self._notify(student, session, record)
        logger.info(
            "Attendance marked: %s - %s - %s by user %s",
            student.temp_roll_number,
            session.value,
            status.value,
            caller.user_id,
        )
        return record

    def bulk_mark(
        self,
        caller: Caller,
        *,
        student_ids: Any,
        event_day_id: Any,
        session: Any,
        status: Any = None,
        now: datetime | None = None,
    ) -> BulkMarkResult:
        ids = require_ids(student_ids, "Student IDs")
        event_day_id = require_id(event_day_id, "Event day ID")
        session = parse_session(session)
        status = parse_status(status)
        now = now or now_local()

        policy = self._visibility.for_caller(caller)
        policy.ensure_marker()

        students = self._students.get_active_by_ids(ids)
        if len(students) != len(ids):
            raise NotFoundError("Some students not found")
        policy.ensure_can_mark_all(students)

        self._check_window(event_day_id, session, now)

        records = self._attendance.bulk_upsert(
            student_ids=ids,
            event_day_id=event_day_id,
            session=session,
            status=status,
            marked_by=caller.user_id,
            marked_at=now,
        )

        for student in students:
            self._notify(student, session)
        logger.info(
            "Bulk attendance marked: %d students - %s - %s by user %s",
            len(ids),
            session.value,
            status.value,
            caller.user_id,
        )
        return BulkMarkResult(count=len(records), records=records)

    def list_records(
        self,
        caller: Caller,
        *,
        event_day_id: Any = None,
        brigade_id: Any = None,
        session: Any = None,
        page: Any = 1,
        limit: Any = constants.DEFAULT_PAGE_SIZE,
    ) -> dict:
        event_day_id = optional_id(event_day_id, "Event day ID")
        brigade_id = optional_id(brigade_id, "Brigade ID")
        session = optional_session(session)
        page = require_positive_int(page, "page", default=1)
        limit = require_positive_int(
            limit, "limit", default=constants.DEFAULT_PAGE_SIZE, maximum=constants.MAX_PAGE_SIZE
        )

        scope = self._visibility.for_caller(caller).scope(brigade_id)
        criteria = RecordCriteria.within(scope, event_day_id=event_day_id, session=session)
        records, total = self._attendance.query(criteria, offset=(page - 1) * limit, limit=limit)

        return {
            "records": [r.to_dict() for r in records],
            "pagination": {
                "current_page": page,
                "total_pages": -(-total // limit),
                "total_items": total,
                "items_per_page": limit,
            },
        }

    def summary_for_day(self, caller: Caller, *, event_day_id: Any, session: Any = None) -> dict:
        event_day_id = require_id(event_day_id, "Event day ID")
        session = optional_session(session)

        if not self._events.get_day(event_day_id):
            raise NotFoundError("Event day not found")

        scope = self._visibility.for_caller(caller).scope()
        records = self._attendance.list_records(
            RecordCriteria.within(scope, event_day_id=event_day_id, session=session)
        )

        counts = count_statuses(records)
        brigade_stats: dict[str, dict[str, int]] = {}
        for r in records:
            name = r.brigade_name or constants.NO_BRIGADE
            bucket = brigade_stats.setdefault(name, {"total": 0, "present": 0, "absent": 0, "late": 0})
            bucket["total"] += 1
            bucket[r.status.value.lower()] += 1

        return {
            "summary": {
                "total_records": counts["total"],
                "present_count": counts["present"],
                "absent_count": counts["absent"],
                "late_count": counts["late"],
                "present_percentage": attendance_percentage(counts["present"], counts["total"]),
            },
            "brigade_stats": brigade_stats,
            "records": [r.to_dict() for r in records],
        }

    def student_attendance(self, caller: Caller, *, student_id: Any) -> dict:
        student_id = require_id(student_id, "Student ID")
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        self._visibility.for_caller(caller).ensure_can_view(student)

        records = self._attendance.list_records(RecordCriteria(student_ids=frozenset({student_id})))
        counts = count_statuses(records)
        return {
            "student": {
                "id": student.student_id,
                "name": student.full_name,
                "temp_roll_number": student.temp_roll_number,
                "brigade": student.brigade_name or constants.NO_BRIGADE,
            },
            "records": [r.to_dict() for r in records],
            "statistics": {
                "total_sessions": counts["total"],
                "present_sessions": counts["present"],
                "absent_sessions": counts["absent"],
                "late_sessions": counts["late"],
                "attendance_percentage": attendance_percentage(counts["present"], counts["total"]),
            },
        }
