from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Optional

from brigade_attendance.attendance.model import AttendanceRecord
from brigade_attendance.attendance.repository import RecordCriteria
from brigade_attendance.brigades.model import Brigade, Student
from brigade_attendance.container import Container, assemble
from brigade_attendance.core.exceptions import StoreError
from brigade_attendance.events.model import Event, EventDay, NewEventDay, SessionWindow

FN_WINDOW = SessionWindow(enabled=True, start=time(9, 0), end=time(9, 30))
AN_WINDOW = SessionWindow(enabled=True, start=time(14, 0), end=time(14, 30))

TODAY = date(2025, 3, 10)

ADMIN_USER = 1
ALPHA_LEAD_USER = 20
BRAVO_LEAD_USER = 21


def make_day(event_day_id: int, day_date: date, *, event_id: int = 1, fn=FN_WINDOW, an=AN_WINDOW, is_active=True) -> EventDay:
    return EventDay(event_day_id=event_day_id, event_id=event_id, day_date=day_date, fn=fn, an=an, is_active=is_active)


class InMemoryBrigades:
    def __init__(self, brigades: list[Brigade], *, active_leads: int = 0):
        self.brigades = {b.brigade_id: b for b in brigades}
        self.active_leads = active_leads

    def get_by_id(self, brigade_id: int) -> Optional[Brigade]:
        return self.brigades.get(brigade_id)

    def list_led_by(self, leader_id: int):
        return sorted((b for b in self.brigades.values() if b.leader_id == leader_id), key=lambda b: b.name)

    def list_active(self):
        return sorted((b for b in self.brigades.values() if b.is_active), key=lambda b: b.name)

    def count_active(self) -> int:
        return len(self.list_active())

    def count_active_leads(self) -> int:
        return self.active_leads


class InMemoryStudents:
    def __init__(self, students: list[Student]):
        self.students = {s.student_id: s for s in students}

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.students.get(student_id)

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        return next((s for s in self.students.values() if s.user_id == user_id), None)

    def get_active_by_ids(self, student_ids):
        return [self.students[i] for i in student_ids if i in self.students and self.students[i].is_active]

    def count_active(self, *, brigade_ids=None) -> int:
        return sum(
            1
            for s in self.students.values()
            if s.is_active and (brigade_ids is None or s.brigade_id in set(brigade_ids))
        )

    def count_active_by_brigade(self, brigade_ids) -> dict[int, int]:
        out: dict[int, int] = {}
        for s in self.students.values():
            if s.is_active and s.brigade_id in set(brigade_ids):
                out[s.brigade_id] = out.get(s.brigade_id, 0) + 1
        return out


class InMemoryEvents:
    def __init__(self, events: list[Event]):
        self.events = {e.event_id: e for e in events}
        self.record_counts: dict[int, int] = {}
        self._next_event = max(self.events, default=0) + 1
        self._next_day = max((d.event_day_id for e in events for d in e.days), default=0) + 1

    def _days(self):
        return [d for e in self.events.values() for d in e.days]

    def get_event(self, event_id: int) -> Optional[Event]:
        return self.events.get(event_id)

    def list_active_events(self):
        return sorted((e for e in self.events.values() if e.is_active), key=lambda e: e.start_date, reverse=True)

    def first_active_event(self) -> Optional[Event]:
        active = sorted((e for e in self.events.values() if e.is_active), key=lambda e: e.event_id)
        return active[0] if active else None

    def get_day(self, event_day_id: int) -> Optional[EventDay]:
        return next((d for d in self._days() if d.event_day_id == event_day_id), None)

    def find_active_days_on(self, day_date: date):
        return [
            (e, d)
            for e in sorted(self.events.values(), key=lambda e: e.event_id)
            if e.is_active
            for d in e.days
            if d.is_active and d.day_date == day_date
        ]

    def _new_day(self, event_id: int, day: NewEventDay) -> EventDay:
        out = EventDay(event_day_id=self._next_day, event_id=event_id, day_date=day.day_date, fn=day.fn, an=day.an)
        self._next_day += 1
        return out

    def create_event(self, *, name, description, start_date, end_date, days) -> int:
        event_id = self._next_event
        self._next_event += 1
        self.events[event_id] = Event(
            event_id=event_id,
            name=name,
            description=description,
            start_date=start_date,
            end_date=end_date,
            days=tuple(self._new_day(event_id, d) for d in days),
        )
        return event_id

    def add_day(self, *, event_id: int, day: NewEventDay) -> int:
        event = self.events[event_id]
        new = self._new_day(event_id, day)
        self.events[event_id] = replace(event, days=event.days + (new,))
        return new.event_day_id

    def update_day(self, *, event_day_id: int, day: EventDay) -> bool:
        event = self.events[day.event_id]
        self.events[day.event_id] = replace(
            event, days=tuple(day if d.event_day_id == event_day_id else d for d in event.days)
        )
        return True

    def list_days_with_counts(self, event_id: int):
        event = self.events.get(event_id)
        if not event:
            return []
        days = sorted((d for d in event.days if d.is_active), key=lambda d: d.day_date)
        return [(d, self.record_counts.get(d.event_day_id, 0)) for d in days]


class InMemoryAttendance:
    """Record store keyed by (student, day, session), like the unique key in MySQL."""

    def __init__(self, students: InMemoryStudents, brigades: InMemoryBrigades, events: InMemoryEvents):
        self._students = students
        self._brigades = brigades
        self._events = events
        self.rows: dict[tuple, AttendanceRecord] = {}
        self.fail_on_student: Optional[int] = None
        self._id = 0

    def _write(self, *, student_id, event_day_id, session, status, marked_by, marked_at) -> AttendanceRecord:
        if student_id == self.fail_on_student:
            raise StoreError("Database operation failed")
        key = (student_id, event_day_id, session)
        existing = self.rows.get(key)
        if existing:
            rec = replace(existing, status=status, marked_by=marked_by, marked_at=marked_at)
        else:
            self._id += 1
            rec = AttendanceRecord(
                attendance_id=self._id,
                student_id=student_id,
                event_day_id=event_day_id,
                session=session,
                status=status,
                marked_by=marked_by,
                marked_at=marked_at,
                created_at=marked_at,
            )
        self.rows[key] = rec
        return rec

    def _enrich(self, rec: AttendanceRecord) -> AttendanceRecord:
        student = self._students.get_by_id(rec.student_id)
        brigade = self._brigades.get_by_id(student.brigade_id) if student and student.brigade_id else None
        day = self._events.get_day(rec.event_day_id)
        event = self._events.get_event(day.event_id) if day else None
        return replace(
            rec,
            student_name=student.full_name if student else None,
            temp_roll_number=student.temp_roll_number if student else None,
            student_user_id=student.user_id if student else None,
            brigade_id=brigade.brigade_id if brigade else None,
            brigade_name=brigade.name if brigade else None,
            event_day_date=day.day_date if day else None,
            event_id=event.event_id if event else None,
            event_name=event.name if event else None,
        )

    def upsert(self, **kwargs) -> AttendanceRecord:
        return self._enrich(self._write(**kwargs))

    def bulk_upsert(self, *, student_ids, **kwargs):
        snapshot = dict(self.rows)
        try:
            written = [self._write(student_id=sid, **kwargs) for sid in student_ids]
        except StoreError:
            self.rows = snapshot
            raise
        return [self._enrich(r) for r in written]

    def _matches(self, rec: AttendanceRecord, c: RecordCriteria) -> bool:
        student = self._students.get_by_id(rec.student_id)
        if c.event_day_id is not None and rec.event_day_id != c.event_day_id:
            return False
        if c.session is not None and rec.session != c.session:
            return False
        if c.status is not None and rec.status != c.status:
            return False
        if c.brigade_ids is not None and student.brigade_id not in c.brigade_ids:
            return False
        if c.student_ids is not None and rec.student_id not in c.student_ids:
            return False
        if c.created_from is not None and rec.created_at < c.created_from:
            return False
        if c.created_to is not None and rec.created_at > c.created_to:
            return False
        if c.active_students_only and not student.is_active:
            return False
        return True

    def _select(self, criteria: RecordCriteria):
        return [self._enrich(r) for r in self.rows.values() if self._matches(r, criteria)]

    def query(self, criteria: RecordCriteria, *, offset: int, limit: int):
        items = sorted(self._select(criteria), key=lambda r: (r.marked_at, r.attendance_id), reverse=True)
        return items[offset : offset + limit], len(items)

    def list_records(self, criteria: RecordCriteria):
        return sorted(self._select(criteria), key=lambda r: (r.created_at, r.attendance_id), reverse=True)

    def count(self, criteria: RecordCriteria) -> int:
        return len(self._select(criteria))


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, dict]] = []

    def publish(self, channel, event, payload):
        self.sent.append((channel, event, payload))


class FailingNotifier:
    def publish(self, channel, event, payload):
        raise ConnectionError("redis down")


class GatedNotifier:
    """Blocks every publish until ``gate`` is set, like a stalled broker."""

    def __init__(self):
        self.gate = threading.Event()
        self.sent: list[tuple[str, str, dict]] = []

    def publish(self, channel, event, payload):
        if not self.gate.wait(timeout=5):
            raise TimeoutError("broker never answered")
        self.sent.append((channel, event, payload))


@dataclass
class World:
    brigades: InMemoryBrigades
    students: InMemoryStudents
    events: InMemoryEvents
    attendance: InMemoryAttendance
    notifier: RecordingNotifier
    container: Container


def build_world(today: date = TODAY, *, notifier=None) -> World:
    """Two brigades, four students, one event with days around ``today``.

    Days: 10 today, 11 yesterday, 12 tomorrow, 13 inactive, 14 today+3 with AN disabled.
    Students: 1 and 2 in Alpha, 3 in Bravo, 4 without brigade or login, 5 inactive in Alpha.
    """

    brigades = InMemoryBrigades(
        [
            Brigade(brigade_id=1, name="Alpha", leader_id=ALPHA_LEAD_USER),
            Brigade(brigade_id=2, name="Bravo", leader_id=BRAVO_LEAD_USER),
        ],
        active_leads=2,
    )
    students = InMemoryStudents(
        [
            Student(1, "Asha", "Rao", "T-001", 1, 31, brigade_name="Alpha"),
            Student(2, "Ben", "Kim", "T-002", 1, 32, brigade_name="Alpha"),
            Student(3, "Cara", "Diaz", "T-003", 2, 33, brigade_name="Bravo"),
            Student(4, "Dev", "Shah", "T-004", None, None),
            Student(5, "Eli", "Moss", "T-005", 1, 35, brigade_name="Alpha", is_active=False),
        ]
    )
    events = InMemoryEvents(
        [
            Event(
                event_id=1,
                name="Orientation",
                description="Induction week",
                start_date=today - timedelta(days=1),
                end_date=today + timedelta(days=3),
                days=(
                    make_day(10, today),
                    make_day(11, today - timedelta(days=1)),
                    make_day(12, today + timedelta(days=1)),
                    make_day(13, today + timedelta(days=2), is_active=False),
                    make_day(14, today + timedelta(days=3), an=replace(AN_WINDOW, enabled=False)),
                ),
            )
        ]
    )
    attendance = InMemoryAttendance(students, brigades, events)
    notifier = notifier if notifier is not None else RecordingNotifier()
    container = assemble(
        events_repo=events,
        brigades_repo=brigades,
        students_repo=students,
        attendance_repo=attendance,
        notifier=notifier,
    )
    return World(brigades, students, events, attendance, notifier, container)


def at(hour: int, minute: int, second: int = 0, day: date = TODAY) -> datetime:
    return datetime.combine(day, time(hour, minute, second))
