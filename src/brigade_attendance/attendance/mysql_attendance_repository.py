from __future__ import annotations

from datetime import datetime
from typing import Sequence

from ..common.validators import join_names
from ..core.enums import AttendanceStatus, Session
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord
from .repository import AttendanceRepository, RecordCriteria

_SELECT = """
    SELECT
        ar.id, ar.student_id, ar.event_day_id, ar.session, ar.status,
        ar.marked_by, ar.marked_at, ar.created_at,
        s.first_name, s.last_name, s.temp_roll_number, s.user_id AS student_user_id,
        s.brigade_id, b.name AS brigade_name,
        d.date AS event_day_date, e.id AS event_id, e.name AS event_name
    FROM attendance_records ar
    JOIN students s ON s.id = ar.student_id
    LEFT JOIN brigades b ON b.id = s.brigade_id
    JOIN event_days d ON d.id = ar.event_day_id
    JOIN events e ON e.id = d.event_id
"""

_FROM_FOR_COUNT = """
    FROM attendance_records ar
    JOIN students s ON s.id = ar.student_id
"""

_UPSERT = """
    INSERT INTO attendance_records(student_id, event_day_id, session, status, marked_by, marked_at, created_at)
    VALUES(%s,%s,%s,%s,%s,%s,%s)
    ON DUPLICATE KEY UPDATE status=VALUES(status), marked_by=VALUES(marked_by), marked_at=VALUES(marked_at)
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        student_id=int(r["student_id"]),
        event_day_id=int(r["event_day_id"]),
        session=Session(r["session"]),
        status=AttendanceStatus(r["status"]),
        marked_by=int(r["marked_by"]),
        marked_at=r["marked_at"],
        created_at=r["created_at"],
        student_name=join_names([r.get("first_name"), r.get("last_name")]),
        temp_roll_number=r.get("temp_roll_number"),
        student_user_id=int(r["student_user_id"]) if r.get("student_user_id") is not None else None,
        brigade_id=int(r["brigade_id"]) if r.get("brigade_id") is not None else None,
        brigade_name=r.get("brigade_name"),
        event_day_date=r.get("event_day_date"),
        event_id=int(r["event_id"]) if r.get("event_id") is not None else None,
        event_name=r.get("event_name"),
    )


def _where(criteria: RecordCriteria) -> tuple[str, tuple]:
    clauses: list[str] = []
    params: list[object] = []

    if criteria.event_day_id is not None:
        clauses.append("ar.event_day_id=%s")
        params.append(int(criteria.event_day_id))
    if criteria.session is not None:
        clauses.append("ar.session=%s")
        params.append(criteria.session.value)
    if criteria.status is not None:
        clauses.append("ar.status=%s")
        params.append(criteria.status.value)
    if criteria.brigade_ids is not None:
        ids = sorted(criteria.brigade_ids)
        clauses.append(in_clause("s.brigade_id", ids))
        params.extend(ids)
    if criteria.student_ids is not None:
        ids = sorted(criteria.student_ids)
        clauses.append(in_clause("ar.student_id", ids))
        params.extend(ids)
    if criteria.created_from is not None:
        clauses.append("ar.created_at >= %s")
        params.append(criteria.created_from)
    if criteria.created_to is not None:
        clauses.append("ar.created_at <= %s")
        params.append(criteria.created_to)
    if criteria.active_students_only:
        clauses.append("s.is_active=1")

    where = " AND ".join(clauses) if clauses else "1=1"
    return where, tuple(params)


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _select_keys(self, cur, *, student_ids: Sequence[int], event_day_id: int, session: Session) -> list[AttendanceRecord]:
        cur.execute(
            _SELECT
            + f"""
            WHERE ar.event_day_id=%s AND ar.session=%s AND {in_clause("ar.student_id", student_ids)}
            """,
            (int(event_day_id), session.value, *[int(i) for i in student_ids]),
        )
        by_student = {int(r["student_id"]): _row_to_record(r) for r in fetchall(cur)}
        return [by_student[int(i)] for i in student_ids if int(i) in by_student]

    def upsert(
        self,
        *,
        student_id: int,
        event_day_id: int,
        session: Session,
        status: AttendanceStatus,
        marked_by: int,
        marked_at: datetime,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _UPSERT,
                (int(student_id), int(event_day_id), session.value, status.value, int(marked_by), marked_at, marked_at),
            )
            return self._select_keys(cur, student_ids=[student_id], event_day_id=event_day_id, session=session)[0]

    def bulk_upsert(
        self,
        *,
        student_ids: Sequence[int],
        event_day_id: int,
        session: Session,
        status: AttendanceStatus,
        marked_by: int,
        marked_at: datetime,
    ) -> Sequence[AttendanceRecord]:
        if not student_ids:
            return []
        rows = [
            (int(sid), int(event_day_id), session.value, status.value, int(marked_by), marked_at, marked_at)
            for sid in student_ids
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(_UPSERT, rows)
            return self._select_keys(cur, student_ids=student_ids, event_day_id=event_day_id, session=session)

    def query(self, criteria: RecordCriteria, *, offset: int, limit: int) -> tuple[Sequence[AttendanceRecord], int]:
        if criteria.matches_nothing:
            return [], 0
        where, params = _where(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n {_FROM_FOR_COUNT} WHERE {where}", params)
            total = int(fetchone(cur)["n"])
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY ar.marked_at DESC, ar.id DESC LIMIT %s OFFSET %s",
                (*params, int(limit), int(offset)),
            )
            return [_row_to_record(r) for r in fetchall(cur)], total

    def list_records(self, criteria: RecordCriteria) -> Sequence[AttendanceRecord]:
        if criteria.matches_nothing:
            return []
        where, params = _where(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE {where} ORDER BY ar.created_at DESC, ar.id DESC", params)
            return [_row_to_record(r) for r in fetchall(cur)]

    def count(self, criteria: RecordCriteria) -> int:
        if criteria.matches_nothing:
            return 0
        where, params = _where(criteria)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n {_FROM_FOR_COUNT} WHERE {where}", params)
            return int(fetchone(cur)["n"])

