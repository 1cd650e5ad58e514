from __future__ import annotations

from typing import Collection, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Student
from .repository import StudentRepository

_SELECT = """
    SELECT s.id, s.first_name, s.last_name, s.temp_roll_number, s.email, s.phone,
           s.brigade_id, s.user_id, s.is_active, b.name AS brigade_name
    FROM students s
    LEFT JOIN brigades b ON b.id = s.brigade_id
"""


def _row_to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["id"]),
        first_name=r["first_name"],
        last_name=r["last_name"],
        temp_roll_number=r["temp_roll_number"],
        brigade_id=int(r["brigade_id"]) if r.get("brigade_id") is not None else None,
        user_id=int(r["user_id"]) if r.get("user_id") is not None else None,
        email=r.get("email"),
        phone=r.get("phone"),
        brigade_name=r.get("brigade_name"),
        is_active=bool(r["is_active"]),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.id=%s", (int(student_id),))
            r = fetchone(cur)
            return _row_to_student(r) if r else None

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE s.user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return _row_to_student(r) if r else None

    def get_active_by_ids(self, student_ids: Collection[int]) -> Sequence[Student]:
        ids = [int(i) for i in student_ids]
        if not ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + f" WHERE s.is_active=1 AND {in_clause('s.id', ids)}", tuple(ids))
            return [_row_to_student(r) for r in fetchall(cur)]

    def count_active(self, *, brigade_ids: Optional[Collection[int]] = None) -> int:
        clauses = ["is_active=1"]
        params: list[object] = []
        if brigade_ids is not None:
            ids = [int(i) for i in brigade_ids]
            if not ids:
                return 0
            clauses.append(in_clause("brigade_id", ids))
            params.extend(ids)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS n FROM students WHERE {' AND '.join(clauses)}", tuple(params))
            return int(fetchone(cur)["n"])

    def count_active_by_brigade(self, brigade_ids: Collection[int]) -> dict[int, int]:
        ids = [int(i) for i in brigade_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT brigade_id, COUNT(*) AS n
                FROM students
                WHERE is_active=1 AND {in_clause('brigade_id', ids)}
                GROUP BY brigade_id
                """,
                tuple(ids),
            )
            counts = {int(r["brigade_id"]): int(r["n"]) for r in fetchall(cur)}
            return {i: counts.get(i, 0) for i in ids}
