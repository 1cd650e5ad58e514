from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause, normalize_mysql_time
from .model import Event, EventDay, NewEventDay, SessionWindow
from .repository import EventRepository

_DAY_COLUMNS = """
    d.id AS event_day_id, d.event_id, d.date AS day_date,
    d.fn_enabled, d.fn_start_time, d.fn_end_time,
    d.an_enabled, d.an_start_time, d.an_end_time,
    d.is_active AS day_active
"""

_EVENT_COLUMNS = "e.id AS event_id, e.name, e.description, e.start_date, e.end_date, e.is_active"


def _row_to_day(r: dict) -> EventDay:
    return EventDay(
        event_day_id=int(r["event_day_id"]),
        event_id=int(r["event_id"]),
        day_date=r["day_date"],
        fn=SessionWindow(
            enabled=bool(r["fn_enabled"]),
            start=normalize_mysql_time(r["fn_start_time"]),
            end=normalize_mysql_time(r["fn_end_time"]),
        ),
        an=SessionWindow(
            enabled=bool(r["an_enabled"]),
            start=normalize_mysql_time(r["an_start_time"]),
            end=normalize_mysql_time(r["an_end_time"]),
        ),
        is_active=bool(r["day_active"]),
    )


def _row_to_event(r: dict, days: Sequence[EventDay] = ()) -> Event:
    return Event(
        event_id=int(r["event_id"]),
        name=r["name"],
        description=r.get("description"),
        start_date=r["start_date"],
        end_date=r["end_date"],
        is_active=bool(r["is_active"]),
        days=tuple(days),
    )


def _day_params(event_id: int, day: NewEventDay) -> tuple:
    return (
        int(event_id),
        day.day_date,
        int(day.fn.enabled),
        day.fn.start,
        day.fn.end,
        int(day.an.enabled),
        day.an.start,
        day.an.end,
    )


_INSERT_DAY = """
    INSERT INTO event_days(event_id, date, fn_enabled, fn_start_time, fn_end_time,
                           an_enabled, an_start_time, an_end_time)
    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
"""


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _load_days(self, cur, event_ids: Sequence[int]) -> dict[int, list[EventDay]]:
        if not event_ids:
            return {}
        cur.execute(
            f"""
            SELECT {_DAY_COLUMNS}
            FROM event_days d
            WHERE {in_clause("d.event_id", event_ids)}
            ORDER BY d.date ASC
            """,
            tuple(event_ids),
        )
        out: dict[int, list[EventDay]] = {}
        for r in fetchall(cur):
            day = _row_to_day(r)
            out.setdefault(day.event_id, []).append(day)
        return out

    def get_event(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EVENT_COLUMNS} FROM events e WHERE e.id=%s", (int(event_id),))
            r = fetchone(cur)
            if not r:
                return None
            days = self._load_days(cur, [int(event_id)])
            return _row_to_event(r, days.get(int(event_id), []))

    def list_active_events(self) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EVENT_COLUMNS} FROM events e WHERE e.is_active=1 ORDER BY e.start_date DESC")
            rows = fetchall(cur)
            days = self._load_days(cur, [int(r["event_id"]) for r in rows])
            return [_row_to_event(r, days.get(int(r["event_id"]), [])) for r in rows]

    def first_active_event(self) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_EVENT_COLUMNS} FROM events e WHERE e.is_active=1 ORDER BY e.id ASC LIMIT 1")
            r = fetchone(cur)
            if not r:
                return None
            days = self._load_days(cur, [int(r["event_id"])])
            return _row_to_event(r, days.get(int(r["event_id"]), []))

    def get_day(self, event_day_id: int) -> Optional[EventDay]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_DAY_COLUMNS} FROM event_days d WHERE d.id=%s", (int(event_day_id),))
            r = fetchone(cur)
            return _row_to_day(r) if r else None

    def find_active_days_on(self, day_date: date) -> Sequence[tuple[Event, EventDay]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_EVENT_COLUMNS}, {_DAY_COLUMNS}
                FROM event_days d
                JOIN events e ON e.id = d.event_id
                WHERE d.date=%s AND d.is_active=1 AND e.is_active=1
                ORDER BY e.id ASC, d.id ASC
                """,
                (day_date,),
            )
            return [(_row_to_event(r), _row_to_day(r)) for r in fetchall(cur)]

    def create_event(
        self,
        *,
        name: str,
        description: Optional[str],
        start_date: date,
        end_date: date,
        days: Sequence[NewEventDay],
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO events(name, description, start_date, end_date) VALUES(%s,%s,%s,%s)",
                (name, description, start_date, end_date),
            )
            event_id = int(cur.lastrowid)
            if days:
                cur.executemany(_INSERT_DAY, [_day_params(event_id, d) for d in days])
            return event_id

    def add_day(self, *, event_id: int, day: NewEventDay) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_INSERT_DAY, _day_params(event_id, day))
            return int(cur.lastrowid)

    def update_day(self, *, event_day_id: int, day: EventDay) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE event_days
                SET fn_enabled=%s, fn_start_time=%s, fn_end_time=%s,
                    an_enabled=%s, an_start_time=%s, an_end_time=%s,
                    is_active=%s
                WHERE id=%s
                """,
                (
                    int(day.fn.enabled),
                    day.fn.start,
                    day.fn.end,
                    int(day.an.enabled),
                    day.an.start,
                    day.an.end,
                    int(day.is_active),
                    int(event_day_id),
                ),
            )
            # MySQL reports 0 affected rows when nothing changed; existence was checked by the caller.
            return cur.rowcount >= 0

    def list_days_with_counts(self, event_id: int) -> Sequence[tuple[EventDay, int]]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_DAY_COLUMNS}, COUNT(ar.id) AS record_count
                FROM event_days d
                LEFT JOIN attendance_records ar ON ar.event_day_id = d.id
                WHERE d.event_id=%s AND d.is_active=1
                GROUP BY d.id
                ORDER BY d.date ASC
                """,
                (int(event_id),),
            )
            return [(_row_to_day(r), int(r["record_count"] or 0)) for r in fetchall(cur)]
