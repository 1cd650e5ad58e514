from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Brigade
from .repository import BrigadeRepository


def _row_to_brigade(r: dict) -> Brigade:
    return Brigade(
        brigade_id=int(r["id"]),
        name=r["name"],
        leader_id=int(r["leader_id"]) if r.get("leader_id") is not None else None,
        is_active=bool(r["is_active"]),
    )


class MySQLBrigadeRepository(BrigadeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, brigade_id: int) -> Optional[Brigade]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, leader_id, is_active FROM brigades WHERE id=%s", (int(brigade_id),))
            r = fetchone(cur)
            return _row_to_brigade(r) if r else None

    def list_led_by(self, leader_id: int) -> Sequence[Brigade]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id, name, leader_id, is_active FROM brigades WHERE leader_id=%s ORDER BY name ASC",
                (int(leader_id),),
            )
            return [_row_to_brigade(r) for r in fetchall(cur)]

    def list_active(self) -> Sequence[Brigade]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT id, name, leader_id, is_active FROM brigades WHERE is_active=1 ORDER BY name ASC")
            return [_row_to_brigade(r) for r in fetchall(cur)]

    def count_active(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM brigades WHERE is_active=1")
            return int(fetchone(cur)["n"])

    def count_active_leads(self) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM users WHERE role='BRIGADE_LEAD' AND is_active=1")
            return int(fetchone(cur)["n"])
