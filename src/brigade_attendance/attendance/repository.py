from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, Session
from ..visibility.policy import VisibilityScope
from .model import AttendanceRecord


@dataclass(frozen=True)
class RecordCriteria:
    """Filter over attendance records.

    For ``brigade_ids``/``student_ids``: ``None`` means no restriction, an empty
    set matches nothing.
    """

    event_day_id: Optional[int] = None
    session: Optional[Session] = None
    status: Optional[AttendanceStatus] = None
    brigade_ids: Optional[frozenset[int]] = None
    student_ids: Optional[frozenset[int]] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    active_students_only: bool = False

    @classmethod
    def within(cls, scope: VisibilityScope, **kwargs) -> "RecordCriteria":
        return cls(brigade_ids=scope.brigade_ids, student_ids=scope.student_ids, **kwargs)

    @property
    def matches_nothing(self) -> bool:
        return self.brigade_ids == frozenset() or self.student_ids == frozenset()


class AttendanceRepository(Protocol):
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
        """Create or overwrite the record for (student, day, session) in one atomic statement.

        created_at is set on first insert only.
        """

        raise NotImplementedError

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
        """Upsert every key in one transaction: all rows are written or none are."""

        raise NotImplementedError

    def query(self, criteria: RecordCriteria, *, offset: int, limit: int) -> tuple[Sequence[AttendanceRecord], int]:
        """Page of matching records, newest mark first, plus the total match count."""

        raise NotImplementedError

    def list_records(self, criteria: RecordCriteria) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def count(self, criteria: RecordCriteria) -> int:
        raise NotImplementedError
