from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, Session


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one student's mark for one (day, session).

    The context fields (student, brigade, event) are denormalized for display
    and are filled in by the store on reads.
    """

    attendance_id: int
    student_id: int
    event_day_id: int
    session: Session
    status: AttendanceStatus
    marked_by: int
    marked_at: datetime
    created_at: datetime

    student_name: Optional[str] = None
    temp_roll_number: Optional[str] = None
    student_user_id: Optional[int] = None
    brigade_id: Optional[int] = None
    brigade_name: Optional[str] = None
    event_day_date: Optional[date] = None
    event_id: Optional[int] = None
    event_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "student_id": self.student_id,
            "event_day_id": self.event_day_id,
            "session": self.session.value,
            "status": self.status.value,
            "marked_by": self.marked_by,
            "marked_at": self.marked_at.isoformat(),
            "created_at": self.created_at.isoformat(),
            "student": {
                "id": self.student_id,
                "name": self.student_name,
                "temp_roll_number": self.temp_roll_number,
                "brigade": {"id": self.brigade_id, "name": self.brigade_name} if self.brigade_id else None,
            },
            "event_day": {
                "id": self.event_day_id,
                "date": self.event_day_date.isoformat() if self.event_day_date else None,
                "event": {"id": self.event_id, "name": self.event_name} if self.event_id else None,
            },
        }
