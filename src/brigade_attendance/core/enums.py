from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Caller roles used for visibility and authorization."""

    ADMIN = "ADMIN"
    BRIGADE_LEAD = "BRIGADE_LEAD"
    STUDENT = "STUDENT"


class Session(str, Enum):
    """The two daily attendance windows."""

    FN = "FN"
    AN = "AN"

    @property
    def label(self) -> str:
        return "Forenoon" if self is Session.FN else "Afternoon"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"


class SessionState(str, Enum):
    """Display state of a session window, derived per query and never stored."""

    INACTIVE = "inactive"
    UPCOMING = "upcoming"
    ACTIVE = "active"
    ENDED = "ended"
