from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Brigade:
    brigade_id: int
    name: str
    leader_id: Optional[int]
    is_active: bool = True


@dataclass(frozen=True)
class Student:
    """Domain entity: a student, optionally assigned to a brigade and linked to a login."""

    student_id: int
    first_name: str
    last_name: str
    temp_roll_number: str
    brigade_id: Optional[int]
    user_id: Optional[int]
    email: Optional[str] = None
    phone: Optional[str] = None
    brigade_name: Optional[str] = None
    is_active: bool = True

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
