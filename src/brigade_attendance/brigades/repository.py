from __future__ import annotations

from typing import Collection, Optional, Protocol, Sequence

from .model import Brigade, Student


class BrigadeRepository(Protocol):
    def get_by_id(self, brigade_id: int) -> Optional[Brigade]:
        raise NotImplementedError

    def list_led_by(self, leader_id: int) -> Sequence[Brigade]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Brigade]:
        raise NotImplementedError

    def count_active(self) -> int:
        raise NotImplementedError

    def count_active_leads(self) -> int:
        """Active users holding the brigade-lead role."""

        raise NotImplementedError


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_active_by_ids(self, student_ids: Collection[int]) -> Sequence[Student]:
        raise NotImplementedError

    def count_active(self, *, brigade_ids: Optional[Collection[int]] = None) -> int:
        """Active students, optionally restricted to a set of brigades."""

        raise NotImplementedError

    def count_active_by_brigade(self, brigade_ids: Collection[int]) -> dict[int, int]:
        raise NotImplementedError
