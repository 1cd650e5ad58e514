"""Role-scoped visibility: which students and brigades a caller may see or mark.

One policy per caller variant; every read and write entry point asks the
caller's policy before touching the record store.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from ..brigades.model import Brigade, Student
from ..brigades.repository import BrigadeRepository, StudentRepository
from ..core.exceptions import AuthorizationError
from .caller import AdminCaller, BrigadeLeadCaller, Caller, StudentCaller


@dataclass(frozen=True)
class VisibilityScope:
    """``None`` means unrestricted on that axis; an empty set means nothing is visible."""

    brigade_ids: Optional[frozenset[int]] = None
    student_ids: Optional[frozenset[int]] = None

    @property
    def is_empty(self) -> bool:
        return self.brigade_ids == frozenset() or self.student_ids == frozenset()

    def allows(self, student: Student) -> bool:
        if self.brigade_ids is not None and student.brigade_id not in self.brigade_ids:
            return False
        if self.student_ids is not None and student.student_id not in self.student_ids:
            return False
        return True


UNRESTRICTED = VisibilityScope()


class VisibilityPolicy(ABC):
    can_mark: bool = False

    def __init__(self, caller: Caller):
        self.caller = caller

    @abstractmethod
    def scope(self, brigade_id: Optional[int] = None) -> VisibilityScope:
        """Scope for reads, optionally narrowed to one brigade."""

        raise NotImplementedError

    @abstractmethod
    def ensure_can_view_brigade(self, brigade: Brigade) -> None:
        raise NotImplementedError

    def ensure_can_view(self, student: Student) -> None:
        if not self.scope().allows(student):
            raise AuthorizationError("Access denied to this student")

    def ensure_marker(self) -> None:
        if not self.can_mark:
            raise AuthorizationError("Admin or brigade lead access required")

    def ensure_can_mark(self, student: Student) -> None:
        self.ensure_marker()
        if not self.scope().allows(student):
            raise AuthorizationError("Access denied to this student")

    def ensure_can_mark_all(self, students: Iterable[Student]) -> None:
        self.ensure_marker()
        scope = self.scope()
        if any(not scope.allows(s) for s in students):
            raise AuthorizationError("Access denied to some students")


class AdminPolicy(VisibilityPolicy):
    can_mark = True

    def scope(self, brigade_id: Optional[int] = None) -> VisibilityScope:
        if brigade_id is None:
            return UNRESTRICTED
        return VisibilityScope(brigade_ids=frozenset({int(brigade_id)}))

    def ensure_can_view_brigade(self, brigade: Brigade) -> None:
        return None


class BrigadeLeadPolicy(VisibilityPolicy):
    can_mark = True

    def __init__(self, caller: BrigadeLeadCaller, brigades: BrigadeRepository):
        super().__init__(caller)
        self._brigades = brigades
        self._led: Optional[frozenset[int]] = None

    @property
    def led_brigade_ids(self) -> frozenset[int]:
        if self._led is None:
            self._led = frozenset(b.brigade_id for b in self._brigades.list_led_by(self.caller.user_id))
        return self._led

    def scope(self, brigade_id: Optional[int] = None) -> VisibilityScope:
        if brigade_id is None:
            return VisibilityScope(brigade_ids=self.led_brigade_ids)
        if int(brigade_id) not in self.led_brigade_ids:
            raise AuthorizationError("Access denied to this brigade")
        return VisibilityScope(brigade_ids=frozenset({int(brigade_id)}))

    def ensure_can_view_brigade(self, brigade: Brigade) -> None:
        if brigade.leader_id != self.caller.user_id:
            raise AuthorizationError("Access denied")


class StudentPolicy(VisibilityPolicy):
    can_mark = False

    def __init__(self, caller: StudentCaller, students: StudentRepository):
        super().__init__(caller)
        self._students = students
        self._own: Optional[Student] = None
        self._loaded = False

    @property
    def own_student(self) -> Optional[Student]:
        if not self._loaded:
            self._own = self._students.get_by_user_id(self.caller.user_id)
            self._loaded = True
        return self._own

    def scope(self, brigade_id: Optional[int] = None) -> VisibilityScope:
        # A student only ever sees their own records; a brigade filter cannot widen that.
        own = self.own_student
        return VisibilityScope(student_ids=frozenset({own.student_id}) if own else frozenset())

    def ensure_can_view_brigade(self, brigade: Brigade) -> None:
        raise AuthorizationError("Admin or brigade lead access required")


def policy_for(caller: Caller, *, brigades: BrigadeRepository, students: StudentRepository) -> VisibilityPolicy:
    if isinstance(caller, AdminCaller):
        return AdminPolicy(caller)
    if isinstance(caller, BrigadeLeadCaller):
        return BrigadeLeadPolicy(caller, brigades)
    if isinstance(caller, StudentCaller):
        return StudentPolicy(caller, students)
    raise TypeError(f"Unsupported caller: {caller!r}")


class VisibilityFilter:
    """Per-request policy factory handed to services."""

    def __init__(self, brigades: BrigadeRepository, students: StudentRepository):
        self._brigades = brigades
        self._students = students

    def for_caller(self, caller: Caller) -> VisibilityPolicy:
        return policy_for(caller, brigades=self._brigades, students=self._students)
