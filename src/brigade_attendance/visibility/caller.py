from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Union

from ..core.enums import Role
from ..core.exceptions import AuthenticationError


@dataclass(frozen=True)
class AdminCaller:
    user_id: int
    role: ClassVar[Role] = Role.ADMIN


@dataclass(frozen=True)
class BrigadeLeadCaller:
    user_id: int
    role: ClassVar[Role] = Role.BRIGADE_LEAD


@dataclass(frozen=True)
class StudentCaller:
    user_id: int
    role: ClassVar[Role] = Role.STUDENT


Caller = Union[AdminCaller, BrigadeLeadCaller, StudentCaller]

_BY_ROLE = {
    Role.ADMIN: AdminCaller,
    Role.BRIGADE_LEAD: BrigadeLeadCaller,
    Role.STUDENT: StudentCaller,
}


def caller_from(user_id: Any, role: Any) -> Caller:
    """Build the caller variant from an authenticated identity (user id + role name)."""

    try:
        uid = int(user_id)
        r = Role(str(role).upper())
    except (TypeError, ValueError):
        raise AuthenticationError("Authentication required")
    if uid <= 0:
        raise AuthenticationError("Authentication required")
    return _BY_ROLE[r](uid)
