import pytest

from brigade_attendance.brigades.model import Brigade
from brigade_attendance.core.exceptions import AuthenticationError, AuthorizationError
from brigade_attendance.visibility.caller import AdminCaller, BrigadeLeadCaller, StudentCaller, caller_from
from brigade_attendance.visibility.policy import (
    AdminPolicy,
    BrigadeLeadPolicy,
    StudentPolicy,
    UNRESTRICTED,
    VisibilityFilter,
    VisibilityScope,
)

from fakes import ALPHA_LEAD_USER, build_world


@pytest.fixture
def visibility():
    world = build_world()
    return VisibilityFilter(world.brigades, world.students), world


def test_caller_from_builds_variant_per_role():
    assert caller_from("7", "admin") == AdminCaller(7)
    assert caller_from(8, "BRIGADE_LEAD") == BrigadeLeadCaller(8)
    assert caller_from(9, "STUDENT") == StudentCaller(9)


@pytest.mark.parametrize("user_id, role", [(None, "ADMIN"), (1, "JANITOR"), (0, "ADMIN"), ("x", "STUDENT")])
def test_caller_from_rejects_bad_identity(user_id, role):
    with pytest.raises(AuthenticationError):
        caller_from(user_id, role)


def test_policy_per_variant(visibility):
    vf, _ = visibility
    assert isinstance(vf.for_caller(AdminCaller(1)), AdminPolicy)
    assert isinstance(vf.for_caller(BrigadeLeadCaller(20)), BrigadeLeadPolicy)
    assert isinstance(vf.for_caller(StudentCaller(31)), StudentPolicy)


def test_admin_is_unrestricted_but_can_narrow(visibility):
    vf, _ = visibility
    policy = vf.for_caller(AdminCaller(1))
    assert policy.scope() == UNRESTRICTED
    assert policy.scope(2) == VisibilityScope(brigade_ids=frozenset({2}))


def test_lead_scope_is_led_brigades(visibility):
    vf, world = visibility
    policy = vf.for_caller(BrigadeLeadCaller(ALPHA_LEAD_USER))

    assert policy.scope() == VisibilityScope(brigade_ids=frozenset({1}))
    assert policy.scope().allows(world.students.get_by_id(1))
    assert not policy.scope().allows(world.students.get_by_id(3))
    assert not policy.scope().allows(world.students.get_by_id(4))
    with pytest.raises(AuthorizationError):
        policy.scope(2)


def test_lead_without_brigades_sees_nothing(visibility):
    vf, _ = visibility
    scope = vf.for_caller(BrigadeLeadCaller(99)).scope()
    assert scope.is_empty


def test_lead_brigade_view_check(visibility):
    vf, _ = visibility
    policy = vf.for_caller(BrigadeLeadCaller(ALPHA_LEAD_USER))
    policy.ensure_can_view_brigade(Brigade(1, "Alpha", ALPHA_LEAD_USER))
    with pytest.raises(AuthorizationError):
        policy.ensure_can_view_brigade(Brigade(2, "Bravo", 21))


def test_student_scope_is_own_record_only(visibility):
    vf, world = visibility
    policy = vf.for_caller(StudentCaller(31))

    assert policy.scope() == VisibilityScope(student_ids=frozenset({1}))
    # A brigade filter never widens a student's scope.
    assert policy.scope(2) == VisibilityScope(student_ids=frozenset({1}))
    policy.ensure_can_view(world.students.get_by_id(1))
    with pytest.raises(AuthorizationError):
        policy.ensure_can_view(world.students.get_by_id(2))


def test_unlinked_student_sees_nothing(visibility):
    vf, _ = visibility
    assert vf.for_caller(StudentCaller(999)).scope().is_empty


def test_only_admin_and_lead_may_mark(visibility):
    vf, world = visibility
    student = world.students.get_by_id(1)

    vf.for_caller(AdminCaller(1)).ensure_can_mark(student)
    vf.for_caller(BrigadeLeadCaller(ALPHA_LEAD_USER)).ensure_can_mark(student)
    with pytest.raises(AuthorizationError):
        vf.for_caller(StudentCaller(31)).ensure_can_mark(student)
