from __future__ import annotations

from sqlalchemy import select

from alliance_hub.extensions import db
from alliance_hub.identity import CurrentEmployee
from alliance_hub.models import Assignment, UserTypeName
from alliance_hub.permissions import (
    can_edit,
    can_manage_employees,
    can_manage_location,
    can_view_employee,
    is_admin,
)
from tests.conftest import MAIN_LOCATION_ID, SECOND_LOCATION_ID, STAFF


def _acting(role: str, employee_id: int = 1) -> CurrentEmployee:
    return CurrentEmployee(employee_id=employee_id, role=role)


def _never_called(*_args):
    raise AssertionError("lookup should not run")


def test_every_predicate_denies_missing_employee():
    assert can_edit(None) is False
    assert can_manage_employees(None) is False
    assert is_admin(None) is False
    assert can_manage_location(None, 1, manager_lookup=_never_called) is False
    assert can_view_employee(None, 1, supervision_lookup=_never_called) is False


def test_unknown_or_empty_role_is_denied():
    for role in ("", "CONTRACTOR"):
        acting = _acting(role)
        assert can_edit(acting) is False
        assert can_manage_employees(acting) is False
        assert can_view_employee(acting, 99, supervision_lookup=lambda *_: True) is False


def test_role_matrix_for_edit_and_manage():
    expected = {
        UserTypeName.ADMIN: (True, True),
        UserTypeName.HR: (True, True),
        UserTypeName.MANAGER: (False, True),
        UserTypeName.EMPLOYEE: (False, False),
        UserTypeName.EXECUTIVE: (False, False),
    }
    for role, (edit, manage) in expected.items():
        acting = _acting(role.value)
        assert can_edit(acting) is edit, role
        assert can_manage_employees(acting) is manage, role
        assert is_admin(acting) is (role == UserTypeName.ADMIN)


def test_edit_roles_manage_any_location_without_lookup():
    for role in (UserTypeName.ADMIN, UserTypeName.HR):
        assert can_manage_location(_acting(role.value), 42, manager_lookup=_never_called) is True


def test_location_manager_is_matched_by_employee_id():
    acting = _acting(UserTypeName.EMPLOYEE.value, employee_id=7)
    assert can_manage_location(acting, 42, manager_lookup=lambda _location_id: 7) is True
    assert can_manage_location(acting, 42, manager_lookup=lambda _location_id: 8) is False
    assert can_manage_location(acting, 42, manager_lookup=lambda _location_id: None) is False


def test_everyone_can_view_self():
    for role in UserTypeName:
        acting = _acting(role.value, employee_id=5)
        assert can_view_employee(acting, 5, supervision_lookup=lambda *_: False) is True


def test_only_managers_use_supervision():
    manager = _acting(UserTypeName.MANAGER.value, employee_id=5)
    assert can_view_employee(manager, 6, supervision_lookup=lambda *_: True) is True
    assert can_view_employee(manager, 6, supervision_lookup=lambda *_: False) is False

    employee = _acting(UserTypeName.EMPLOYEE.value, employee_id=5)
    assert can_view_employee(employee, 6, supervision_lookup=lambda *_: True) is False


def test_manager_view_follows_current_assignment_flag(app):
    manager = _acting(UserTypeName.MANAGER.value, employee_id=STAFF[UserTypeName.MANAGER])
    report_id = STAFF[UserTypeName.EMPLOYEE]

    with app.app_context():
        assert can_view_employee(manager, report_id) is True

        assignment = db.session.execute(
            select(Assignment).where(Assignment.employee_id == report_id)
        ).scalar_one()
        assignment.is_current = False
        db.session.commit()

        assert can_view_employee(manager, report_id) is False


def test_location_manager_lookup_reads_locations(app):
    manager = _acting(UserTypeName.MANAGER.value, employee_id=STAFF[UserTypeName.MANAGER])
    with app.app_context():
        assert can_manage_location(manager, MAIN_LOCATION_ID) is True
        assert can_manage_location(manager, SECOND_LOCATION_ID) is False
        assert can_manage_location(manager, 999) is False
