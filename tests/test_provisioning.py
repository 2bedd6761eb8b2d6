from __future__ import annotations

import logging

import pytest
from sqlalchemy import delete, select

from alliance_hub import auth_provider, provisioning
from alliance_hub.auth_provider import AuthProviderError
from alliance_hub.extensions import db
from alliance_hub.models import Assignment, AuditLog, Employee, Principal, UserTypeName
from alliance_hub.provisioning import (
    EmployeeNotFound,
    InvalidEmployeeChange,
    NewEmployee,
    ProvisioningError,
    deactivate_employee,
    next_employee_id,
    provision_employee,
    update_employee,
)
from alliance_hub.security import PASSWORD_ALPHABET, verify_secret
from tests.conftest import STAFF


def _principal_by_email(email: str) -> Principal | None:
    return db.session.execute(select(Principal).where(Principal.email == email)).scalar_one_or_none()


def _new(email: str = "new.hire@example.com", **overrides) -> NewEmployee:
    values = {"email": email, "first_name": "New", "last_name": "Hire"}
    values.update(overrides)
    return NewEmployee(**values)


def test_provision_creates_linked_principal_and_employee(app):
    with app.app_context():
        result = provision_employee(_new("  New.Hire@Example.com "))

        assert len(result.password) == 16
        assert set(result.password) <= set(PASSWORD_ALPHABET)

        employee = db.session.get(Employee, max(STAFF.values()) + 1)
        assert employee is not None
        assert employee.email == "new.hire@example.com"
        assert employee.username == "new.hire"
        assert employee.employee_number == f"EMP{employee.employee_id}"
        assert employee.user_type_id == 3
        assert employee.is_active is True

        principal = _principal_by_email("new.hire@example.com")
        assert principal is not None
        assert employee.auth_user_id == principal.id
        assert verify_secret(principal.password_hash, result.password) is True

        audit = db.session.execute(select(AuditLog).where(AuditLog.action == "EMPLOYEE_CREATED")).scalar_one()
        assert audit.entity_id == str(employee.employee_id)


def test_explicit_password_is_kept(app):
    with app.app_context():
        result = provision_employee(_new(), password="Chosen-Pass-1")
        assert result.password == "Chosen-Pass-1"


def test_next_employee_id_starts_at_floor(app):
    with app.app_context():
        db.session.execute(delete(Assignment))
        db.session.execute(delete(Employee))
        db.session.commit()

        assert next_employee_id() == 2000
        assert provision_employee(_new()).employee.employee_id == 2000
        assert next_employee_id() == 2001


def test_failed_employee_insert_deletes_principal(app):
    with app.app_context():
        with pytest.raises(ProvisioningError) as exc_info:
            provision_employee(_new(), employee_id=STAFF[UserTypeName.ADMIN])

        assert str(exc_info.value).startswith("Failed to create employee record")
        assert exc_info.value.compensated is True
        assert _principal_by_email("new.hire@example.com") is None
        assert db.session.get(Employee, STAFF[UserTypeName.ADMIN]).email == "admin@example.com"


def test_failed_compensation_is_logged_and_reported(app, monkeypatch, caplog):
    def _refuse(_principal_id):
        raise AuthProviderError("provider unavailable")

    monkeypatch.setattr(auth_provider, "delete_principal", _refuse)

    with app.app_context():
        with caplog.at_level(logging.ERROR):
            with pytest.raises(ProvisioningError) as exc_info:
                provision_employee(_new(), employee_id=STAFF[UserTypeName.ADMIN])

        assert exc_info.value.compensated is False
        assert exc_info.value.principal_id is not None
        assert _principal_by_email("new.hire@example.com") is not None
        assert "Compensating delete of principal" in caplog.text


def test_failure_after_principal_creation_always_compensates(app, monkeypatch):
    def _broken_allocator():
        raise RuntimeError("id allocator unavailable")

    monkeypatch.setattr(provisioning, "next_employee_id", _broken_allocator)

    with app.app_context():
        with pytest.raises(ProvisioningError) as exc_info:
            provision_employee(_new())

        assert "id allocator unavailable" in str(exc_info.value)
        assert exc_info.value.principal_id is not None
        assert exc_info.value.compensated is True
        assert _principal_by_email("new.hire@example.com") is None


def test_non_text_fields_are_rejected_before_principal_creation(app):
    with app.app_context():
        for overrides in ({"username": 123}, {"employee_number": 7}, {"first_name": None}):
            with pytest.raises(ProvisioningError) as exc_info:
                provision_employee(_new(**overrides))
            assert exc_info.value.principal_id is None
            assert _principal_by_email("new.hire@example.com") is None


def test_duplicate_login_email_creates_nothing(app):
    with app.app_context():
        before = db.session.execute(select(Employee.employee_id)).scalars().all()

        with pytest.raises(ProvisioningError) as exc_info:
            provision_employee(_new("admin@example.com"))

        assert str(exc_info.value).startswith("Failed to create auth user")
        assert db.session.execute(select(Employee.employee_id)).scalars().all() == before


def test_unknown_user_type_is_rejected_before_principal_creation(app):
    with app.app_context():
        with pytest.raises(ProvisioningError):
            provision_employee(_new(user_type_id=42))
        assert _principal_by_email("new.hire@example.com") is None


def test_update_syncs_email_and_resets_password(app):
    employee_id = STAFF[UserTypeName.EMPLOYEE]
    with app.app_context():
        result = update_employee(
            employee_id,
            {"email": "Renamed@Example.com", "first_name": "Renamed", "username": "ignored"},
            reset_password=True,
        )

        employee = db.session.get(Employee, employee_id)
        assert employee.email == "renamed@example.com"
        assert employee.first_name == "Renamed"
        assert employee.username == "employee"

        principal = db.session.get(Principal, employee.auth_user_id)
        assert principal.email == "renamed@example.com"
        assert result.temporary_password
        assert verify_secret(principal.password_hash, result.temporary_password) is True


def test_update_without_reset_returns_no_password(app):
    with app.app_context():
        result = update_employee(STAFF[UserTypeName.HR], {"mobile_phone": "555-0100"})
        assert result.temporary_password is None
        assert db.session.get(Employee, STAFF[UserTypeName.HR]).mobile_phone == "555-0100"


def test_update_unknown_employee_raises(app):
    with app.app_context():
        with pytest.raises(EmployeeNotFound):
            update_employee(9999, {"first_name": "Nobody"})


def test_update_rejects_malformed_changes(app):
    employee_id = STAFF[UserTypeName.EMPLOYEE]
    with app.app_context():
        for changes in ({"email": 5}, {"email": "   "}, {"first_name": ""}, {"is_active": "yes"}, {"work_phone": 12}):
            with pytest.raises(InvalidEmployeeChange):
                update_employee(employee_id, changes)

        employee = db.session.get(Employee, employee_id)
        assert employee.email == "employee@example.com"
        assert employee.is_active is True


def test_deactivate_is_a_soft_delete(app):
    employee_id = STAFF[UserTypeName.EMPLOYEE]
    with app.app_context():
        deactivate_employee(employee_id)

        employee = db.session.get(Employee, employee_id)
        assert employee is not None
        assert employee.is_active is False
        assert db.session.get(Principal, employee.auth_user_id).is_active is False


def test_deactivate_tolerates_auth_failure(app, monkeypatch):
    def _refuse(_principal_id):
        raise AuthProviderError("provider unavailable")

    monkeypatch.setattr(auth_provider, "disable_principal", _refuse)
    with app.app_context():
        employee = deactivate_employee(STAFF[UserTypeName.HR])
        assert employee.is_active is False
