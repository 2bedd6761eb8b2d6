"""Employee provisioning, updates and deactivation.

Creating an employee spans two stores without a shared transaction: the
auth provider (principal) and the employee table. The principal is created
first; when the employee insert then fails, :func:`compensate_principal`
deletes it again so no orphaned login is left behind.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date
from typing import Any

from flask import current_app
from sqlalchemy import func, select

from alliance_hub import auth_provider
from alliance_hub.audit import log_audit
from alliance_hub.auth_provider import AuthProviderError
from alliance_hub.extensions import db
from alliance_hub.models import DEFAULT_USER_TYPE_ID, Employee, UserType
from alliance_hub.security import generate_password

UPDATABLE_FIELDS = ("first_name", "last_name", "email", "mobile_phone", "work_phone", "is_active")
REQUIRED_TEXT_FIELDS = ("first_name", "last_name", "email")


class ProvisioningError(Exception):
    def __init__(self, message: str, *, principal_id: uuid.UUID | None = None, compensated: bool = False):
        super().__init__(message)
        self.principal_id = principal_id
        self.compensated = compensated


class EmployeeNotFound(LookupError):
    pass


class InvalidEmployeeChange(ValueError):
    pass


@dataclass
class NewEmployee:
    email: str
    first_name: str
    last_name: str
    username: str | None = None
    user_type_id: int | None = None
    hire_date: date | None = None
    mobile_phone: str | None = None
    employee_number: str | None = None
    is_full_time: bool = True
    is_active: bool = True


@dataclass
class ProvisionedEmployee:
    employee: Employee
    password: str


@dataclass
class EmployeeUpdate:
    employee: Employee
    temporary_password: str | None = None


def next_employee_id() -> int:
    highest = db.session.execute(select(func.max(Employee.employee_id))).scalar_one_or_none()
    if highest is None:
        return int(current_app.config["EMPLOYEE_ID_FLOOR"])
    return highest + 1


def compensate_principal(principal_id: uuid.UUID) -> bool:
    """Delete a principal whose employee record could not be stored.

    Failures are logged and reported through the return value only.
    """
    try:
        auth_provider.delete_principal(principal_id)
    except AuthProviderError:
        current_app.logger.exception("Compensating delete of principal %s failed.", principal_id)
        return False
    current_app.logger.info("Deleted principal %s after failed employee insert.", principal_id)
    return True


def provision_employee(
    new_employee: NewEmployee,
    password: str | None = None,
    employee_id: int | None = None,
) -> ProvisionedEmployee:
    user_type_id = new_employee.user_type_id or DEFAULT_USER_TYPE_ID
    if db.session.get(UserType, user_type_id) is None:
        raise ProvisioningError(f"User type {user_type_id} does not exist.")

    for field_name in ("email", "first_name", "last_name"):
        if not isinstance(getattr(new_employee, field_name), str):
            raise ProvisioningError(f"{field_name} must be a string.")
    for field_name in ("username", "mobile_phone", "employee_number"):
        value = getattr(new_employee, field_name)
        if value is not None and not isinstance(value, str):
            raise ProvisioningError(f"{field_name} must be a string.")

    password = password or generate_password()
    email = new_employee.email.strip().lower()

    try:
        principal_id = auth_provider.create_principal(email, password)
    except AuthProviderError as exc:
        raise ProvisioningError(f"Failed to create auth user: {exc}") from exc

    try:
        resolved_id = employee_id if employee_id is not None else next_employee_id()
        employee = Employee(
            employee_id=resolved_id,
            auth_user_id=principal_id,
            user_type_id=user_type_id,
            username=(new_employee.username or email.split("@", 1)[0]).strip(),
            email=email,
            first_name=new_employee.first_name.strip(),
            last_name=new_employee.last_name.strip(),
            hire_date=new_employee.hire_date,
            mobile_phone=new_employee.mobile_phone or None,
            employee_number=new_employee.employee_number or f"EMP{resolved_id}",
            is_full_time=new_employee.is_full_time,
            is_active=new_employee.is_active,
        )
        db.session.add(employee)
        db.session.flush()
        log_audit(
            action="EMPLOYEE_CREATED",
            entity_type="employees",
            entity_id=employee.employee_id,
            payload={"email": employee.email, "user_type_id": employee.user_type_id},
        )
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        current_app.logger.warning("Employee insert failed for %s.", email, exc_info=True)
        compensated = compensate_principal(principal_id)
        raise ProvisioningError(
            f"Failed to create employee record: {exc}",
            principal_id=principal_id,
            compensated=compensated,
        ) from exc

    return ProvisionedEmployee(employee=employee, password=password)


def _get_employee(employee_id: int) -> Employee:
    employee = db.session.get(Employee, employee_id)
    if employee is None:
        raise EmployeeNotFound(f"Employee {employee_id} not found.")
    return employee


def _validate_changes(changes: dict[str, Any]) -> None:
    for field_name in UPDATABLE_FIELDS:
        if field_name not in changes:
            continue
        value = changes[field_name]
        if field_name == "is_active":
            if not isinstance(value, bool):
                raise InvalidEmployeeChange("is_active must be true or false.")
        elif field_name in REQUIRED_TEXT_FIELDS:
            if not isinstance(value, str) or not value.strip():
                raise InvalidEmployeeChange(f"{field_name} must be a non-empty string.")
        elif value is not None and not isinstance(value, str):
            raise InvalidEmployeeChange(f"{field_name} must be a string.")


def update_employee(employee_id: int, changes: dict[str, Any], reset_password: bool = False) -> EmployeeUpdate:
    employee = _get_employee(employee_id)
    _validate_changes(changes)
    previous_email = employee.email

    applied: dict[str, Any] = {}
    for field_name in UPDATABLE_FIELDS:
        if field_name not in changes:
            continue
        value = changes[field_name]
        if field_name == "email":
            value = value.strip().lower()
        elif field_name in REQUIRED_TEXT_FIELDS:
            value = value.strip()
        setattr(employee, field_name, value)
        applied[field_name] = value

    db.session.flush()
    log_audit(
        action="EMPLOYEE_UPDATED",
        entity_type="employees",
        entity_id=employee.employee_id,
        payload={"changes": applied, "password_reset": bool(reset_password)},
    )
    db.session.commit()

    if employee.auth_user_id is not None and employee.email != previous_email:
        try:
            auth_provider.update_principal_email(employee.auth_user_id, employee.email)
        except AuthProviderError:
            current_app.logger.warning(
                "Auth email sync failed for employee %s.", employee.employee_id, exc_info=True
            )

    temporary_password = None
    if reset_password and employee.auth_user_id is not None:
        temporary_password = generate_password()
        try:
            auth_provider.update_principal_password(employee.auth_user_id, temporary_password)
        except AuthProviderError as exc:
            raise ProvisioningError(f"Failed to reset password: {exc}") from exc

    return EmployeeUpdate(employee=employee, temporary_password=temporary_password)


def deactivate_employee(employee_id: int) -> Employee:
    employee = _get_employee(employee_id)
    employee.is_active = False
    db.session.flush()
    log_audit(action="EMPLOYEE_DEACTIVATED", entity_type="employees", entity_id=employee.employee_id)
    db.session.commit()

    if employee.auth_user_id is not None:
        try:
            auth_provider.disable_principal(employee.auth_user_id)
        except AuthProviderError:
            current_app.logger.warning(
                "Could not disable auth account for employee %s.", employee.employee_id, exc_info=True
            )
    return employee
