"""Role-based permission predicates and route guards.

Every predicate takes the acting employee explicitly and fails closed: a
missing employee, or one without a resolvable role, is never allowed.
"""

from __future__ import annotations

import functools
from typing import Callable

from flask import abort, flash, jsonify, redirect, url_for
from flask_login import logout_user
from sqlalchemy import select

from alliance_hub.auth_provider import principal_from_request
from alliance_hub.extensions import db, login_manager, wants_json_response
from alliance_hub.identity import CurrentEmployee, current_employee
from alliance_hub.models import Assignment, Location, UserTypeName

EDIT_ROLES = frozenset({UserTypeName.ADMIN.value, UserTypeName.HR.value})
MANAGE_EMPLOYEE_ROLES = frozenset({UserTypeName.ADMIN.value, UserTypeName.HR.value, UserTypeName.MANAGER.value})

LocationManagerLookup = Callable[[int], int | None]
SupervisionLookup = Callable[[int, int], bool]


def location_manager_id(location_id: int) -> int | None:
    return db.session.execute(
        select(Location.manager_employee_id).where(Location.location_id == location_id)
    ).scalar_one_or_none()


def supervises_currently(supervisor_id: int, employee_id: int) -> bool:
    stmt = select(Assignment.id).where(
        Assignment.supervisor_employee_id == supervisor_id,
        Assignment.employee_id == employee_id,
        Assignment.is_current.is_(True),
    )
    return db.session.execute(stmt.limit(1)).first() is not None


def _role(current: CurrentEmployee) -> str:
    return current.role or ""


def can_edit(current: CurrentEmployee | None) -> bool:
    if current is None:
        return False
    return _role(current) in EDIT_ROLES


def can_manage_employees(current: CurrentEmployee | None) -> bool:
    if current is None:
        return False
    return _role(current) in MANAGE_EMPLOYEE_ROLES


def can_manage_location(
    current: CurrentEmployee | None,
    location_id: int,
    manager_lookup: LocationManagerLookup = location_manager_id,
) -> bool:
    if current is None:
        return False
    if _role(current) in EDIT_ROLES:
        return True
    return manager_lookup(location_id) == current.employee_id


def can_view_employee(
    current: CurrentEmployee | None,
    target_employee_id: int,
    supervision_lookup: SupervisionLookup = supervises_currently,
) -> bool:
    if current is None:
        return False
    if _role(current) in EDIT_ROLES:
        return True
    if current.employee_id == target_employee_id:
        return True
    if _role(current) == UserTypeName.MANAGER.value:
        return supervision_lookup(current.employee_id, target_employee_id)
    return False


def is_admin(current: CurrentEmployee | None) -> bool:
    return current is not None and _role(current) == UserTypeName.ADMIN.value


def employee_required(view: Callable):
    """Require a signed-in principal that maps to an employee record."""

    @functools.wraps(view)
    def wrapped(*args, **kwargs):
        if principal_from_request() is None:
            return login_manager.unauthorized()
        if current_employee() is None:
            if wants_json_response():
                return jsonify({"error": "No employee profile is linked to this account."}), 403
            logout_user()
            flash("No employee profile is linked to this account.", "warning")
            return redirect(url_for("auth.login"))
        return view(*args, **kwargs)

    return wrapped


def permission_required(permission_name: str, check: Callable[[CurrentEmployee | None], bool]):
    def decorator(view: Callable):
        @functools.wraps(view)
        def wrapped(*args, **kwargs):
            if not check(current_employee()):
                abort(403, description=f"Insufficient permissions: {permission_name}.")
            return view(*args, **kwargs)

        return wrapped

    return decorator


edit_required = permission_required("edit", can_edit)
manage_employees_required = permission_required("manage_employees", can_manage_employees)
admin_required = permission_required("admin", is_admin)
