"""Map the signed-in principal to its employee record."""

from __future__ import annotations

from dataclasses import dataclass, field

from flask import g
from sqlalchemy import select
from sqlalchemy.orm import joinedload

from alliance_hub.auth_provider import principal_from_request
from alliance_hub.extensions import db
from alliance_hub.models import Assignment, Employee, Principal

_UNRESOLVED = object()


@dataclass
class CurrentEmployee:
    """Request-scoped view of the acting employee."""

    employee_id: int
    role: str
    employee: Employee | None = None
    current_assignments: list[Assignment] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        if self.employee is None:
            return ""
        return self.employee.full_name


def role_name(employee: Employee | None) -> str:
    if employee is None or employee.user_type is None:
        return ""
    return employee.user_type.name or ""


def current_assignments_for(employee_id: int) -> list[Assignment]:
    stmt = (
        select(Assignment)
        .options(joinedload(Assignment.location), joinedload(Assignment.job_title))
        .where(Assignment.employee_id == employee_id, Assignment.is_current.is_(True))
        .order_by(Assignment.is_primary.desc(), Assignment.start_date.desc())
    )
    return list(db.session.execute(stmt).scalars().all())


def resolve_current_employee(principal: Principal | None) -> CurrentEmployee | None:
    if principal is None:
        return None

    employee = db.session.execute(
        select(Employee).options(joinedload(Employee.user_type)).where(Employee.auth_user_id == principal.id)
    ).scalar_one_or_none()
    if employee is None:
        return None

    return CurrentEmployee(
        employee_id=employee.employee_id,
        role=role_name(employee),
        employee=employee,
        current_assignments=current_assignments_for(employee.employee_id),
    )


def current_employee() -> CurrentEmployee | None:
    """Resolve the acting employee once per signed-in principal.

    The cached value is keyed by principal id, so a login or logout within
    the same application context resolves again.
    """
    principal = principal_from_request()
    principal_id = principal.id if principal is not None else None
    cached_id, cached = g.get("current_employee", (_UNRESOLVED, None))
    if cached_id != principal_id:
        cached = resolve_current_employee(principal)
        g.current_employee = (principal_id, cached)
    return cached
