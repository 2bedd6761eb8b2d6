"""Plain-dict views of model rows for templates and JSON responses."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from alliance_hub.models import Assignment, Employee, Location


def _iso(value: date | datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def person_ref(employee: Employee | None) -> dict[str, Any] | None:
    if employee is None:
        return None
    return {
        "employee_id": employee.employee_id,
        "first_name": employee.first_name,
        "last_name": employee.last_name,
    }


def employee_summary(employee: Employee) -> dict[str, Any]:
    user_type = employee.user_type
    return {
        "employee_id": employee.employee_id,
        "auth_user_id": str(employee.auth_user_id) if employee.auth_user_id else None,
        "username": employee.username,
        "email": employee.email,
        "first_name": employee.first_name,
        "last_name": employee.last_name,
        "employee_number": employee.employee_number,
        "hire_date": _iso(employee.hire_date),
        "mobile_phone": employee.mobile_phone,
        "work_phone": employee.work_phone,
        "home_phone": employee.home_phone,
        "is_full_time": employee.is_full_time,
        "is_active": employee.is_active,
        "user_type_id": employee.user_type_id,
        "user_type": (
            {"user_type_id": user_type.user_type_id, "name": user_type.name, "description": user_type.description}
            if user_type is not None
            else None
        ),
    }


def assignment_summary(assignment: Assignment) -> dict[str, Any]:
    location = assignment.location
    job_title = assignment.job_title
    return {
        "id": assignment.id,
        "employee_id": assignment.employee_id,
        "location_id": assignment.location_id,
        "job_title_id": assignment.job_title_id,
        "supervisor_employee_id": assignment.supervisor_employee_id,
        "assignment_type": assignment.assignment_type,
        "start_date": _iso(assignment.start_date),
        "end_date": _iso(assignment.end_date),
        "is_current": assignment.is_current,
        "is_primary": assignment.is_primary,
        "location": (
            {"location_id": location.location_id, "name": location.name, "store_number": location.store_number}
            if location is not None
            else None
        ),
        "job_title": (
            {"job_title_id": job_title.job_title_id, "name": job_title.name} if job_title is not None else None
        ),
    }


def location_summary(location: Location) -> dict[str, Any]:
    return {
        "location_id": location.location_id,
        "name": location.name,
        "store_number": location.store_number,
        "phone": location.phone,
        "timezone": location.timezone,
        "district_id": location.district_id,
        "manager_employee_id": location.manager_employee_id,
        "is_active": location.is_active,
        "manager": person_ref(location.manager),
    }
