"""Employee assignments: grouping for pages, create and edit.

An employee has at most one current primary assignment. Making another
assignment primary demotes the previous one to a secondary.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from alliance_hub.audit import log_audit
from alliance_hub.extensions import db
from alliance_hub.models import Assignment, Employee, JobTitle, Location
from alliance_hub.serializers import assignment_summary, employee_summary


def current_assignments() -> list[Assignment]:
    stmt = (
        select(Assignment)
        .options(joinedload(Assignment.location), joinedload(Assignment.job_title))
        .where(Assignment.is_current.is_(True))
        .order_by(Assignment.id.asc())
    )
    return list(db.session.execute(stmt).scalars().all())


def merge_current_assignments(
    employees: Sequence[Employee],
    assignments: Iterable[Assignment],
) -> list[dict[str, Any]]:
    """Attach ``current_assignments`` to every employee row.

    Assignments keep their source order; an employee without any gets ``[]``.
    """
    by_employee: dict[int, list[dict[str, Any]]] = defaultdict(list)
    for assignment in assignments:
        by_employee[assignment.employee_id].append(assignment_summary(assignment))

    rows: list[dict[str, Any]] = []
    for employee in employees:
        row = employee_summary(employee)
        row["current_assignments"] = list(by_employee.get(employee.employee_id, []))
        rows.append(row)
    return rows


ASSIGNMENT_TYPES = ("PRIMARY", "SECONDARY", "TEMPORARY", "TRAINING")


class AssignmentNotFound(LookupError):
    pass


class InvalidAssignment(ValueError):
    pass


@dataclass
class AssignmentValues:
    employee_id: int
    location_id: int
    job_title_id: int
    start_date: date
    supervisor_employee_id: int | None = None
    assignment_type: str = "PRIMARY"
    end_date: date | None = None
    is_current: bool = True
    is_primary: bool = True
    notes: str | None = None


def _check_references(values: AssignmentValues) -> None:
    if db.session.get(Employee, values.employee_id) is None:
        raise InvalidAssignment(f"Employee {values.employee_id} not found.")
    if db.session.get(Location, values.location_id) is None:
        raise InvalidAssignment(f"Location {values.location_id} not found.")
    if db.session.get(JobTitle, values.job_title_id) is None:
        raise InvalidAssignment(f"Job title {values.job_title_id} not found.")
    if values.supervisor_employee_id is not None:
        if values.supervisor_employee_id == values.employee_id:
            raise InvalidAssignment("An employee cannot supervise themselves.")
        if db.session.get(Employee, values.supervisor_employee_id) is None:
            raise InvalidAssignment(f"Supervisor {values.supervisor_employee_id} not found.")
    if values.assignment_type not in ASSIGNMENT_TYPES:
        raise InvalidAssignment(f"Unknown assignment type {values.assignment_type!r}.")
    if values.end_date is not None and values.end_date < values.start_date:
        raise InvalidAssignment("End date cannot be before the start date.")


def demote_other_primaries(employee_id: int, keep_id: int | None = None) -> list[int]:
    """Turn the employee's other current primary assignments into secondaries.

    Returns the ids that were changed. The caller commits.
    """
    stmt = select(Assignment).where(
        Assignment.employee_id == employee_id,
        Assignment.is_current.is_(True),
        Assignment.is_primary.is_(True),
    )
    if keep_id is not None:
        stmt = stmt.where(Assignment.id != keep_id)

    demoted = []
    for assignment in db.session.execute(stmt).scalars().all():
        assignment.is_primary = False
        assignment.assignment_type = "SECONDARY"
        demoted.append(assignment.id)
    return demoted


def _apply(assignment: Assignment, values: AssignmentValues) -> None:
    assignment.employee_id = values.employee_id
    assignment.location_id = values.location_id
    assignment.job_title_id = values.job_title_id
    assignment.supervisor_employee_id = values.supervisor_employee_id
    assignment.assignment_type = values.assignment_type
    assignment.start_date = values.start_date
    assignment.end_date = values.end_date
    assignment.is_current = values.is_current
    assignment.is_primary = values.is_primary
    assignment.notes = (values.notes or "").strip() or None


def create_assignment(values: AssignmentValues) -> Assignment:
    _check_references(values)

    demoted: list[int] = []
    if values.is_primary and values.is_current:
        demoted = demote_other_primaries(values.employee_id)

    assignment = Assignment()
    _apply(assignment, values)
    db.session.add(assignment)
    db.session.flush()
    log_audit(
        action="ASSIGNMENT_CREATED",
        entity_type="employee_assignments",
        entity_id=assignment.id,
        payload={
            "employee_id": assignment.employee_id,
            "location_id": assignment.location_id,
            "is_primary": assignment.is_primary,
            "demoted": demoted,
        },
    )
    db.session.commit()
    return assignment


def update_assignment(assignment_id: int, values: AssignmentValues) -> Assignment:
    """Replace an assignment's fields. The employee of an assignment never changes."""
    assignment = db.session.get(Assignment, assignment_id)
    if assignment is None:
        raise AssignmentNotFound(f"Assignment {assignment_id} not found.")
    if values.employee_id != assignment.employee_id:
        raise InvalidAssignment("An assignment cannot be moved to another employee.")
    _check_references(values)

    demoted: list[int] = []
    if values.is_primary and values.is_current:
        demoted = demote_other_primaries(assignment.employee_id, keep_id=assignment.id)

    _apply(assignment, values)
    db.session.flush()
    log_audit(
        action="ASSIGNMENT_UPDATED",
        entity_type="employee_assignments",
        entity_id=assignment.id,
        payload={
            "location_id": assignment.location_id,
            "assignment_type": assignment.assignment_type,
            "is_primary": assignment.is_primary,
            "is_current": assignment.is_current,
            "demoted": demoted,
        },
    )
    db.session.commit()
    return assignment
