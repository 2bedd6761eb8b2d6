"""CSV bulk import for locations and employees.

Rows are committed one at a time, so a failing row never undoes the rows
imported before it. Foreign keys are checked up front with one lookup per
referenced table.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable

from flask import current_app
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from alliance_hub.audit import log_audit
from alliance_hub.extensions import db
from alliance_hub.models import (
    DEFAULT_USER_TYPE_ID,
    Address,
    Assignment,
    District,
    Employee,
    JobTitle,
    Location,
    TerminationReason,
    UserType,
)

IMPORT_KINDS = ("locations", "employees")


class ImportRowError(ValueError):
    pass


@dataclass
class ImportResult:
    imported: int = 0
    failed: int = 0
    errors: list[str] = field(default_factory=list)

    def as_dict(self) -> dict[str, Any]:
        return {"imported": self.imported, "failed": self.failed, "errors": list(self.errors)}


def _cast(value: str | None) -> Any:
    if value is None:
        return None
    value = value.strip()
    if value == "":
        return None
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    return value


def parse_records(content: str) -> list[dict[str, Any]]:
    """Parse CSV text, dropping ``#`` comment lines and blank rows."""
    lines = [line for line in content.splitlines() if not line.strip().startswith("#")]
    reader = csv.DictReader(io.StringIO("\n".join(lines)))
    records: list[dict[str, Any]] = []
    for raw in reader:
        record = {(key or "").strip(): _cast(value) for key, value in raw.items() if key}
        if any(value is not None for value in record.values()):
            records.append(record)
    return records


def _to_int(record: dict[str, Any], key: str) -> int | None:
    value = record.get(key)
    if value is None:
        return None
    try:
        return int(str(value))
    except ValueError as exc:
        raise ImportRowError(f"{key} must be an integer, got {value!r}") from exc


def _to_date(record: dict[str, Any], key: str) -> date | None:
    value = record.get(key)
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ImportRowError(f"{key} must use YYYY-MM-DD, got {value!r}") from exc


def _flag(record: dict[str, Any], key: str) -> bool:
    return record.get(key) is not False


def _int_ids(records: Iterable[dict[str, Any]], key: str) -> set[int]:
    ids: set[int] = set()
    for record in records:
        try:
            value = _to_int(record, key)
        except ImportRowError:
            continue
        if value is not None:
            ids.add(value)
    return ids


def _existing_ids(column, ids: set[int]) -> set[int]:
    if not ids:
        return set()
    return set(db.session.execute(select(column).where(column.in_(ids))).scalars().all())


def _address_from(record: dict[str, Any], address_type: str) -> Address | None:
    required = ("street_line1", "city", "state_province", "postal_code")
    if not all(record.get(key) for key in required):
        return None
    return Address(
        address_type=address_type,
        street_line1=str(record["street_line1"]),
        street_line2=record.get("street_line2"),
        city=str(record["city"]),
        state_province=str(record["state_province"]),
        postal_code=str(record["postal_code"]),
        country_code=str(record.get("country_code") or "US"),
        phone=record.get("phone") if address_type == "PHYSICAL" else None,
        phone_type=(record.get("phone_type") or "MAIN") if address_type == "PHYSICAL" else None,
    )


def _commit_row() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise ImportRowError(str(getattr(exc, "orig", None) or exc)) from exc


def import_locations(records: list[dict[str, Any]]) -> ImportResult:
    result = ImportResult()
    valid_district_ids = _existing_ids(District.district_id, _int_ids(records, "district_id"))
    valid_manager_ids = _existing_ids(Employee.employee_id, _int_ids(records, "manager_employee_id"))

    for record in records:
        label = record.get("location_id")
        try:
            location_id = _to_int(record, "location_id")
            district_id = _to_int(record, "district_id")
            if location_id is None or district_id is None or not record.get("name"):
                raise ImportRowError("Missing required fields (location_id, district_id, name)")
            if district_id not in valid_district_ids:
                raise ImportRowError(
                    f"District ID {district_id} not found. Please ensure districts exist before importing locations."
                )
            manager_id = _to_int(record, "manager_employee_id")
            if manager_id is not None and manager_id not in valid_manager_ids:
                raise ImportRowError(
                    f"Manager employee ID {manager_id} not found. "
                    "Import employees first or leave manager_employee_id empty."
                )

            address = _address_from(record, "PHYSICAL")
            if address is not None:
                db.session.add(address)
                db.session.flush()

            db.session.add(
                Location(
                    location_id=location_id,
                    district_id=district_id,
                    name=str(record["name"]),
                    address_id=address.id if address is not None else None,
                    manager_employee_id=manager_id,
                    timezone=str(record.get("timezone") or "America/Chicago"),
                    gl_code=record.get("gl_code"),
                    in_footprint=_flag(record, "in_footprint"),
                    store_number=record.get("store_number"),
                    phone=record.get("phone"),
                    is_active=_flag(record, "is_active"),
                )
            )
            _commit_row()
            result.imported += 1
        except (ImportRowError, SQLAlchemyError) as exc:
            db.session.rollback()
            result.failed += 1
            result.errors.append(f"Location {label}: {exc}")

    return result


def import_employees(records: list[dict[str, Any]]) -> ImportResult:
    result = ImportResult()
    user_type_ids = _int_ids(records, "user_type_id") | {DEFAULT_USER_TYPE_ID}
    valid_user_type_ids = _existing_ids(UserType.user_type_id, user_type_ids)
    valid_location_ids = _existing_ids(Location.location_id, _int_ids(records, "location_id"))
    valid_job_title_ids = _existing_ids(JobTitle.job_title_id, _int_ids(records, "job_title_id"))
    valid_supervisor_ids = _existing_ids(Employee.employee_id, _int_ids(records, "supervisor_employee_id"))
    valid_reason_ids = _existing_ids(
        TerminationReason.termination_reason_id, _int_ids(records, "termination_reason_id")
    )

    for record in records:
        label = record.get("employee_id")
        try:
            employee_id = _to_int(record, "employee_id")
            required = ("username", "email", "first_name", "last_name")
            if employee_id is None or not all(record.get(key) for key in required):
                raise ImportRowError("Missing required fields (employee_id, username, email, first_name, last_name)")

            user_type_id = _to_int(record, "user_type_id") or DEFAULT_USER_TYPE_ID
            if user_type_id not in valid_user_type_ids:
                valid_values = ", ".join(str(value) for value in sorted(valid_user_type_ids))
                raise ImportRowError(f"User type ID {user_type_id} not found. Valid values are: {valid_values}")

            reason_id = _to_int(record, "termination_reason_id")
            if reason_id is not None and reason_id not in valid_reason_ids:
                raise ImportRowError(f"Termination reason ID {reason_id} not found")

            location_id = _to_int(record, "location_id")
            if location_id is not None and location_id not in valid_location_ids:
                raise ImportRowError(f"Location ID {location_id} not found. Import locations first.")

            job_title_id = _to_int(record, "job_title_id")
            if job_title_id is not None and job_title_id not in valid_job_title_ids:
                raise ImportRowError(f"Job title ID {job_title_id} not found. Ensure job titles are configured.")

            supervisor_id = _to_int(record, "supervisor_employee_id")
            if supervisor_id is not None and supervisor_id not in valid_supervisor_ids:
                raise ImportRowError(f"Supervisor employee ID {supervisor_id} not found. Import supervisors first.")

            hire_date = _to_date(record, "hire_date")
            assignment_start = _to_date(record, "assignment_start_date") or hire_date

            address = _address_from(record, "HOME")
            if address is not None:
                db.session.add(address)
                db.session.flush()

            db.session.add(
                Employee(
                    employee_id=employee_id,
                    username=str(record["username"]),
                    email=str(record["email"]).strip().lower(),
                    first_name=str(record["first_name"]),
                    last_name=str(record["last_name"]),
                    user_type_id=user_type_id,
                    address_id=address.id if address is not None else None,
                    hire_date=hire_date,
                    termination_date=_to_date(record, "termination_date"),
                    termination_reason_id=reason_id,
                    home_phone=record.get("home_phone"),
                    work_phone=record.get("work_phone"),
                    mobile_phone=record.get("mobile_phone"),
                    employee_number=record.get("employee_number"),
                    is_full_time=_flag(record, "is_full_time"),
                    is_active=_flag(record, "is_active"),
                )
            )
            _commit_row()
        except (ImportRowError, SQLAlchemyError) as exc:
            db.session.rollback()
            result.failed += 1
            result.errors.append(f"Employee {label}: {exc}")
            continue

        if location_id is not None and job_title_id is not None:
            try:
                if assignment_start is None:
                    raise ImportRowError("assignment_start_date or hire_date is required")
                db.session.add(
                    Assignment(
                        employee_id=employee_id,
                        location_id=location_id,
                        job_title_id=job_title_id,
                        supervisor_employee_id=supervisor_id,
                        assignment_type="PRIMARY",
                        start_date=assignment_start,
                        is_current=True,
                        is_primary=True,
                    )
                )
                _commit_row()
            except ImportRowError as exc:
                db.session.rollback()
                result.errors.append(f"Assignment for {employee_id}: {exc}")

        result.imported += 1

    return result


def run_import(kind: str, content: str) -> ImportResult:
    if kind not in IMPORT_KINDS:
        raise ValueError("Invalid import type")

    records = parse_records(content)
    if kind == "locations":
        result = import_locations(records)
    else:
        result = import_employees(records)

    current_app.logger.info(
        "%s import finished: %s imported, %s failed.", kind, result.imported, result.failed
    )
    log_audit(
        action="BULK_IMPORT",
        entity_type=kind,
        entity_id=None,
        payload={"imported": result.imported, "failed": result.failed},
    )
    db.session.commit()
    return result
