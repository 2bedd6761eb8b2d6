"""Page data loaders.

Each loader returns a role-annotated view model shared by the HTML pages and
the JSON API: ``current_employee``, ``role``, ``can_edit`` and ``records``.
"""

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from alliance_hub.assignments import current_assignments, merge_current_assignments
from alliance_hub.extensions import db
from alliance_hub.hierarchy import attach_hierarchy
from alliance_hub.identity import CurrentEmployee
from alliance_hub.models import Address, Assignment, District, Employee, JobTitle, Location, Market, Region
from alliance_hub.permissions import can_edit, can_manage_location
from alliance_hub.serializers import assignment_summary, employee_summary, person_ref


def _current_summary(current: CurrentEmployee | None) -> dict[str, Any] | None:
    if current is None:
        return None
    if current.employee is None:
        return {"employee_id": current.employee_id}
    return employee_summary(current.employee)


def view_model(current: CurrentEmployee | None, records: Any, **extra: Any) -> dict[str, Any]:
    model = {
        "current_employee": _current_summary(current),
        "role": current.role if current is not None else "",
        "can_edit": can_edit(current),
        "records": records,
    }
    model.update(extra)
    return model


def _employee_counts_by_location() -> dict[int, int]:
    stmt = (
        select(Assignment.location_id, func.count(Assignment.id))
        .where(Assignment.is_current.is_(True))
        .group_by(Assignment.location_id)
    )
    return {location_id: count for location_id, count in db.session.execute(stmt)}


def load_employees_page(current: CurrentEmployee | None) -> dict[str, Any]:
    employees = list(
        db.session.execute(
            select(Employee).options(joinedload(Employee.user_type)).order_by(Employee.employee_id.asc())
        )
        .scalars()
        .all()
    )

    assignments: list[Assignment] = []
    try:
        assignments = current_assignments()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.warning("Current assignment lookup failed while listing employees.", exc_info=True)

    return view_model(current, merge_current_assignments(employees, assignments))


def load_locations_page(current: CurrentEmployee | None) -> dict[str, Any]:
    locations = list(
        db.session.execute(select(Location).options(joinedload(Location.manager)).order_by(Location.name.asc()))
        .scalars()
        .all()
    )
    rows = attach_hierarchy(locations)

    counts: dict[int, int] = {}
    try:
        counts = _employee_counts_by_location()
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.warning("Employee count lookup failed while listing locations.", exc_info=True)

    for row in rows:
        row["employee_count"] = counts.get(row["location_id"], 0)
    return view_model(current, rows)


def load_assignments_page(current: CurrentEmployee | None) -> dict[str, Any]:
    stmt = (
        select(Assignment)
        .options(
            joinedload(Assignment.employee),
            joinedload(Assignment.location),
            joinedload(Assignment.job_title),
            joinedload(Assignment.supervisor),
        )
        .order_by(Assignment.is_current.desc(), Assignment.start_date.desc(), Assignment.id.desc())
    )
    rows = []
    for assignment in db.session.execute(stmt).scalars().all():
        row = assignment_summary(assignment)
        row["employee"] = person_ref(assignment.employee)
        row["supervisor"] = person_ref(assignment.supervisor)
        rows.append(row)
    return view_model(current, rows)


def load_dashboard(current: CurrentEmployee) -> dict[str, Any]:
    active_employees = db.session.execute(
        select(func.count(Employee.employee_id)).where(Employee.is_active.is_(True))
    ).scalar_one()
    active_locations = db.session.execute(
        select(func.count(Location.location_id)).where(Location.is_active.is_(True))
    ).scalar_one()
    return view_model(
        current,
        [assignment_summary(assignment) for assignment in current.current_assignments],
        active_employee_count=active_employees,
        active_location_count=active_locations,
    )


def load_employee_detail(current: CurrentEmployee, employee_id: int) -> dict[str, Any] | None:
    employee = db.session.execute(
        select(Employee).options(joinedload(Employee.user_type)).where(Employee.employee_id == employee_id)
    ).scalar_one_or_none()
    if employee is None:
        return None

    address = db.session.get(Address, employee.address_id) if employee.address_id is not None else None
    history_stmt = (
        select(Assignment)
        .options(
            joinedload(Assignment.location),
            joinedload(Assignment.job_title),
            joinedload(Assignment.supervisor),
        )
        .where(Assignment.employee_id == employee_id)
        .order_by(Assignment.is_current.desc(), Assignment.is_primary.desc(), Assignment.start_date.desc())
    )
    assignments = []
    for assignment in db.session.execute(history_stmt).scalars().all():
        row = assignment_summary(assignment)
        row["supervisor"] = person_ref(assignment.supervisor)
        assignments.append(row)

    return view_model(current, assignments, employee=employee_summary(employee), address=address)


def load_location_detail(current: CurrentEmployee, location_id: int) -> dict[str, Any] | None:
    location = db.session.execute(
        select(Location).options(joinedload(Location.manager)).where(Location.location_id == location_id)
    ).scalar_one_or_none()
    if location is None:
        return None

    location_row = attach_hierarchy([location])[0]
    staff_stmt = (
        select(Assignment)
        .options(joinedload(Assignment.employee), joinedload(Assignment.job_title))
        .where(Assignment.location_id == location_id, Assignment.is_current.is_(True))
        .order_by(Assignment.is_primary.desc(), Assignment.id.asc())
    )
    staff: dict[int, dict[str, Any]] = {}
    for assignment in db.session.execute(staff_stmt).scalars().all():
        if assignment.employee is None or assignment.employee_id in staff:
            continue
        staff[assignment.employee_id] = {
            **person_ref(assignment.employee),
            "email": assignment.employee.email,
            "is_active": assignment.employee.is_active,
            "job_title": assignment.job_title.name if assignment.job_title is not None else "N/A",
        }

    districts = list(db.session.execute(select(District).order_by(District.name.asc())).scalars().all())
    return view_model(
        current,
        list(staff.values()),
        location=location_row,
        districts=districts,
        can_manage=can_manage_location(current, location_id),
    )


def load_organization(current: CurrentEmployee) -> dict[str, Any]:
    regions = list(db.session.execute(select(Region).order_by(Region.name.asc())).scalars().all())
    markets = list(db.session.execute(select(Market).order_by(Market.name.asc())).scalars().all())
    districts = list(db.session.execute(select(District).order_by(District.name.asc())).scalars().all())
    location_counts = {
        district_id: count
        for district_id, count in db.session.execute(
            select(Location.district_id, func.count(Location.location_id)).group_by(Location.district_id)
        )
    }

    districts_by_market: dict[int | None, list[dict[str, Any]]] = {}
    for district in districts:
        districts_by_market.setdefault(district.market_id, []).append(
            {
                "district_id": district.district_id,
                "name": district.name,
                "location_count": location_counts.get(district.district_id, 0),
            }
        )

    markets_by_region: dict[int | None, list[dict[str, Any]]] = {}
    for market in markets:
        markets_by_region.setdefault(market.region_id, []).append(
            {
                "market_id": market.market_id,
                "name": market.name,
                "districts": districts_by_market.get(market.market_id, []),
            }
        )

    tree = [
        {"region_id": region.region_id, "name": region.name, "markets": markets_by_region.get(region.region_id, [])}
        for region in regions
    ]
    return view_model(current, tree, unassigned_markets=markets_by_region.get(None, []))


def load_market_detail(current: CurrentEmployee, market_id: int) -> dict[str, Any] | None:
    market = db.session.get(Market, market_id)
    if market is None:
        return None

    region = db.session.get(Region, market.region_id) if market.region_id is not None else None
    districts = list(
        db.session.execute(
            select(District)
            .options(joinedload(District.manager))
            .where(District.market_id == market_id, District.is_active.is_(True))
            .order_by(District.name.asc())
        )
        .scalars()
        .all()
    )
    location_counts = {
        district_id: count
        for district_id, count in db.session.execute(
            select(Location.district_id, func.count(Location.location_id))
            .where(Location.is_active.is_(True))
            .group_by(Location.district_id)
        )
    }
    rows = [
        {
            "district_id": district.district_id,
            "name": district.name,
            "manager": person_ref(district.manager),
            "location_count": location_counts.get(district.district_id, 0),
        }
        for district in districts
    ]
    return view_model(
        current,
        rows,
        market={"market_id": market.market_id, "name": market.name, "is_active": market.is_active},
        region={"region_id": region.region_id, "name": region.name} if region is not None else None,
    )


def _location_label(location: Location) -> str:
    if location.store_number:
        return f"{location.store_number} - {location.name}"
    return location.name


def assignment_choices() -> dict[str, list[tuple[int, str]]]:
    employees = db.session.execute(
        select(Employee)
        .where(Employee.is_active.is_(True))
        .order_by(Employee.last_name.asc(), Employee.first_name.asc())
    ).scalars()
    locations = db.session.execute(
        select(Location).where(Location.is_active.is_(True)).order_by(Location.name.asc())
    ).scalars()
    job_titles = db.session.execute(
        select(JobTitle).where(JobTitle.is_active.is_(True)).order_by(JobTitle.name.asc())
    ).scalars()
    return {
        "employees": [
            (employee.employee_id, f"{employee.last_name}, {employee.first_name}") for employee in employees
        ],
        "locations": [(location.location_id, _location_label(location)) for location in locations],
        "job_titles": [(job_title.job_title_id, job_title.name) for job_title in job_titles],
    }


def org_unit_parents() -> dict[str, list[tuple[str, str]]]:
    regions = db.session.execute(select(Region).where(Region.is_active.is_(True)).order_by(Region.name.asc())).scalars()
    markets = db.session.execute(select(Market).where(Market.is_active.is_(True)).order_by(Market.name.asc())).scalars()
    return {
        "region": [(str(region.region_id), region.name) for region in regions],
        "market": [(str(market.market_id), market.name) for market in markets],
    }
