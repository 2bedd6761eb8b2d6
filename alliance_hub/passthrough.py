"""Generic table operations for local maintenance.

This is a broad data-access surface, so it is switched off outside
development, limited to ADMIN users, and restricted to the tables and
functions registered below. Employees can be edited here but never deleted.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Callable

from sqlalchemy import Date, DateTime, Table, Uuid, delete, func, insert, select, update

from alliance_hub.extensions import db
from alliance_hub.models import (
    Assignment,
    District,
    Employee,
    JobTitle,
    Location,
    Market,
    Region,
    TerminationReason,
    UserType,
)

OPERATIONS = ("select", "insert", "update", "delete", "function")

ALLOWED_TABLES: dict[str, Table] = {
    model.__tablename__: model.__table__
    for model in (Assignment, District, Employee, JobTitle, Location, Market, Region, TerminationReason, UserType)
}
NON_DELETABLE_TABLES = frozenset({Employee.__tablename__, UserType.__tablename__})


class PassthroughError(ValueError):
    pass


def _location_employee_counts() -> list[dict[str, Any]]:
    stmt = (
        select(Assignment.location_id, func.count(Assignment.id))
        .where(Assignment.is_current.is_(True))
        .group_by(Assignment.location_id)
        .order_by(Assignment.location_id.asc())
    )
    return [{"location_id": location_id, "employee_count": count} for location_id, count in db.session.execute(stmt)]


def _active_employee_count() -> list[dict[str, Any]]:
    count = db.session.execute(select(func.count(Employee.employee_id)).where(Employee.is_active.is_(True))).scalar_one()
    return [{"count": count}]


FUNCTIONS: dict[str, Callable[..., list[dict[str, Any]]]] = {
    "location_employee_counts": _location_employee_counts,
    "active_employee_count": _active_employee_count,
}


def _table(name: object) -> Table:
    table = ALLOWED_TABLES.get(str(name or ""))
    if table is None:
        raise PassthroughError(f"Table {name!r} is not available.")
    return table


def _column(table: Table, name: object):
    column = table.columns.get(str(name or ""))
    if column is None:
        raise PassthroughError(f"Unknown column {name!r} on {table.name}.")
    return column


def _coerce(column, value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        if isinstance(column.type, DateTime):
            return datetime.fromisoformat(value)
        if isinstance(column.type, Date):
            return date.fromisoformat(value)
        if isinstance(column.type, Uuid):
            return uuid.UUID(value)
    except ValueError as exc:
        raise PassthroughError(f"Invalid value for {column.name}: {value!r}") from exc
    return value


def _values(table: Table, data: object) -> dict[str, Any]:
    if not isinstance(data, dict) or not data:
        raise PassthroughError("data must be a non-empty object.")
    return {key: _coerce(_column(table, key), value) for key, value in data.items()}


def _match(table: Table, match: object):
    if not isinstance(match, dict) or "column" not in match or "value" not in match:
        raise PassthroughError("match must provide column and value.")
    column = _column(table, match["column"])
    return column == _coerce(column, match["value"])


def _jsonable(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    return value


def _select(params: dict[str, Any]) -> list[dict[str, Any]]:
    table = _table(params.get("from"))
    requested = params.get("select") or "*"
    if not isinstance(requested, str):
        raise PassthroughError("select must be a comma-separated string.")
    requested = requested.strip()
    if requested == "*":
        columns = list(table.columns)
    else:
        columns = [_column(table, name.strip()) for name in requested.split(",") if name.strip()]
        if not columns:
            raise PassthroughError("select must name at least one column.")

    filters = params.get("filter") or {}
    if not isinstance(filters, dict):
        raise PassthroughError("filter must be an object of column values.")

    stmt = select(*columns)
    for key, value in filters.items():
        column = _column(table, key)
        stmt = stmt.where(column == _coerce(column, value))
    rows = db.session.execute(stmt).mappings().all()
    return [{key: _jsonable(value) for key, value in row.items()} for row in rows]


def run_operation(operation: str, params: dict[str, Any] | None) -> dict[str, Any]:
    """Run one table operation and commit. Raises ``PassthroughError`` on bad input."""
    params = params or {}
    if not isinstance(params, dict):
        raise PassthroughError("params must be an object.")
    if operation not in OPERATIONS:
        raise PassthroughError("Invalid operation type")

    if operation == "select":
        return {"data": _select(params), "error": None}

    if operation == "function":
        function = FUNCTIONS.get(str(params.get("name") or ""))
        if function is None:
            raise PassthroughError(f"Function {params.get('name')!r} is not available.")
        args = params.get("args") or {}
        if not isinstance(args, dict):
            raise PassthroughError("args must be an object.")
        try:
            data = function(**args)
        except TypeError as exc:
            raise PassthroughError(f"Invalid arguments for {params.get('name')!r}: {exc}") from exc
        return {"data": data, "error": None}

    table = _table(params.get("table"))
    if operation == "insert":
        rows = params.get("data")
        rows = rows if isinstance(rows, list) else [rows]
        result = db.session.execute(insert(table), [_values(table, row) for row in rows])
    elif operation == "update":
        stmt = update(table).where(_match(table, params.get("match"))).values(_values(table, params.get("data")))
        result = db.session.execute(stmt)
    else:
        if table.name in NON_DELETABLE_TABLES:
            raise PassthroughError(f"Rows in {table.name} cannot be deleted.")
        result = db.session.execute(delete(table).where(_match(table, params.get("match"))))
    db.session.commit()
    return {"data": None, "count": result.rowcount, "error": None}
