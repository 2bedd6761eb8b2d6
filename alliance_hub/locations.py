"""Location create and edit, shared by the location pages and the JSON API."""

from __future__ import annotations

from typing import Any

from flask import current_app
from sqlalchemy import func, select

from alliance_hub.audit import log_audit
from alliance_hub.extensions import db
from alliance_hub.models import District, Location

EDITABLE_FIELDS = ("name", "store_number", "district_id", "phone", "timezone", "gl_code", "in_footprint", "is_active")


class LocationNotFound(LookupError):
    pass


def update_location(location_id: int, changes: dict[str, Any]) -> Location:
    """Apply ``changes`` to a location and commit.

    Unknown keys are ignored. Raises ``ValueError`` for an empty name or an
    unknown district.
    """
    location = db.session.get(Location, location_id)
    if location is None:
        raise LocationNotFound(f"Location {location_id} not found.")

    applied: dict[str, Any] = {}
    for field_name in EDITABLE_FIELDS:
        if field_name not in changes:
            continue
        value = changes[field_name]
        if isinstance(value, str):
            value = value.strip()
        if field_name == "name" and not value:
            raise ValueError("Location name is required.")
        if field_name == "district_id":
            value = _district_or_none(value)
        if field_name in ("store_number", "phone", "gl_code") and value == "":
            value = None
        setattr(location, field_name, value)
        applied[field_name] = value

    db.session.flush()
    log_audit(action="LOCATION_UPDATED", entity_type="locations", entity_id=location.location_id, payload=applied)
    db.session.commit()
    return location


def next_location_id() -> int:
    highest = db.session.execute(select(func.max(Location.location_id))).scalar_one_or_none()
    if highest is None:
        return int(current_app.config["LOCATION_ID_FLOOR"])
    return highest + 1


def _district_or_none(value: Any) -> int | None:
    district_id = int(value) if value not in (None, "") else None
    if district_id is not None and db.session.get(District, district_id) is None:
        raise ValueError(f"District {district_id} not found.")
    return district_id


def create_location(
    name: str,
    store_number: str | None = None,
    district_id: int | str | None = None,
    phone: str | None = None,
    is_active: bool = True,
) -> Location:
    name = (name or "").strip()
    if not name:
        raise ValueError("Location name is required.")

    location = Location(
        location_id=next_location_id(),
        name=name,
        store_number=(store_number or "").strip() or None,
        district_id=_district_or_none(district_id),
        phone=(phone or "").strip() or None,
        is_active=is_active,
    )
    db.session.add(location)
    db.session.flush()
    log_audit(
        action="LOCATION_CREATED",
        entity_type="locations",
        entity_id=location.location_id,
        payload={"name": location.name, "district_id": location.district_id},
    )
    db.session.commit()
    return location
