"""Creating regions, markets and districts.

Regions sit at the top; a market belongs to a region and a district to a
market. New ids are ``max + 1``, starting at 1.
"""

from __future__ import annotations

from sqlalchemy import func, select

from alliance_hub.audit import log_audit
from alliance_hub.extensions import db
from alliance_hub.models import District, Market, Region

ORG_UNIT_KINDS = ("region", "market", "district")

# kind -> (model, id column name, parent model, parent column name)
_UNITS = {
    "region": (Region, "region_id", None, None),
    "market": (Market, "market_id", Region, "region_id"),
    "district": (District, "district_id", Market, "market_id"),
}


def _next_id(model, id_name: str) -> int:
    highest = db.session.execute(select(func.max(getattr(model, id_name)))).scalar_one_or_none()
    return 1 if highest is None else highest + 1


def parent_kind(kind: str) -> str | None:
    parent_model = _UNITS[kind][2]
    if parent_model is None:
        return None
    return parent_model.__tablename__.removesuffix("s")


def create_org_unit(kind: str, name: str, parent_id: int | None = None):
    if kind not in _UNITS:
        raise ValueError(f"Unknown organization unit {kind!r}.")
    model, id_name, parent_model, parent_column = _UNITS[kind]

    name = (name or "").strip()
    if not name:
        raise ValueError("Name is required.")

    values = {id_name: _next_id(model, id_name), "name": name, "is_active": True}
    if parent_model is not None:
        if parent_id is None:
            raise ValueError(f"Please select a {parent_kind(kind)}.")
        if db.session.get(parent_model, parent_id) is None:
            raise ValueError(f"{parent_kind(kind).title()} {parent_id} not found.")
        values[parent_column] = parent_id

    unit = model(**values)
    db.session.add(unit)
    db.session.flush()
    log_audit(
        action=f"{kind.upper()}_CREATED",
        entity_type=model.__tablename__,
        entity_id=values[id_name],
        payload={"name": name, "parent_id": parent_id},
    )
    db.session.commit()
    return unit
