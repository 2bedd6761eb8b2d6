"""Attach district, market and region data to locations.

The chain location -> district -> market -> region is resolved with one
batched lookup per level; per-location queries are never issued.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.orm import joinedload

from alliance_hub.extensions import db
from alliance_hub.models import District, Location, Market, Region
from alliance_hub.serializers import location_summary, person_ref

BatchFetch = Callable[[list[int]], Iterable[Any]]


def fetch_districts(district_ids: list[int]) -> list[District]:
    stmt = select(District).options(joinedload(District.manager)).where(District.district_id.in_(district_ids))
    return list(db.session.execute(stmt).scalars().all())


def fetch_markets(market_ids: list[int]) -> list[Market]:
    return list(db.session.execute(select(Market).where(Market.market_id.in_(market_ids))).scalars().all())


def fetch_regions(region_ids: list[int]) -> list[Region]:
    return list(db.session.execute(select(Region).where(Region.region_id.in_(region_ids))).scalars().all())


def _distinct_ids(values: Iterable[int | None]) -> list[int]:
    return sorted({value for value in values if value is not None})


def _index(rows: Iterable[Any], key: str) -> dict[int, Any]:
    return {getattr(row, key): row for row in rows}


def _batch(fetch: BatchFetch, ids: list[int], key: str) -> dict[int, Any]:
    if not ids:
        return {}
    return _index(fetch(ids), key)


def _district_node(district: District, markets: dict[int, Market], regions: dict[int, Region]) -> dict[str, Any]:
    node: dict[str, Any] = {
        "district_id": district.district_id,
        "name": district.name,
        "manager": person_ref(district.manager),
    }
    market = markets.get(district.market_id) if district.market_id is not None else None
    if market is None:
        return node

    node["market"] = {"market_id": market.market_id, "name": market.name}
    region = regions.get(market.region_id) if market.region_id is not None else None
    if region is not None:
        node["market"]["region"] = {"region_id": region.region_id, "name": region.name}
    return node


def attach_hierarchy(
    locations: Sequence[Location],
    fetch_districts: BatchFetch = fetch_districts,
    fetch_markets: BatchFetch = fetch_markets,
    fetch_regions: BatchFetch = fetch_regions,
) -> list[dict[str, Any]]:
    """Return location rows, each with a nested ``district`` when resolvable.

    References that point at no row leave the nested field out.
    """
    districts = _batch(fetch_districts, _distinct_ids(location.district_id for location in locations), "district_id")
    markets = _batch(fetch_markets, _distinct_ids(district.market_id for district in districts.values()), "market_id")
    regions = _batch(fetch_regions, _distinct_ids(market.region_id for market in markets.values()), "region_id")

    rows: list[dict[str, Any]] = []
    for location in locations:
        row = location_summary(location)
        district = districts.get(location.district_id) if location.district_id is not None else None
        if district is not None:
            row["district"] = _district_node(district, markets, regions)
        rows.append(row)
    return rows
