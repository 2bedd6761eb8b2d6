"""Location and organization pages."""

from __future__ import annotations

from flask import Blueprint, abort, flash, redirect, render_template, request, url_for
from sqlalchemy import select

from alliance_hub.extensions import db
from alliance_hub.forms import LocationCreateForm, LocationEditForm, OrgUnitForm
from alliance_hub.identity import current_employee
from alliance_hub.loaders import (
    load_location_detail,
    load_locations_page,
    load_market_detail,
    load_organization,
    org_unit_parents,
)
from alliance_hub.locations import LocationNotFound, create_location, update_location
from alliance_hub.models import District
from alliance_hub.organization import ORG_UNIT_KINDS, create_org_unit, parent_kind
from alliance_hub.permissions import edit_required, employee_required


bp = Blueprint("locations", __name__)


@bp.get("/locations")
@employee_required
def locations_list():
    return render_template("locations/list.html", **load_locations_page(current_employee()))


@bp.route("/locations/new", methods=["GET", "POST"])
@employee_required
@edit_required
def location_new():
    form = LocationCreateForm()
    districts = db.session.execute(select(District).order_by(District.name.asc())).scalars()
    form.district_id.choices = [("", "No district")] + [
        (str(district.district_id), district.name) for district in districts
    ]

    if form.validate_on_submit():
        try:
            location = create_location(
                form.name.data,
                store_number=form.store_number.data,
                district_id=form.district_id.data,
                phone=form.phone.data,
                is_active=form.is_active.data,
            )
        except ValueError as exc:
            flash(str(exc), "danger")
            return render_template("locations/new.html", form=form), 400
        flash("Location created.", "success")
        return redirect(url_for("locations.location_detail", location_id=location.location_id))
    return render_template("locations/new.html", form=form)


@bp.route("/locations/<int:location_id>", methods=["GET", "POST"])
@employee_required
def location_detail(location_id: int):
    current = current_employee()
    model = load_location_detail(current, location_id)
    if model is None:
        flash("Location not found.", "warning")
        return redirect(url_for("locations.locations_list"))

    form = LocationEditForm()
    form.district_id.choices = [("", "No district")] + [
        (str(district.district_id), district.name) for district in model["districts"]
    ]

    if form.is_submitted():
        if not model["can_manage"]:
            abort(403, description="Insufficient permissions: manage location.")
        if form.validate():
            changes = {
                "name": form.name.data,
                "store_number": form.store_number.data,
                "district_id": form.district_id.data,
                "phone": form.phone.data,
                "is_active": form.is_active.data,
            }
            try:
                update_location(location_id, changes)
            except LocationNotFound:
                flash("Location not found.", "warning")
                return redirect(url_for("locations.locations_list"))
            except ValueError as exc:
                flash(str(exc), "danger")
                return render_template("locations/detail.html", form=form, **model), 400
            flash("Location updated.", "success")
            return redirect(url_for("locations.location_detail", location_id=location_id))
        return render_template("locations/detail.html", form=form, **model), 400

    location = model["location"]
    form.name.data = location["name"]
    form.store_number.data = location["store_number"]
    form.district_id.data = str(location["district_id"]) if location["district_id"] is not None else ""
    form.phone.data = location["phone"]
    form.is_active.data = location["is_active"]
    return render_template("locations/detail.html", form=form, **model)


@bp.get("/organization")
@employee_required
def organization():
    return render_template("organization/index.html", **load_organization(current_employee()))


@bp.route("/organization/new", methods=["GET", "POST"])
@employee_required
@edit_required
def organization_new():
    form = OrgUnitForm()
    if request.method == "GET" and request.args.get("type") in ORG_UNIT_KINDS:
        form.kind.data = request.args["type"]

    parents = org_unit_parents()
    kind = form.kind.data if form.kind.data in ORG_UNIT_KINDS else "market"
    parent = parent_kind(kind)
    form.parent_id.choices = [("", "None")] + (parents[parent] if parent else [])

    if form.validate_on_submit():
        try:
            unit = create_org_unit(kind, form.name.data, int(form.parent_id.data) if form.parent_id.data else None)
        except ValueError as exc:
            flash(str(exc), "danger")
            return render_template("organization/new.html", form=form, parent=parent), 400
        flash(f"{kind.title()} {unit.name} created.", "success")
        return redirect(url_for("locations.organization"))
    return render_template("organization/new.html", form=form, parent=parent)


@bp.get("/organization/markets/<int:market_id>")
@employee_required
def market_detail(market_id: int):
    model = load_market_detail(current_employee(), market_id)
    if model is None:
        flash("Market not found.", "warning")
        return redirect(url_for("locations.organization"))
    return render_template("organization/market.html", **model)
