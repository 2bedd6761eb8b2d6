"""JSON API.

The blueprint is CSRF-exempt; callers authenticate with the session cookie
or a bearer token from ``/api/auth/token``.
"""

from __future__ import annotations

from datetime import date

from flask import Blueprint, abort, current_app, jsonify, make_response, request
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.exceptions import HTTPException

from alliance_hub.bulk_import import IMPORT_KINDS, run_import
from alliance_hub.extensions import db
from alliance_hub.hierarchy import attach_hierarchy
from alliance_hub.identity import current_employee
from alliance_hub.import_templates import render_import_template
from alliance_hub.loaders import load_employees_page, load_locations_page
from alliance_hub.locations import LocationNotFound, update_location
from alliance_hub.passthrough import PassthroughError, run_operation
from alliance_hub.permissions import (
    admin_required,
    can_edit,
    can_manage_location,
    edit_required,
    employee_required,
)
from alliance_hub.provisioning import (
    EmployeeNotFound,
    InvalidEmployeeChange,
    NewEmployee,
    ProvisioningError,
    deactivate_employee,
    provision_employee,
    update_employee,
)
from alliance_hub.serializers import employee_summary


bp = Blueprint("api", __name__, url_prefix="/api")

CREATE_TEXT_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "username",
    "mobile_phone",
    "employee_number",
    "temporary_password",
)


@bp.errorhandler(HTTPException)
def handle_http_error(exc: HTTPException):
    return jsonify({"error": exc.description or exc.name}), exc.code


@bp.errorhandler(SQLAlchemyError)
def handle_store_error(exc: SQLAlchemyError):
    db.session.rollback()
    current_app.logger.exception("Database error on %s %s.", request.method, request.path)
    return jsonify({"error": "Database error", "details": str(getattr(exc, "orig", None) or exc)}), 500


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        abort(400, description="Expected a JSON object body.")
    return payload


def _parse_date(value: object, field_name: str) -> date | None:
    if value in (None, ""):
        return None
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        abort(400, description=f"{field_name} must use YYYY-MM-DD.")


@bp.get("/employees")
@employee_required
def employees_index():
    return jsonify(load_employees_page(current_employee()))


@bp.post("/employees")
@employee_required
@edit_required
def employees_create():
    payload = _json_body()
    not_text = [key for key in CREATE_TEXT_FIELDS if payload.get(key) is not None and not isinstance(payload[key], str)]
    if not_text:
        return jsonify({"success": False, "error": f"Fields must be strings: {', '.join(not_text)}"}), 400

    missing = [key for key in ("first_name", "last_name", "email") if not str(payload.get(key) or "").strip()]
    if missing:
        return jsonify({"success": False, "error": f"Missing required fields: {', '.join(missing)}"}), 400

    user_type_id = payload.get("user_type_id")
    try:
        user_type_id = int(user_type_id) if user_type_id not in (None, "") else None
    except (TypeError, ValueError):
        return jsonify({"success": False, "error": "user_type_id must be an integer."}), 400

    new_employee = NewEmployee(
        email=payload["email"],
        first_name=payload["first_name"],
        last_name=payload["last_name"],
        username=payload.get("username") or None,
        user_type_id=user_type_id,
        hire_date=_parse_date(payload.get("hire_date"), "hire_date"),
        mobile_phone=payload.get("mobile_phone") or None,
        employee_number=payload.get("employee_number") or None,
        is_full_time=payload.get("is_full_time", True) is not False,
        is_active=payload.get("is_active", True) is not False,
    )
    try:
        provisioned = provision_employee(new_employee, password=payload.get("temporary_password") or None)
    except ProvisioningError as exc:
        return jsonify({"success": False, "error": str(exc)}), 500

    return (
        jsonify(
            {
                "success": True,
                "employee": employee_summary(provisioned.employee),
                "temporary_password": provisioned.password,
                "message": "Employee created successfully.",
            }
        ),
        201,
    )


@bp.patch("/employees/<int:employee_id>")
@employee_required
@edit_required
def employees_update(employee_id: int):
    payload = _json_body()
    fields = ("first_name", "last_name", "email", "mobile_phone", "work_phone", "is_active")
    changes = {key: payload[key] for key in fields if key in payload}
    try:
        result = update_employee(employee_id, changes, reset_password=bool(payload.get("reset_password")))
    except EmployeeNotFound:
        return jsonify({"success": False, "error": "Employee not found"}), 404
    except InvalidEmployeeChange as exc:
        return jsonify({"success": False, "error": str(exc)}), 400
    except IntegrityError:
        db.session.rollback()
        return jsonify({"success": False, "error": "Another employee already uses that email address."}), 409
    except ProvisioningError as exc:
        return jsonify({"success": False, "error": str(exc)}), 500

    if result.temporary_password:
        return jsonify(
            {
                "success": True,
                "message": "Employee updated and password reset",
                "temporary_password": result.temporary_password,
            }
        )
    return jsonify({"success": True, "message": "Employee updated successfully"})


@bp.delete("/employees/<int:employee_id>")
@employee_required
@edit_required
def employees_deactivate(employee_id: int):
    try:
        deactivate_employee(employee_id)
    except EmployeeNotFound:
        return jsonify({"success": False, "error": "Employee not found"}), 404
    return jsonify({"success": True, "message": "Employee deactivated successfully"})


@bp.get("/locations")
@employee_required
def locations_index():
    return jsonify(load_locations_page(current_employee()))


@bp.put("/locations/<int:location_id>")
@employee_required
def locations_update(location_id: int):
    current = current_employee()
    if not can_edit(current) and not can_manage_location(current, location_id):
        abort(403, description="Forbidden")

    payload = _json_body()
    if not str(payload.get("name") or "").strip():
        return jsonify({"error": "Location name is required"}), 400

    changes = {key: payload.get(key) for key in ("name", "store_number", "district_id", "phone")}
    if "is_active" in payload:
        changes["is_active"] = payload["is_active"] is not False
    try:
        location = update_location(location_id, changes)
    except LocationNotFound:
        return jsonify({"error": "Location not found"}), 404
    except (TypeError, ValueError) as exc:
        return jsonify({"error": str(exc)}), 400

    return jsonify({"success": True, "data": attach_hierarchy([location])[0]})


@bp.get("/admin/export-template")
@employee_required
@edit_required
def export_template():
    kind = request.args.get("type", "")
    try:
        content = render_import_template(kind)
    except ValueError as exc:
        return jsonify({"error": str(exc)}), 400

    response = make_response(content)
    response.headers["Content-Type"] = "text/csv; charset=utf-8"
    response.headers["Content-Disposition"] = f'attachment; filename="{kind}_import_template.csv"'
    return response


@bp.post("/admin/import")
@employee_required
@edit_required
def import_csv():
    upload = request.files.get("file")
    kind = request.form.get("type", "")
    if upload is None or not kind:
        return jsonify({"error": "Missing file or type"}), 400
    if kind not in IMPORT_KINDS:
        return jsonify({"error": "Invalid import type"}), 400

    try:
        content = upload.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        return jsonify({"error": "The uploaded file must be UTF-8 encoded CSV."}), 400

    result = run_import(kind, content)
    return jsonify(
        {
            "message": f"Import completed: {result.imported} succeeded, {result.failed} failed",
            "details": result.as_dict(),
        }
    )


def _passthrough_enabled() -> bool:
    return bool(current_app.config.get("ADMIN_PASSTHROUGH_ENABLED"))


@bp.get("/admin/passthrough")
@employee_required
@admin_required
def passthrough_status():
    enabled = _passthrough_enabled()
    return jsonify(
        {
            "enabled": enabled,
            "message": "Admin API is available" if enabled else "Admin API is disabled in this environment",
        }
    )


@bp.post("/admin/passthrough")
@employee_required
@admin_required
def passthrough():
    if not _passthrough_enabled():
        abort(403, description="Admin API only available in development")

    payload = _json_body()
    try:
        result = run_operation(str(payload.get("type") or ""), payload.get("params"))
    except PassthroughError as exc:
        db.session.rollback()
        return jsonify({"data": None, "error": str(exc)}), 400
    return jsonify(result)
