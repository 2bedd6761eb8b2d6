"""Authentication routes."""

from __future__ import annotations

from urllib.parse import urlparse

from flask import Blueprint, flash, jsonify, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from alliance_hub.auth_provider import authenticate, create_access_token, principal_from_bearer_header
from alliance_hub.extensions import csrf
from alliance_hub.forms import LoginForm
from alliance_hub.identity import resolve_current_employee
from alliance_hub.serializers import employee_summary


bp = Blueprint("auth", __name__)


def _is_safe_next(target: str | None) -> bool:
    if not target:
        return False
    parsed = urlparse(target)
    return parsed.scheme == "" and parsed.netloc == "" and target.startswith("/")


@bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("main.dashboard"))

    form = LoginForm()
    if form.validate_on_submit():
        principal = authenticate(form.email.data, form.password.data)
        if principal is None:
            flash("Invalid credentials.", "danger")
            return render_template("auth/login.html", form=form), 401

        if not principal.is_active:
            flash("User is inactive.", "warning")
            return render_template("auth/login.html", form=form), 403

        login_user(principal, remember=form.remember.data)
        next_url = request.args.get("next")
        if _is_safe_next(next_url):
            return redirect(next_url)
        return redirect(url_for("main.dashboard"))

    return render_template("auth/login.html", form=form)


@bp.post("/logout")
@login_required
def logout():
    logout_user()
    flash("Signed out.", "info")
    return redirect(url_for("auth.login"))


@bp.post("/api/auth/token")
@csrf.exempt
def issue_token():
    payload = request.get_json(silent=True) or {}
    principal = authenticate(str(payload.get("email") or ""), str(payload.get("password") or ""))
    if principal is None:
        return jsonify({"error": "Invalid credentials"}), 401
    if not principal.is_active:
        return jsonify({"error": "User is inactive"}), 403

    token, expires_in = create_access_token(principal)
    return jsonify({"access_token": token, "token_type": "bearer", "expires_in": expires_in})


@bp.get("/api/auth/employee")
def token_employee():
    principal = principal_from_bearer_header(request.headers.get("Authorization"))
    if principal is None:
        return jsonify({"error": "Unauthorized"}), 401

    current = resolve_current_employee(principal)
    if current is None or current.employee is None:
        return jsonify({"error": "Employee not found"}), 404
    return jsonify({"employee": employee_summary(current.employee)})
