"""General routes."""

from __future__ import annotations

from flask import Blueprint, redirect, render_template, url_for
from flask_login import current_user

from alliance_hub.identity import current_employee
from alliance_hub.loaders import load_dashboard
from alliance_hub.permissions import employee_required


bp = Blueprint("main", __name__)


@bp.get("/")
def index():
    if not current_user.is_authenticated:
        return redirect(url_for("auth.login"))
    return redirect(url_for("main.dashboard"))


@bp.get("/health")
def health():
    return {"status": "ok"}, 200


@bp.get("/dashboard")
@employee_required
def dashboard():
    return render_template("dashboard.html", **load_dashboard(current_employee()))
