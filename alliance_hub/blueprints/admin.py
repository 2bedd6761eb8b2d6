"""Admin pages."""

from __future__ import annotations

from flask import Blueprint, flash, render_template

from alliance_hub.bulk_import import run_import
from alliance_hub.forms import BulkImportForm
from alliance_hub.permissions import admin_required, employee_required


bp = Blueprint("admin", __name__)


@bp.route("/admin/import", methods=["GET", "POST"])
@employee_required
@admin_required
def bulk_import():
    form = BulkImportForm()
    result = None
    if form.validate_on_submit():
        raw = form.csv_file.data.read()
        try:
            content = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            flash("The uploaded file must be UTF-8 encoded CSV.", "danger")
            return render_template("admin/import.html", form=form, result=None), 400

        result = run_import(form.import_type.data, content)
        category = "success" if result.failed == 0 else "warning"
        flash(f"Imported {result.imported} rows, {result.failed} failed.", category)
    return render_template("admin/import.html", form=form, result=result)
