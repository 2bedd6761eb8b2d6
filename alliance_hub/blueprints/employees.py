"""Employee directory pages."""

from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for
from sqlalchemy.exc import IntegrityError

from alliance_hub.assignments import (
    AssignmentNotFound,
    AssignmentValues,
    InvalidAssignment,
    create_assignment,
    update_assignment,
)
from alliance_hub.extensions import db
from alliance_hub.forms import AssignmentForm, DeactivateEmployeeForm, EmployeeCreateForm, EmployeeEditForm
from alliance_hub.identity import current_employee
from alliance_hub.loaders import (
    assignment_choices,
    load_assignments_page,
    load_employee_detail,
    load_employees_page,
)
from alliance_hub.models import Assignment, Employee
from alliance_hub.permissions import (
    can_view_employee,
    edit_required,
    employee_required,
    manage_employees_required,
)
from alliance_hub.provisioning import (
    EmployeeNotFound,
    NewEmployee,
    ProvisioningError,
    deactivate_employee,
    provision_employee,
    update_employee,
)


bp = Blueprint("employees", __name__)


@bp.get("/employees")
@employee_required
def employees_list():
    return render_template("employees/list.html", **load_employees_page(current_employee()))


@bp.route("/employees/new", methods=["GET", "POST"])
@employee_required
@edit_required
def employees_new():
    form = EmployeeCreateForm()
    if form.validate_on_submit():
        new_employee = NewEmployee(
            email=form.email.data,
            first_name=form.first_name.data,
            last_name=form.last_name.data,
            username=form.username.data or None,
            user_type_id=form.user_type_id.data,
            hire_date=form.hire_date.data,
            mobile_phone=form.mobile_phone.data or None,
            employee_number=form.employee_number.data or None,
            is_full_time=form.is_full_time.data,
            is_active=form.is_active.data,
        )
        try:
            provisioned = provision_employee(new_employee, password=form.temporary_password.data or None)
        except ProvisioningError as exc:
            flash(str(exc), "danger")
            return render_template("employees/new.html", form=form), 400

        flash(
            f"Employee created. Temporary password: {provisioned.password} (shown only once).",
            "success",
        )
        return redirect(url_for("employees.employee_detail", employee_id=provisioned.employee.employee_id))
    return render_template("employees/new.html", form=form)


@bp.get("/employees/<int:employee_id>")
@employee_required
def employee_detail(employee_id: int):
    current = current_employee()
    if not can_view_employee(current, employee_id):
        flash("You do not have access to that employee.", "warning")
        return redirect(url_for("employees.employees_list"))

    model = load_employee_detail(current, employee_id)
    if model is None:
        flash("Employee not found.", "warning")
        return redirect(url_for("employees.employees_list"))
    return render_template("employees/detail.html", deactivate_form=DeactivateEmployeeForm(), **model)


@bp.route("/employees/<int:employee_id>/edit", methods=["GET", "POST"])
@employee_required
@edit_required
def employee_edit(employee_id: int):
    employee = db.session.get(Employee, employee_id)
    if employee is None:
        flash("Employee not found.", "warning")
        return redirect(url_for("employees.employees_list"))

    form = EmployeeEditForm()
    if request.method == "GET":
        form.first_name.data = employee.first_name
        form.last_name.data = employee.last_name
        form.email.data = employee.email
        form.mobile_phone.data = employee.mobile_phone
        form.is_active.data = employee.is_active

    if form.validate_on_submit():
        changes = {
            "first_name": form.first_name.data,
            "last_name": form.last_name.data,
            "email": form.email.data,
            "mobile_phone": form.mobile_phone.data or None,
            "is_active": form.is_active.data,
        }
        try:
            result = update_employee(employee_id, changes, reset_password=form.reset_password.data)
        except EmployeeNotFound:
            flash("Employee not found.", "warning")
            return redirect(url_for("employees.employees_list"))
        except IntegrityError:
            db.session.rollback()
            flash("Another employee already uses that email address.", "danger")
            return render_template("employees/edit.html", form=form, employee=employee), 400
        except ProvisioningError as exc:
            flash(str(exc), "danger")
            return redirect(url_for("employees.employee_detail", employee_id=employee_id))

        if result.temporary_password:
            flash(f"Employee updated. New temporary password: {result.temporary_password}", "success")
        else:
            flash("Employee updated.", "success")
        return redirect(url_for("employees.employee_detail", employee_id=employee_id))

    return render_template("employees/edit.html", form=form, employee=employee)


@bp.post("/employees/<int:employee_id>/deactivate")
@employee_required
@edit_required
def employee_deactivate(employee_id: int):
    form = DeactivateEmployeeForm()
    if not form.validate_on_submit():
        flash("Invalid request.", "danger")
        return redirect(url_for("employees.employee_detail", employee_id=employee_id))

    try:
        deactivate_employee(employee_id)
    except EmployeeNotFound:
        flash("Employee not found.", "warning")
        return redirect(url_for("employees.employees_list"))

    flash("Employee deactivated.", "success")
    return redirect(url_for("employees.employee_detail", employee_id=employee_id))


@bp.get("/assignments")
@employee_required
@manage_employees_required
def assignments_list():
    return render_template("assignments/list.html", **load_assignments_page(current_employee()))


def _assignment_form(employee_choices: list[tuple[int, str]] | None = None) -> AssignmentForm:
    choices = assignment_choices()
    form = AssignmentForm()
    form.employee_id.choices = employee_choices or choices["employees"]
    form.location_id.choices = choices["locations"]
    form.job_title_id.choices = choices["job_titles"]
    form.supervisor_employee_id.choices = [("", "No supervisor")] + [
        (str(employee_id), label) for employee_id, label in choices["employees"]
    ]
    return form


def _assignment_values(form: AssignmentForm) -> AssignmentValues:
    supervisor = form.supervisor_employee_id.data
    return AssignmentValues(
        employee_id=form.employee_id.data,
        location_id=form.location_id.data,
        job_title_id=form.job_title_id.data,
        supervisor_employee_id=int(supervisor) if supervisor else None,
        assignment_type=form.assignment_type.data,
        start_date=form.start_date.data,
        end_date=form.end_date.data,
        is_current=form.is_current.data,
        is_primary=form.is_primary.data,
        notes=form.notes.data,
    )


@bp.route("/assignments/new", methods=["GET", "POST"])
@employee_required
@edit_required
def assignment_new():
    form = _assignment_form()
    if request.method == "GET":
        form.employee_id.data = request.args.get("employee_id", type=int)

    if form.validate_on_submit():
        values = _assignment_values(form)
        values.is_current = True
        try:
            create_assignment(values)
        except InvalidAssignment as exc:
            flash(str(exc), "danger")
            return render_template("assignments/form.html", form=form, assignment=None), 400
        flash("Assignment created.", "success")
        return redirect(url_for("employees.assignments_list"))
    return render_template("assignments/form.html", form=form, assignment=None)


@bp.route("/assignments/<int:assignment_id>/edit", methods=["GET", "POST"])
@employee_required
@edit_required
def assignment_edit(assignment_id: int):
    assignment = db.session.get(Assignment, assignment_id)
    if assignment is None:
        flash("Assignment not found.", "warning")
        return redirect(url_for("employees.assignments_list"))

    employee = assignment.employee
    form = _assignment_form([(employee.employee_id, f"{employee.last_name}, {employee.first_name}")])
    supervisor = assignment.supervisor
    if supervisor is not None and str(supervisor.employee_id) not in dict(form.supervisor_employee_id.choices):
        form.supervisor_employee_id.choices.append(
            (str(supervisor.employee_id), f"{supervisor.last_name}, {supervisor.first_name}")
        )
    if assignment.location_id not in dict(form.location_id.choices):
        form.location_id.choices.append((assignment.location_id, assignment.location.name))
    if request.method == "GET":
        form.employee_id.data = assignment.employee_id
        form.location_id.data = assignment.location_id
        form.job_title_id.data = assignment.job_title_id
        form.supervisor_employee_id.data = (
            str(assignment.supervisor_employee_id) if assignment.supervisor_employee_id is not None else ""
        )
        form.assignment_type.data = assignment.assignment_type
        form.start_date.data = assignment.start_date
        form.end_date.data = assignment.end_date
        form.is_primary.data = assignment.is_primary
        form.is_current.data = assignment.is_current
        form.notes.data = assignment.notes

    if form.validate_on_submit():
        try:
            update_assignment(assignment_id, _assignment_values(form))
        except AssignmentNotFound:
            flash("Assignment not found.", "warning")
            return redirect(url_for("employees.assignments_list"))
        except InvalidAssignment as exc:
            flash(str(exc), "danger")
            return render_template("assignments/form.html", form=form, assignment=assignment), 400
        flash("Assignment updated.", "success")
        return redirect(url_for("employees.assignments_list"))
    return render_template("assignments/form.html", form=form, assignment=assignment)
