"""WTForms form classes."""

from __future__ import annotations

from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileRequired
from wtforms import (
    BooleanField,
    DateField,
    HiddenField,
    PasswordField,
    SelectField,
    StringField,
    SubmitField,
    TextAreaField,
)
from wtforms.validators import AnyOf, DataRequired, Email, Length, Optional

from alliance_hub.assignments import ASSIGNMENT_TYPES
from alliance_hub.models import DEFAULT_USER_TYPE_ID, USER_TYPE_IDS
from alliance_hub.organization import ORG_UNIT_KINDS


def _strip(value):
    return value.strip() if value else value


USER_TYPE_CHOICES = [(user_type_id, name.value.title()) for name, user_type_id in USER_TYPE_IDS.items()]


class LoginForm(FlaskForm):
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)], filters=[_strip])
    password = PasswordField("Password", validators=[DataRequired(), Length(max=255)])
    remember = BooleanField("Remember me")
    submit = SubmitField("Sign in")


class EmployeeCreateForm(FlaskForm):
    first_name = StringField("First name", validators=[DataRequired(), Length(max=128)], filters=[_strip])
    last_name = StringField("Last name", validators=[DataRequired(), Length(max=128)], filters=[_strip])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)], filters=[_strip])
    username = StringField("Username", validators=[Optional(), Length(max=128)], filters=[_strip])
    user_type_id = SelectField("Role", choices=USER_TYPE_CHOICES, coerce=int, default=DEFAULT_USER_TYPE_ID)
    hire_date = DateField("Hire date", validators=[Optional()])
    mobile_phone = StringField("Mobile phone", validators=[Optional(), Length(max=32)], filters=[_strip])
    employee_number = StringField("Employee number", validators=[Optional(), Length(max=64)], filters=[_strip])
    is_full_time = BooleanField("Full time", default=True)
    is_active = BooleanField("Active", default=True)
    temporary_password = PasswordField("Temporary password (optional)", validators=[Optional(), Length(min=8, max=255)])
    submit = SubmitField("Create employee")


class EmployeeEditForm(FlaskForm):
    first_name = StringField("First name", validators=[DataRequired(), Length(max=128)], filters=[_strip])
    last_name = StringField("Last name", validators=[DataRequired(), Length(max=128)], filters=[_strip])
    email = StringField("Email", validators=[DataRequired(), Email(), Length(max=255)], filters=[_strip])
    mobile_phone = StringField("Mobile phone", validators=[Optional(), Length(max=32)], filters=[_strip])
    is_active = BooleanField("Active", default=True)
    reset_password = BooleanField("Reset password")
    submit = SubmitField("Save changes")


class LocationEditForm(FlaskForm):
    name = StringField("Name", validators=[DataRequired(), Length(max=255)], filters=[_strip])
    store_number = StringField("Store number", validators=[Optional(), Length(max=32)], filters=[_strip])
    district_id = SelectField("District", choices=[], coerce=str, validators=[Optional()])
    phone = StringField("Phone", validators=[Optional(), Length(max=32)], filters=[_strip])
    is_active = BooleanField("Active", default=True)
    submit = SubmitField("Save location")


class LocationCreateForm(LocationEditForm):
    submit = SubmitField("Create location")


class AssignmentForm(FlaskForm):
    employee_id = SelectField("Employee", choices=[], coerce=int, validators=[DataRequired()])
    location_id = SelectField("Location", choices=[], coerce=int, validators=[DataRequired()])
    job_title_id = SelectField("Job title", choices=[], coerce=int, validators=[DataRequired()])
    supervisor_employee_id = SelectField("Supervisor", choices=[], coerce=str, validators=[Optional()])
    assignment_type = SelectField(
        "Assignment type",
        choices=[(value, value.title()) for value in ASSIGNMENT_TYPES],
        default="PRIMARY",
    )
    start_date = DateField("Start date", validators=[DataRequired()])
    end_date = DateField("End date", validators=[Optional()])
    is_primary = BooleanField("Primary assignment", default=True)
    is_current = BooleanField("Current", default=True)
    notes = TextAreaField("Notes", validators=[Optional(), Length(max=2000)], filters=[_strip])
    submit = SubmitField("Save assignment")


class OrgUnitForm(FlaskForm):
    kind = HiddenField("Type", validators=[AnyOf(ORG_UNIT_KINDS)], default="market")
    name = StringField("Name", validators=[DataRequired(), Length(max=255)], filters=[_strip])
    parent_id = SelectField("Parent", choices=[], coerce=str, validators=[Optional()])
    submit = SubmitField("Create")


class BulkImportForm(FlaskForm):
    import_type = SelectField(
        "Import type",
        choices=[("locations", "Locations"), ("employees", "Employees")],
        validators=[DataRequired()],
    )
    csv_file = FileField("CSV file", validators=[FileRequired()])
    submit = SubmitField("Import")


class DeactivateEmployeeForm(FlaskForm):
    submit = SubmitField("Deactivate employee")
