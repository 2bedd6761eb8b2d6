"""Initial schema.

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from typing import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "0001_initial"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "auth_principals",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_auth_principals_email", "auth_principals", ["email"], unique=True)

    user_types = op.create_table(
        "user_types",
        sa.Column("user_type_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(length=32), nullable=False),
        sa.Column("description", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("user_type_id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "addresses",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("address_type", sa.String(length=32), nullable=False, server_default="HOME"),
        sa.Column("street_line1", sa.String(length=255), nullable=False),
        sa.Column("street_line2", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=128), nullable=False),
        sa.Column("state_province", sa.String(length=64), nullable=False),
        sa.Column("postal_code", sa.String(length=32), nullable=False),
        sa.Column("country_code", sa.String(length=2), nullable=False, server_default="US"),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("phone_type", sa.String(length=16), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "job_titles",
        sa.Column("job_title_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("department", sa.String(length=128), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("job_title_id"),
    )

    op.create_table(
        "termination_reasons",
        sa.Column("termination_reason_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.PrimaryKeyConstraint("termination_reason_id"),
    )

    op.create_table(
        "employees",
        sa.Column("employee_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("auth_user_id", sa.Uuid(), nullable=True),
        sa.Column("user_type_id", sa.Integer(), nullable=False),
        sa.Column("address_id", sa.Integer(), nullable=True),
        sa.Column("username", sa.String(length=128), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("first_name", sa.String(length=128), nullable=False),
        sa.Column("last_name", sa.String(length=128), nullable=False),
        sa.Column("employee_number", sa.String(length=64), nullable=True),
        sa.Column("hire_date", sa.Date(), nullable=True),
        sa.Column("termination_date", sa.Date(), nullable=True),
        sa.Column("termination_reason_id", sa.Integer(), nullable=True),
        sa.Column("home_phone", sa.String(length=32), nullable=True),
        sa.Column("work_phone", sa.String(length=32), nullable=True),
        sa.Column("mobile_phone", sa.String(length=32), nullable=True),
        sa.Column("is_full_time", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["auth_user_id"], ["auth_principals.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["user_type_id"], ["user_types.user_type_id"]),
        sa.ForeignKeyConstraint(["address_id"], ["addresses.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(
            ["termination_reason_id"], ["termination_reasons.termination_reason_id"], ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("employee_id"),
        sa.UniqueConstraint("auth_user_id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_employees_email", "employees", ["email"], unique=True)
    op.create_index("ix_employees_last_first", "employees", ["last_name", "first_name"], unique=False)

    op.create_table(
        "regions",
        sa.Column("region_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.PrimaryKeyConstraint("region_id"),
    )

    op.create_table(
        "markets",
        sa.Column("market_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("region_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(["region_id"], ["regions.region_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("market_id"),
    )

    op.create_table(
        "districts",
        sa.Column("district_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("market_id", sa.Integer(), nullable=True),
        sa.Column("manager_employee_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.ForeignKeyConstraint(["market_id"], ["markets.market_id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["manager_employee_id"], ["employees.employee_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("district_id"),
    )

    op.create_table(
        "locations",
        sa.Column("location_id", sa.Integer(), autoincrement=False, nullable=False),
        sa.Column("district_id", sa.Integer(), nullable=True),
        sa.Column("manager_employee_id", sa.Integer(), nullable=True),
        sa.Column("address_id", sa.Integer(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("store_number", sa.String(length=32), nullable=True),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=False, server_default="America/Chicago"),
        sa.Column("gl_code", sa.String(length=64), nullable=True),
        sa.Column("in_footprint", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["district_id"], ["districts.district_id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["manager_employee_id"], ["employees.employee_id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["address_id"], ["addresses.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("location_id"),
    )
    op.create_index("ix_locations_district", "locations", ["district_id"], unique=False)

    op.create_table(
        "employee_assignments",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("employee_id", sa.Integer(), nullable=False),
        sa.Column("location_id", sa.Integer(), nullable=False),
        sa.Column("job_title_id", sa.Integer(), nullable=False),
        sa.Column("supervisor_employee_id", sa.Integer(), nullable=True),
        sa.Column("assignment_type", sa.String(length=32), nullable=False, server_default="PRIMARY"),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("is_current", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["employee_id"], ["employees.employee_id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["location_id"], ["locations.location_id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["job_title_id"], ["job_titles.job_title_id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["supervisor_employee_id"], ["employees.employee_id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_employee_assignments_employee_current",
        "employee_assignments",
        ["employee_id", "is_current"],
        unique=False,
    )
    op.create_index(
        "ix_employee_assignments_supervisor_current",
        "employee_assignments",
        ["supervisor_employee_id", "is_current"],
        unique=False,
    )

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("actor_principal_id", sa.Uuid(), nullable=True),
        sa.Column("action", sa.String(length=128), nullable=False),
        sa.Column("entity_type", sa.String(length=64), nullable=False),
        sa.Column("entity_id", sa.String(length=64), nullable=True),
        sa.Column("payload_json", sa.JSON(), nullable=True),
        sa.Column("ts", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["actor_principal_id"], ["auth_principals.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_audit_log_entity", "audit_log", ["entity_type", "entity_id"], unique=False)

    op.bulk_insert(
        user_types,
        [
            {"user_type_id": 1, "name": "ADMIN", "description": "Full administrative access"},
            {"user_type_id": 2, "name": "MANAGER", "description": "Manages locations and direct reports"},
            {"user_type_id": 3, "name": "EMPLOYEE", "description": "Standard employee"},
            {"user_type_id": 4, "name": "HR", "description": "Human resources"},
            {"user_type_id": 5, "name": "EXECUTIVE", "description": "Executive read access"},
        ],
    )


def downgrade() -> None:
    op.drop_index("ix_audit_log_entity", table_name="audit_log")
    op.drop_table("audit_log")
    op.drop_index("ix_employee_assignments_supervisor_current", table_name="employee_assignments")
    op.drop_index("ix_employee_assignments_employee_current", table_name="employee_assignments")
    op.drop_table("employee_assignments")
    op.drop_index("ix_locations_district", table_name="locations")
    op.drop_table("locations")
    op.drop_table("districts")
    op.drop_table("markets")
    op.drop_table("regions")
    op.drop_index("ix_employees_last_first", table_name="employees")
    op.drop_index("ix_employees_email", table_name="employees")
    op.drop_table("employees")
    op.drop_table("termination_reasons")
    op.drop_table("job_titles")
    op.drop_table("addresses")
    op.drop_table("user_types")
    op.drop_index("ix_auth_principals_email", table_name="auth_principals")
    op.drop_table("auth_principals")
