"""Database models."""

from __future__ import annotations

import enum
import uuid
from datetime import date, datetime, timezone
from typing import Any

from flask_login import UserMixin
from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from alliance_hub.extensions import db


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class UserTypeName(str, enum.Enum):
    ADMIN = "ADMIN"
    HR = "HR"
    MANAGER = "MANAGER"
    EMPLOYEE = "EMPLOYEE"
    EXECUTIVE = "EXECUTIVE"


# Reference ids used by the import template and provisioning defaults.
USER_TYPE_IDS: dict[UserTypeName, int] = {
    UserTypeName.ADMIN: 1,
    UserTypeName.MANAGER: 2,
    UserTypeName.EMPLOYEE: 3,
    UserTypeName.HR: 4,
    UserTypeName.EXECUTIVE: 5,
}
DEFAULT_USER_TYPE_ID = USER_TYPE_IDS[UserTypeName.EMPLOYEE]


class Principal(UserMixin, db.Model):
    """Login identity owned by the auth provider."""

    __tablename__ = "auth_principals"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)

    def get_id(self) -> str:
        return str(self.id)


class UserType(db.Model):
    __tablename__ = "user_types"

    user_type_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Address(db.Model):
    __tablename__ = "addresses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    address_type: Mapped[str] = mapped_column(String(32), nullable=False, default="HOME")
    street_line1: Mapped[str] = mapped_column(String(255), nullable=False)
    street_line2: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str] = mapped_column(String(128), nullable=False)
    state_province: Mapped[str] = mapped_column(String(64), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(32), nullable=False)
    country_code: Mapped[str] = mapped_column(String(2), nullable=False, default="US")
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    phone_type: Mapped[str | None] = mapped_column(String(16), nullable=True)


class JobTitle(db.Model):
    __tablename__ = "job_titles"

    job_title_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    department: Mapped[str | None] = mapped_column(String(128), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class TerminationReason(db.Model):
    __tablename__ = "termination_reasons"

    termination_reason_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)


class Employee(db.Model):
    __tablename__ = "employees"
    __table_args__ = (Index("ix_employees_last_first", "last_name", "first_name"),)

    employee_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    auth_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("auth_principals.id", ondelete="SET NULL"), nullable=True, unique=True
    )
    user_type_id: Mapped[int] = mapped_column(Integer, ForeignKey("user_types.user_type_id"), nullable=False)
    address_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True
    )
    username: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    first_name: Mapped[str] = mapped_column(String(128), nullable=False)
    last_name: Mapped[str] = mapped_column(String(128), nullable=False)
    employee_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    hire_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    termination_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    termination_reason_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("termination_reasons.termination_reason_id", ondelete="SET NULL"), nullable=True
    )
    home_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    work_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    mobile_phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    is_full_time: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc
    )

    user_type: Mapped[UserType] = relationship()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class Region(db.Model):
    __tablename__ = "regions"

    region_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Market(db.Model):
    __tablename__ = "markets"

    market_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    region_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("regions.region_id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class District(db.Model):
    __tablename__ = "districts"

    district_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    market_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("markets.market_id", ondelete="SET NULL"), nullable=True
    )
    manager_employee_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("employees.employee_id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    manager: Mapped[Employee | None] = relationship()


class Location(db.Model):
    __tablename__ = "locations"
    __table_args__ = (Index("ix_locations_district", "district_id"),)

    location_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    district_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("districts.district_id", ondelete="SET NULL"), nullable=True
    )
    manager_employee_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("employees.employee_id", ondelete="SET NULL"), nullable=True
    )
    address_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("addresses.id", ondelete="SET NULL"), nullable=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    store_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="America/Chicago")
    gl_code: Mapped[str | None] = mapped_column(String(64), nullable=True)
    in_footprint: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=now_utc, onupdate=now_utc
    )

    manager: Mapped[Employee | None] = relationship()


class Assignment(db.Model):
    __tablename__ = "employee_assignments"
    __table_args__ = (
        Index("ix_employee_assignments_employee_current", "employee_id", "is_current"),
        Index("ix_employee_assignments_supervisor_current", "supervisor_employee_id", "is_current"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    employee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("employees.employee_id", ondelete="CASCADE"), nullable=False
    )
    location_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("locations.location_id", ondelete="RESTRICT"), nullable=False
    )
    job_title_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("job_titles.job_title_id", ondelete="RESTRICT"), nullable=False
    )
    supervisor_employee_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("employees.employee_id", ondelete="SET NULL"), nullable=True
    )
    assignment_type: Mapped[str] = mapped_column(String(32), nullable=False, default="PRIMARY")
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)

    employee: Mapped[Employee] = relationship(foreign_keys=[employee_id])
    supervisor: Mapped[Employee | None] = relationship(foreign_keys=[supervisor_employee_id])
    location: Mapped[Location] = relationship()
    job_title: Mapped[JobTitle] = relationship()


class AuditLog(db.Model):
    __tablename__ = "audit_log"
    __table_args__ = (Index("ix_audit_log_entity", "entity_type", "entity_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    actor_principal_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("auth_principals.id", ondelete="SET NULL"), nullable=True
    )
    action: Mapped[str] = mapped_column(String(128), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(64), nullable=False)
    entity_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    payload_json: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=now_utc)
