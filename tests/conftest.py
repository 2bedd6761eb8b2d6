from __future__ import annotations

from datetime import date
from typing import Iterator
import uuid

import pytest
from sqlalchemy.pool import StaticPool

from alliance_hub import create_app
from alliance_hub.config import Config
from alliance_hub.extensions import db
from alliance_hub.models import (
    USER_TYPE_IDS,
    Assignment,
    District,
    Employee,
    JobTitle,
    Location,
    Market,
    Principal,
    Region,
    UserType,
    UserTypeName,
)
from alliance_hub.security import hash_secret


PASSWORD = "password123"
PASSWORD_HASH = hash_secret(PASSWORD)

STAFF = {
    UserTypeName.ADMIN: 2001,
    UserTypeName.HR: 2002,
    UserTypeName.MANAGER: 2003,
    UserTypeName.EMPLOYEE: 2004,
    UserTypeName.EXECUTIVE: 2005,
}
MAIN_LOCATION_ID = 100
SECOND_LOCATION_ID = 101
STORE_MANAGER_TITLE_ID = 10
ASSOCIATE_TITLE_ID = 11


class TestConfig(Config):
    TESTING = True
    WTF_CSRF_ENABLED = False
    SQLALCHEMY_DATABASE_URI = "sqlite+pysqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {"check_same_thread": False},
        "poolclass": StaticPool,
    }
    JWT_SECRET = "test-jwt-secret"
    ADMIN_PASSTHROUGH_ENABLED = False


def email_for(role: UserTypeName) -> str:
    return f"{role.value.lower()}@example.com"


@pytest.fixture()
def app() -> Iterator:
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()

        db.session.add_all(
            [UserType(user_type_id=user_type_id, name=name.value) for name, user_type_id in USER_TYPE_IDS.items()]
        )
        db.session.add_all(
            [
                JobTitle(job_title_id=STORE_MANAGER_TITLE_ID, name="Store Manager", department="Retail"),
                JobTitle(job_title_id=ASSOCIATE_TITLE_ID, name="Sales Associate", department="Retail"),
                Region(region_id=1, name="Central"),
                Market(market_id=1, region_id=1, name="Dallas"),
                District(district_id=1, market_id=1, name="North Dallas"),
                District(district_id=2, market_id=1, name="South Dallas"),
            ]
        )
        db.session.flush()

        for role, employee_id in STAFF.items():
            principal = Principal(id=uuid.uuid4(), email=email_for(role), password_hash=PASSWORD_HASH, is_active=True)
            db.session.add(principal)
            db.session.flush()
            db.session.add(
                Employee(
                    employee_id=employee_id,
                    auth_user_id=principal.id,
                    user_type_id=USER_TYPE_IDS[role],
                    username=role.value.lower(),
                    email=email_for(role),
                    first_name=role.value.title(),
                    last_name="Tester",
                    is_active=True,
                )
            )
        db.session.add(
            Principal(id=uuid.uuid4(), email="orphan@example.com", password_hash=PASSWORD_HASH, is_active=True)
        )
        db.session.flush()

        db.session.add_all(
            [
                Location(
                    location_id=MAIN_LOCATION_ID,
                    district_id=1,
                    manager_employee_id=STAFF[UserTypeName.MANAGER],
                    name="Main Street",
                    store_number="S100",
                ),
                Location(location_id=SECOND_LOCATION_ID, district_id=2, name="Elm Street", store_number="S101"),
            ]
        )
        db.session.flush()
        db.session.add_all(
            [
                Assignment(
                    employee_id=STAFF[UserTypeName.MANAGER],
                    location_id=MAIN_LOCATION_ID,
                    job_title_id=STORE_MANAGER_TITLE_ID,
                    start_date=date(2024, 1, 1),
                    is_current=True,
                    is_primary=True,
                ),
                Assignment(
                    employee_id=STAFF[UserTypeName.EMPLOYEE],
                    location_id=MAIN_LOCATION_ID,
                    job_title_id=ASSOCIATE_TITLE_ID,
                    supervisor_employee_id=STAFF[UserTypeName.MANAGER],
                    start_date=date(2024, 3, 1),
                    is_current=True,
                    is_primary=True,
                ),
            ]
        )
        db.session.commit()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def login(client):
    def _login(role: UserTypeName | str):
        email = email_for(role) if isinstance(role, UserTypeName) else role
        response = client.post("/login", data={"email": email, "password": PASSWORD}, follow_redirects=False)
        assert response.status_code == 302
        return response

    return _login


@pytest.fixture()
def bearer_headers(client):
    def _headers(role: UserTypeName) -> dict[str, str]:
        response = client.post("/api/auth/token", json={"email": email_for(role), "password": PASSWORD})
        assert response.status_code == 200
        return {"Authorization": f"Bearer {response.get_json()['access_token']}"}

    return _headers
