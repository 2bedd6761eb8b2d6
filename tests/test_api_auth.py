from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt
from sqlalchemy import select

from alliance_hub.extensions import db
from alliance_hub.models import Principal, UserTypeName
from tests.conftest import STAFF


def test_token_requires_valid_credentials(client):
    response = client.post("/api/auth/token", json={"email": "admin@example.com", "password": "wrong"})
    assert response.status_code == 401
    assert response.get_json() == {"error": "Invalid credentials"}


def test_token_authenticates_api_calls(client, bearer_headers):
    headers = bearer_headers(UserTypeName.HR)

    response = client.get("/api/employees", headers=headers)
    assert response.status_code == 200
    assert response.get_json()["role"] == "HR"
    assert response.get_json()["can_edit"] is True


def test_token_identity_endpoint(client, bearer_headers):
    response = client.get("/api/auth/employee", headers=bearer_headers(UserTypeName.MANAGER))
    assert response.status_code == 200
    employee = response.get_json()["employee"]
    assert employee["employee_id"] == STAFF[UserTypeName.MANAGER]
    assert employee["user_type"]["name"] == "MANAGER"


def test_identity_endpoint_rejects_missing_or_bad_tokens(client):
    assert client.get("/api/auth/employee").status_code == 401
    assert client.get("/api/auth/employee", headers={"Authorization": "Bearer not-a-token"}).status_code == 401
    assert client.get("/api/auth/employee", headers={"Authorization": "Basic abc"}).status_code == 401


def test_identity_endpoint_404_for_orphan_principal(client):
    response = client.post("/api/auth/token", json={"email": "orphan@example.com", "password": "password123"})
    token = response.get_json()["access_token"]

    response = client.get("/api/auth/employee", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 404


def test_expired_token_is_unauthorized(client, app):
    with app.app_context():
        principal = db.session.execute(select(Principal).where(Principal.email == "admin@example.com")).scalar_one()
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt.encode(
            {
                "sub": str(principal.id),
                "iat": int(past.timestamp()),
                "exp": int((past + timedelta(minutes=5)).timestamp()),
            },
            app.config["JWT_SECRET"],
            algorithm="HS256",
        )

    assert client.get("/api/employees", headers={"Authorization": f"Bearer {token}"}).status_code == 401
