from __future__ import annotations

from sqlalchemy import select

from alliance_hub.extensions import db
from alliance_hub.models import Employee, Principal, UserTypeName
from alliance_hub.security import verify_secret
from tests.conftest import STAFF


NEW_EMPLOYEE = {
    "first_name": "Casey",
    "last_name": "Jordan",
    "email": "casey.jordan@example.com",
    "user_type_id": 3,
    "hire_date": "2025-02-03",
}


def test_anonymous_api_calls_get_401(client):
    assert client.get("/api/employees").status_code == 401
    assert client.post("/api/employees", json=NEW_EMPLOYEE).status_code == 401
    assert client.delete(f"/api/employees/{STAFF[UserTypeName.EMPLOYEE]}").status_code == 401


def test_list_employees_includes_role_annotations(client, login):
    login(UserTypeName.EMPLOYEE)

    response = client.get("/api/employees")
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["role"] == "EMPLOYEE"
    assert payload["can_edit"] is False
    assert payload["current_employee"]["employee_id"] == STAFF[UserTypeName.EMPLOYEE]
    assert {row["employee_id"] for row in payload["records"]} == set(STAFF.values())


def test_hr_creates_employee_and_gets_password(client, login):
    login(UserTypeName.HR)

    response = client.post("/api/employees", json=NEW_EMPLOYEE)
    assert response.status_code == 201
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["employee"]["email"] == "casey.jordan@example.com"
    assert payload["employee"]["hire_date"] == "2025-02-03"

    with client.application.app_context():
        principal = db.session.execute(
            select(Principal).where(Principal.email == "casey.jordan@example.com")
        ).scalar_one()
        assert verify_secret(principal.password_hash, payload["temporary_password"]) is True


def test_non_editors_cannot_create(client, login):
    for role in (UserTypeName.MANAGER, UserTypeName.EMPLOYEE, UserTypeName.EXECUTIVE):
        client.post("/logout")
        login(role)
        response = client.post("/api/employees", json=NEW_EMPLOYEE)
        assert response.status_code == 403, role
        assert "error" in response.get_json()


def test_create_validates_required_fields(client, login):
    login(UserTypeName.ADMIN)
    response = client.post("/api/employees", json={"first_name": "Only"})
    assert response.status_code == 400
    assert response.get_json()["success"] is False


def test_create_rejects_non_string_fields_without_creating_a_login(client, login):
    login(UserTypeName.HR)

    for extra in ({"username": 123}, {"employee_number": ["E1"]}, {"email": 42}):
        response = client.post("/api/employees", json={**NEW_EMPLOYEE, **extra})
        assert response.status_code == 400, extra
        assert response.get_json()["success"] is False

    with client.application.app_context():
        stmt = select(Principal).where(Principal.email == "casey.jordan@example.com")
        assert db.session.execute(stmt).scalar_one_or_none() is None


def test_create_reports_duplicate_login(client, login):
    login(UserTypeName.ADMIN)
    response = client.post("/api/employees", json={**NEW_EMPLOYEE, "email": "hr@example.com"})
    assert response.status_code == 500
    assert response.get_json()["error"].startswith("Failed to create auth user")


def test_patch_with_password_reset(client, login):
    login(UserTypeName.ADMIN)
    employee_id = STAFF[UserTypeName.EMPLOYEE]

    response = client.patch(
        f"/api/employees/{employee_id}",
        json={"first_name": "Updated", "reset_password": True},
    )
    assert response.status_code == 200
    payload = response.get_json()
    assert payload["message"] == "Employee updated and password reset"
    assert payload["temporary_password"]

    client.post("/logout")
    relogin = client.post(
        "/login",
        data={"email": "employee@example.com", "password": payload["temporary_password"]},
        follow_redirects=False,
    )
    assert relogin.status_code == 302


def test_patch_unknown_employee_is_404(client, login):
    login(UserTypeName.HR)
    response = client.patch("/api/employees/9999", json={"first_name": "Ghost"})
    assert response.status_code == 404


def test_patch_duplicate_email_is_409(client, login):
    login(UserTypeName.HR)
    response = client.patch(f"/api/employees/{STAFF[UserTypeName.EMPLOYEE]}", json={"email": "admin@example.com"})
    assert response.status_code == 409


def test_patch_rejects_malformed_values_as_json(client, login):
    login(UserTypeName.HR)
    employee_id = STAFF[UserTypeName.EMPLOYEE]

    for body in ({"email": 5}, {"email": ""}, {"is_active": "yes"}, {"last_name": None}):
        response = client.patch(f"/api/employees/{employee_id}", json=body)
        assert response.status_code == 400, body
        assert response.is_json
        assert response.get_json()["success"] is False

    with client.application.app_context():
        employee = db.session.get(Employee, employee_id)
        assert employee.email == "employee@example.com"
        assert employee.is_active is True


def test_delete_deactivates_and_blocks_login(client, login):
    login(UserTypeName.ADMIN)
    employee_id = STAFF[UserTypeName.EMPLOYEE]

    response = client.delete(f"/api/employees/{employee_id}")
    assert response.status_code == 200
    assert response.get_json() == {"success": True, "message": "Employee deactivated successfully"}

    with client.application.app_context():
        employee = db.session.get(Employee, employee_id)
        assert employee is not None
        assert employee.is_active is False

    client.post("/logout")
    response = client.post(
        "/login",
        data={"email": "employee@example.com", "password": "password123"},
        follow_redirects=False,
    )
    assert response.status_code == 403


def test_employee_cannot_delete(client, login):
    login(UserTypeName.EMPLOYEE)
    response = client.delete(f"/api/employees/{STAFF[UserTypeName.HR]}")
    assert response.status_code == 403
