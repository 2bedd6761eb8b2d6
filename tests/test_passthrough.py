from __future__ import annotations

from alliance_hub.extensions import db
from alliance_hub.models import Employee, JobTitle, UserTypeName
from tests.conftest import STAFF


def _enable(app):
    app.config["ADMIN_PASSTHROUGH_ENABLED"] = True


def test_disabled_passthrough_is_forbidden(client, login):
    login(UserTypeName.ADMIN)

    status = client.get("/api/admin/passthrough")
    assert status.status_code == 200
    assert status.get_json()["enabled"] is False

    response = client.post("/api/admin/passthrough", json={"type": "select", "params": {"from": "employees"}})
    assert response.status_code == 403


def test_passthrough_requires_admin(client, login, app):
    _enable(app)
    login(UserTypeName.HR)
    response = client.post("/api/admin/passthrough", json={"type": "select", "params": {"from": "employees"}})
    assert response.status_code == 403


def test_select_with_filter(client, login, app):
    _enable(app)
    login(UserTypeName.ADMIN)

    response = client.post(
        "/api/admin/passthrough",
        json={
            "type": "select",
            "params": {"from": "employees", "select": "employee_id,email", "filter": {"user_type_id": 4}},
        },
    )
    assert response.status_code == 200
    assert response.get_json()["data"] == [{"employee_id": STAFF[UserTypeName.HR], "email": "hr@example.com"}]


def test_insert_update_delete_round(client, login, app):
    _enable(app)
    login(UserTypeName.ADMIN)

    inserted = client.post(
        "/api/admin/passthrough",
        json={"type": "insert", "params": {"table": "job_titles", "data": {"job_title_id": 50, "name": "Cashier"}}},
    )
    assert inserted.get_json()["count"] == 1

    updated = client.post(
        "/api/admin/passthrough",
        json={
            "type": "update",
            "params": {"table": "job_titles", "data": {"name": "Head Cashier"}, "match": {"column": "job_title_id", "value": 50}},
        },
    )
    assert updated.get_json()["count"] == 1
    with app.app_context():
        assert db.session.get(JobTitle, 50).name == "Head Cashier"

    deleted = client.post(
        "/api/admin/passthrough",
        json={"type": "delete", "params": {"table": "job_titles", "match": {"column": "job_title_id", "value": 50}}},
    )
    assert deleted.get_json()["count"] == 1


def test_rejects_unlisted_tables_and_employee_deletes(client, login, app):
    _enable(app)
    login(UserTypeName.ADMIN)

    response = client.post("/api/admin/passthrough", json={"type": "select", "params": {"from": "auth_principals"}})
    assert response.status_code == 400

    response = client.post(
        "/api/admin/passthrough",
        json={"type": "delete", "params": {"table": "employees", "match": {"column": "employee_id", "value": 2004}}},
    )
    assert response.status_code == 400
    with app.app_context():
        assert db.session.get(Employee, 2004) is not None

    response = client.post("/api/admin/passthrough", json={"type": "query", "params": {}})
    assert response.status_code == 400
    assert response.get_json()["error"] == "Invalid operation type"


def test_registered_function(client, login, app):
    _enable(app)
    login(UserTypeName.ADMIN)
    response = client.post(
        "/api/admin/passthrough",
        json={"type": "function", "params": {"name": "active_employee_count"}},
    )
    assert response.get_json()["data"] == [{"count": len(STAFF)}]


def test_malformed_params_are_rejected_as_bad_requests(client, login, app):
    _enable(app)
    login(UserTypeName.ADMIN)

    bodies = (
        {"type": "select", "params": {"from": "employees", "filter": []}},
        {"type": "select", "params": {"from": "employees", "filter": "user_type_id=4"}},
        {"type": "select", "params": {"from": "employees", "select": ["email"]}},
        {"type": "select", "params": ["employees"]},
        {"type": "function", "params": {"name": "active_employee_count", "args": [1]}},
    )
    for body in bodies:
        response = client.post("/api/admin/passthrough", json=body)
        assert response.status_code == 400, body
        assert "error" in response.get_json()
