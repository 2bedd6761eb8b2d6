"""Flask extension instances and login loaders."""

from __future__ import annotations

import uuid

from flask import jsonify, redirect, request, url_for
from flask_login import LoginManager
from flask_sqlalchemy import SQLAlchemy
from flask_wtf import CSRFProtect


db = SQLAlchemy()
login_manager = LoginManager()
csrf = CSRFProtect()

login_manager.login_view = "auth.login"
login_manager.login_message_category = "warning"


def wants_json_response() -> bool:
    return request.path.startswith("/api/")


@login_manager.unauthorized_handler
def handle_unauthorized():
    if wants_json_response():
        return jsonify({"error": "Unauthorized"}), 401
    return redirect(url_for("auth.login", next=request.path))


@login_manager.user_loader
def load_user(user_id: str):
    from alliance_hub.models import Principal

    try:
        parsed = uuid.UUID(user_id)
    except ValueError:
        return None
    principal = db.session.get(Principal, parsed)
    if principal is None or not principal.is_active:
        return None
    return principal


@login_manager.request_loader
def load_user_from_request(incoming_request):
    from alliance_hub.auth_provider import principal_from_bearer_header

    return principal_from_bearer_header(incoming_request.headers.get("Authorization"))
