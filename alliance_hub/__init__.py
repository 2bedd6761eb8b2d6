"""Flask application factory."""

from __future__ import annotations

from flask import Flask, g
from flask_login import current_user

from alliance_hub.blueprints.admin import bp as admin_bp
from alliance_hub.blueprints.api import bp as api_bp
from alliance_hub.blueprints.auth import bp as auth_bp
from alliance_hub.blueprints.employees import bp as employees_bp
from alliance_hub.blueprints.locations import bp as locations_bp
from alliance_hub.blueprints.main import bp as main_bp
from alliance_hub.config import Config
from alliance_hub.extensions import csrf, db, login_manager


def create_app(config_object: type[Config] = Config) -> Flask:
    app = Flask(__name__, instance_relative_config=False)
    app.config.from_object(config_object)

    db.init_app(app)
    login_manager.init_app(app)
    csrf.init_app(app)

    # Ensure model metadata is loaded for migrations and tests.
    from alliance_hub import models as _models  # noqa: F401

    app.register_blueprint(main_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(employees_bp)
    app.register_blueprint(locations_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(api_bp)
    csrf.exempt(api_bp)

    @app.before_request
    def reset_request_identity() -> None:
        g.pop("current_employee", None)

    @app.context_processor
    def inject_nav_profile() -> dict[str, object]:
        if not current_user.is_authenticated:
            return {}

        from alliance_hub.identity import current_employee
        from alliance_hub.permissions import can_edit, can_manage_employees, is_admin

        current = current_employee()
        profile_name = current.display_name if current is not None else ""
        profile_role = current.role if current is not None and current.role else "USER"

        if not profile_name:
            email = getattr(current_user, "email", "") or ""
            profile_name = email.split("@", 1)[0] if email else "User"
            profile_name = profile_name.strip() or "User"

        name_parts = [chunk for chunk in profile_name.split() if chunk]
        if len(name_parts) >= 2:
            profile_initials = (name_parts[0][0] + name_parts[1][0]).upper()
        else:
            profile_initials = profile_name[:2].upper()

        return {
            "nav_profile_name": profile_name,
            "nav_profile_role": profile_role,
            "nav_profile_initials": profile_initials or "U",
            "nav_can_edit": can_edit(current),
            "nav_can_manage_employees": can_manage_employees(current),
            "nav_is_admin": is_admin(current),
        }

    return app
