"""Auth provider: principals, credentials and bearer tokens.

Principals are owned by this module. The rest of the application only reads
them through :func:`principal_from_request` and changes them through the
``*_principal`` functions, each of which commits on its own.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app, has_request_context
from flask_login import current_user
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from alliance_hub.extensions import db
from alliance_hub.models import Principal
from alliance_hub.security import hash_secret, verify_secret

JWT_ALGORITHM = "HS256"


class AuthProviderError(Exception):
    """Raised when the auth provider rejects or fails an operation."""


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def principal_from_request() -> Principal | None:
    """Return the signed-in principal, or ``None`` when there is none.

    Session cookies and bearer tokens are both resolved by Flask-Login, so
    anonymous, expired and revoked credentials all come back as ``None``.
    """
    if not has_request_context() or not current_user.is_authenticated:
        return None
    return current_user._get_current_object()


def authenticate(email: str, password: str) -> Principal | None:
    stmt = select(Principal).where(Principal.email == _normalize_email(email))
    principal = db.session.execute(stmt).scalar_one_or_none()
    if principal is None or not verify_secret(principal.password_hash, password or ""):
        return None
    return principal


def create_access_token(principal: Principal) -> tuple[str, int]:
    now = datetime.now(timezone.utc)
    expires_in = int(current_app.config["JWT_ACCESS_TTL_MINUTES"]) * 60
    payload = {
        "sub": str(principal.id),
        "email": principal.email,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    token = jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm=JWT_ALGORITHM)
    return token, expires_in


def _extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    return parts[1].strip() or None


def principal_from_bearer_header(authorization: str | None) -> Principal | None:
    token = _extract_bearer_token(authorization)
    if token is None:
        return None
    try:
        payload = jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None

    try:
        principal_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        return None

    principal = db.session.get(Principal, principal_id)
    if principal is None or not principal.is_active:
        return None
    return principal


def _get_principal(principal_id: uuid.UUID) -> Principal:
    principal = db.session.get(Principal, principal_id)
    if principal is None:
        raise AuthProviderError(f"Principal {principal_id} not found.")
    return principal


def _commit(failure_message: str) -> None:
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise AuthProviderError(f"{failure_message}: {exc}") from exc


def create_principal(email: str, password: str) -> uuid.UUID:
    normalized_email = _normalize_email(email)
    if not normalized_email:
        raise AuthProviderError("Email is required.")
    if not password:
        raise AuthProviderError("Password is required.")

    existing = db.session.execute(select(Principal.id).where(Principal.email == normalized_email)).scalar_one_or_none()
    if existing is not None:
        raise AuthProviderError("A user with this email address has already been registered.")

    principal = Principal(email=normalized_email, password_hash=hash_secret(password), is_active=True)
    db.session.add(principal)
    _commit("Could not create principal")
    return principal.id


def delete_principal(principal_id: uuid.UUID) -> None:
    principal = _get_principal(principal_id)
    db.session.delete(principal)
    _commit("Could not delete principal")


def update_principal_email(principal_id: uuid.UUID, email: str) -> None:
    normalized_email = _normalize_email(email)
    principal = _get_principal(principal_id)
    clash = db.session.execute(
        select(Principal.id).where(Principal.email == normalized_email, Principal.id != principal_id)
    ).scalar_one_or_none()
    if clash is not None:
        raise AuthProviderError("Email address already in use by another user.")
    principal.email = normalized_email
    _commit("Could not update principal email")


def update_principal_password(principal_id: uuid.UUID, password: str) -> None:
    if not password:
        raise AuthProviderError("Password is required.")
    principal = _get_principal(principal_id)
    principal.password_hash = hash_secret(password)
    _commit("Could not update principal password")


def disable_principal(principal_id: uuid.UUID) -> None:
    principal = _get_principal(principal_id)
    principal.is_active = False
    _commit("Could not disable principal")
