"""Audit logging helper."""

from __future__ import annotations

from typing import Any

from alliance_hub.auth_provider import principal_from_request
from alliance_hub.extensions import db
from alliance_hub.models import AuditLog


def log_audit(
    action: str,
    entity_type: str,
    entity_id: object | None,
    payload: dict[str, Any] | None = None,
) -> None:
    principal = principal_from_request()
    db.session.add(
        AuditLog(
            actor_principal_id=principal.id if principal is not None else None,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id) if entity_id is not None else None,
            payload_json=payload or {},
        )
    )
