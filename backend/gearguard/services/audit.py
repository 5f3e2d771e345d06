from __future__ import annotations
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from gearguard.models.audit import AuditLog
from gearguard.services.identity import ActorContext


def add_audit(session: Session, actor: Optional[ActorContext], action: str, entity: Optional[str] = None,
              entity_id: Optional[Any] = None, meta: Optional[Dict[str, Any]] = None):
    """Persist an audit log entry within the given DB session.

    Parameters:
      action: short action code e.g. RQ.CREATE, RQ.ASSIGN, ADMIN.RESET
      entity: optional entity name (MaintenanceRequest, Team, etc.)
      entity_id: optional primary key, stored as string
      meta: additional JSON-safe dictionary (will be shallow copied)
    """
    log = AuditLog(
        actor_user_id=actor.id if actor else 'system',
        actor_role=actor.role if actor else None,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        meta=dict(meta or {}),
    )
    session.add(log)
    # No commit here; caller's transaction boundary controls durability.
    return log
