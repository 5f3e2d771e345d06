from __future__ import annotations
from typing import Set
from flask_jwt_extended import get_jwt
from sqlalchemy import and_, or_

from gearguard.errors import AuthorizationError
from gearguard.models.maintenance_request import MaintenanceRequest, Unrouted
from gearguard.services.identity import ActorContext


def current_permissions() -> Set[str]:
    claims = get_jwt()
    return set(claims.get('perms', []))


def has_permissions(*codes: str) -> bool:
    perms = current_permissions()
    return all(c in perms for c in codes)


def assert_role(actor: ActorContext, *roles: str, action: str = 'action'):
    if actor.role not in roles:
        raise AuthorizationError(f'{actor.role} may not perform {action}', meta={'role': actor.role})


def assert_supervisor(actor: ActorContext, action: str = 'action'):
    if not actor.is_supervisor:
        raise AuthorizationError(f'{actor.role} may not perform {action}', meta={'role': actor.role})


def assert_team_access(actor: ActorContext, team_id: int):
    """Team leads only act inside their own squad. Other roles are checked elsewhere."""
    if actor.is_team_lead and actor.team_id != team_id:
        raise AuthorizationError('Team access denied', meta={'team_id': team_id})


def assert_can_route(actor: ActorContext, req: MaintenanceRequest):
    assert_supervisor(actor, action='team routing')
    # leads may claim unrouted work from triage, or push their own work elsewhere
    if actor.is_team_lead and not isinstance(req.routing, Unrouted):
        assert_team_access(actor, req.team_id)


def assert_technician_scope(actor: ActorContext, req: MaintenanceRequest):
    """Technicians act on their own tickets or on unassigned tickets of their squad."""
    if not actor.is_technician:
        return
    if req.technician_id is not None:
        if req.technician_id != actor.id:
            raise AuthorizationError('Request is assigned to another technician', meta={'technician_id': req.technician_id})
        return
    if req.team_id != actor.team_id:
        raise AuthorizationError('Team access denied', meta={'team_id': req.team_id})


def scope_requests(query, actor: ActorContext):
    """Overlay role visibility onto a select of MaintenanceRequest."""
    if actor.is_super_admin:
        return query
    if actor.is_team_lead:
        return query.where(MaintenanceRequest.team_id == actor.team_id)
    return query.where(
        or_(
            MaintenanceRequest.technician_id == actor.id,
            and_(MaintenanceRequest.technician_id.is_(None), MaintenanceRequest.team_id == actor.team_id),
        )
    )


def can_view(actor: ActorContext, req: MaintenanceRequest) -> bool:
    if actor.is_super_admin:
        return True
    if actor.is_team_lead:
        return req.team_id == actor.team_id
    return req.technician_id == actor.id or (req.technician_id is None and req.team_id == actor.team_id)
