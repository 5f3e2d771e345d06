"""Transition engine: the only writer of request status, assignment and routing.

Each operation reads the current row, validates it against the actor and the
directory, then mutates it in the caller's session. Nothing here commits; the
HTTP layer wraps each call in one unit of work (see
``gearguard.decorators.audit.audit_log``) so a rejected call leaves no partial
write behind.

Check order matters and is the same everywhere: existence, terminal
immutability, actor authorization, role workflow, traceability, then
referential validation of the payload.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Optional
from sqlalchemy.orm import Session

from gearguard.config.settings import SCRAP_POLICY_ANY
from gearguard.constants.roles import ROLE_SUPER_ADMIN
from gearguard.errors import (
    AuthorizationError, NotFoundError, TraceabilityError, ValidationError, WorkflowViolationError,
)
from gearguard.models.directory import Team, Staff
from gearguard.models.equipment import Equipment
from gearguard.models.maintenance_request import MaintenanceRequest, Unrouted, routing_for_team
from gearguard.services import directory
from gearguard.services.identity import ActorContext
from gearguard.services.policy import assert_supervisor, assert_team_access, assert_technician_scope, assert_can_route
from gearguard.utils.fsm import TransitionValidator
from gearguard.utils.validation import validate_status, require_fields, parse_int, parse_iso_date, parse_duration

logger = logging.getLogger(__name__)

R = MaintenanceRequest

REQUEST_FSM = TransitionValidator({
    # new -> terminal is only reachable once pickup is stamped (checked separately)
    R.STATUS_NEW: {R.STATUS_IN_PROGRESS, R.STATUS_REPAIRED, R.STATUS_SCRAP},
    R.STATUS_IN_PROGRESS: {R.STATUS_REPAIRED, R.STATUS_SCRAP},
    R.STATUS_REPAIRED: set(),
    R.STATUS_SCRAP: set(),
})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def get_request(session: Session, request_id: int) -> MaintenanceRequest:
    req = session.get(MaintenanceRequest, request_id)
    if req is None:
        raise NotFoundError(f'Request {request_id} not found', meta={'request_id': request_id})
    return req


def _assert_mutable(req: MaintenanceRequest, target: Optional[str] = None):
    if req.is_terminal:
        # any edge out of a terminal node is refused by the FSM as immutable
        REQUEST_FSM.assert_can_transition(req.status, target or req.status)


def _assignable_staff(session: Session, team: Team, technician_id: Any) -> Staff:
    staff = directory.get_staff(session, technician_id)
    if staff.role == ROLE_SUPER_ADMIN:
        raise ValidationError('Only squad members can be assigned', meta={'technician_id': staff.id})
    if isinstance(routing_for_team(team), Unrouted):
        return staff
    if staff.team_id != team.id:
        raise ValidationError(
            'Technician must belong to the same maintenance team',
            meta={'technician_id': staff.id, 'technician_team_id': staff.team_id, 'team_id': team.id},
        )
    return staff


def _assert_may_assign(actor: ActorContext, team_id: int, technician_id: str, current_technician_id: Optional[str] = None):
    assert_team_access(actor, team_id)
    if actor.is_technician:
        if technician_id != actor.id:
            raise AuthorizationError('Technicians may only pick up work for themselves')
        if current_technician_id is not None and current_technician_id != actor.id:
            raise AuthorizationError('Request is assigned to another technician')


def _stamp_pickup(req: MaintenanceRequest, actor: ActorContext, now: datetime):
    # first pickup wins; reassignment keeps the original stamp
    if req.picked_up_at is None:
        req.picked_up_at = now
        req.picked_up_by_user_id = actor.id


def create_request(session: Session, actor: ActorContext, *, subject: Any, equipment_id: Any, request_type: Any,
                   team_id: Any = None, scheduled_date: Any = None, technician_id: Any = None,
                   follow_up_of: Any = None) -> MaintenanceRequest:
    require_fields(
        {'subject': subject, 'equipment_id': equipment_id, 'team_id': team_id, 'type': request_type},
        'subject', 'equipment_id', 'team_id', 'type',
    )
    subject = str(subject).strip()
    if not subject:
        raise ValidationError('subject required', meta={'missing': ['subject']})
    validate_status(request_type, R.ALL_TYPES, field_name='type')
    sched = parse_iso_date(scheduled_date, 'scheduled_date')
    if request_type == R.TYPE_PREVENTIVE and sched is None:
        raise ValidationError('scheduled_date required for preventive requests', meta={'missing': ['scheduled_date']})
    equipment_pk = parse_int(equipment_id, 'equipment_id')
    team_pk = parse_int(team_id, 'team_id')
    follow_up_pk = parse_int(follow_up_of, 'follow_up_of')

    if follow_up_pk is not None:
        assert_supervisor(actor, action='follow-up creation')
        parent = get_request(session, follow_up_pk)
        if not parent.is_terminal:
            raise ValidationError(
                'Follow-ups can only reference closed requests',
                meta={'follow_up_of': parent.id, 'status': parent.status},
            )

    equipment = session.get(Equipment, equipment_pk)
    if equipment is None:
        raise NotFoundError(f'Equipment {equipment_pk} not found', meta={'equipment_id': equipment_pk})
    team = directory.get_team(session, team_pk)

    now = utcnow()
    req = MaintenanceRequest(
        subject=subject,
        equipment_id=equipment.id,
        team_id=team.id,
        type=request_type,
        status=R.STATUS_NEW,
        scheduled_date=sched,
        created_by_user_id=actor.id,
        created_at=now,
        follow_up_of_request_id=follow_up_pk,
    )
    req.team = team
    if technician_id not in (None, ''):
        technician_id = str(technician_id)
        _assert_may_assign(actor, team.id, technician_id)
        staff = _assignable_staff(session, team, technician_id)
        req.technician_id = staff.id
        _stamp_pickup(req, actor, now)
    session.add(req)
    session.flush()
    logger.info('Request %s created by %s for team %s (%s)', req.id, actor.id, team.id, request_type)
    return req


def assign_technician(session: Session, actor: ActorContext, request_id: int, technician_id: Any) -> MaintenanceRequest:
    req = get_request(session, request_id)
    _assert_mutable(req, R.STATUS_IN_PROGRESS)
    if technician_id in (None, ''):
        raise ValidationError('technician_id required', meta={'missing': ['technician_id']})
    technician_id = str(technician_id)
    _assert_may_assign(actor, req.team_id, technician_id, req.technician_id)
    staff = _assignable_staff(session, req.team, technician_id)

    previous = req.technician_id
    now = utcnow()
    req.technician_id = staff.id
    req.status = R.STATUS_IN_PROGRESS
    _stamp_pickup(req, actor, now)
    session.flush()
    logger.info('Request %s assigned %s -> %s by %s', req.id, previous, staff.id, actor.id)
    return req


def update_status(session: Session, actor: ActorContext, request_id: int, new_status: Any,
                  duration_hours: Any = None, scrap_policy: str = SCRAP_POLICY_ANY) -> MaintenanceRequest:
    if new_status in (None, ''):
        raise ValidationError('status required', meta={'missing': ['status']})
    validate_status(new_status, R.ALL_STATUSES)
    hours = parse_duration(duration_hours)
    req = get_request(session, request_id)
    current = req.status

    if req.is_terminal and new_status != current:
        _assert_mutable(req, new_status)

    assert_team_access(actor, req.team_id)
    assert_technician_scope(actor, req)
    if req.is_terminal:
        # idempotent replay of the closing call, only for those allowed to make it
        return req
    if actor.is_technician:
        if new_status == R.STATUS_NEW:
            raise WorkflowViolationError('Technicians cannot reset a request to new')
        if current == R.STATUS_NEW and new_status in R.TERMINAL_STATUSES:
            raise WorkflowViolationError('Technicians must start work before closing it')

    if new_status != current:
        REQUEST_FSM.assert_can_transition(current, new_status)
    if new_status in R.TERMINAL_STATUSES and req.picked_up_at is None:
        raise TraceabilityError('Request must be picked up before completion', meta={'request_id': req.id})

    now = utcnow()
    req.status = new_status
    if hours is not None:
        req.duration_hours = hours
    if new_status == R.STATUS_IN_PROGRESS:
        _stamp_pickup(req, actor, now)
    if new_status in R.TERMINAL_STATUSES and new_status != current:
        req.completed_at = now
        req.completed_by_user_id = actor.id
    if new_status == R.STATUS_SCRAP and new_status != current:
        _scrap_equipment(session, actor, req, scrap_policy)
    session.flush()
    logger.info('Request %s status %s -> %s by %s', req.id, current, new_status, actor.id)
    return req


def _scrap_equipment(session: Session, actor: ActorContext, req: MaintenanceRequest, scrap_policy: str):
    if scrap_policy != SCRAP_POLICY_ANY and not actor.is_super_admin:
        logger.info('Request %s scrapped by %s; equipment %s left active by policy', req.id, actor.role, req.equipment_id)
        return
    equipment = session.get(Equipment, req.equipment_id)
    if equipment is not None and not equipment.is_scrapped:
        equipment.is_scrapped = True
        logger.info('Equipment %s marked scrapped via request %s', equipment.id, req.id)


def route_team(session: Session, actor: ActorContext, request_id: int, new_team_id: Any) -> MaintenanceRequest:
    req = get_request(session, request_id)
    _assert_mutable(req)
    assert_can_route(actor, req)
    team_pk = parse_int(new_team_id, 'team_id')
    if team_pk is None:
        raise ValidationError('team_id required', meta={'missing': ['team_id']})
    team = directory.get_team(session, team_pk)
    previous = req.team_id
    req.team_id = team.id
    req.team = team
    session.flush()
    logger.info('Request %s routed team %s -> %s by %s', req.id, previous, team.id, actor.id)
    return req

__all__ = ['REQUEST_FSM', 'create_request', 'assign_technician', 'update_status', 'route_team', 'get_request', 'utcnow']
