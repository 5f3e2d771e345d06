from __future__ import annotations
from flask import Blueprint, request, current_app
from gearguard.decorators.auth import require_permissions
from gearguard.decorators.audit import audit_log
from gearguard.config.settings import normalize_pagination
from gearguard.errors import AuthorizationError, ValidationError
from gearguard.models.maintenance_request import MaintenanceRequest
from gearguard.services.identity import resolve_actor
from gearguard.services.policy import has_permissions
from gearguard.services import transitions, queries
from gearguard import get_db

req_bp = Blueprint('requests', __name__)

ENTITY = 'MaintenanceRequest'
AUDITED_FIELDS = ['status', 'team_id', 'technician_id', 'duration_hours', 'picked_up_by_user_id', 'completed_by_user_id']


@req_bp.get('')
@require_permissions('RQ.READ')
def list_requests():
    session = get_db()
    actor = resolve_actor()
    flt = queries.build_request_filter(request.args)
    limit = None
    offset = 0
    if request.args.get('limit') is not None or request.args.get('offset') is not None:
        try:
            limit, offset = normalize_pagination(
                request.args.get('limit'), request.args.get('offset'),
                current_app.config['DEFAULT_LIMIT'], current_app.config['MAX_LIMIT'],
            )
        except ValueError as e:
            raise ValidationError(str(e))
    rows = queries.list_requests(session, actor, flt, sort=request.args.get('sort'), limit=limit, offset=offset)
    now = transitions.utcnow()
    return [queries.request_view(r, now) for r in rows]


@req_bp.get('/<int:request_id>')
@require_permissions('RQ.READ')
def get_request(request_id: int):
    session = get_db()
    req = queries.get_visible_request(session, resolve_actor(), request_id)
    return queries.request_view(req)


@req_bp.post('')
@require_permissions('RQ.CREATE')
@audit_log('RQ.CREATE', entity=ENTITY, entity_id_key='id', meta_keys=['status', 'team_id', 'equipment_id', 'type', 'technician_id', 'follow_up_of_request_id'])
def create_request():
    session = get_db()
    data = request.get_json(silent=True) or {}
    follow_up_of = data.get('followUpOf', data.get('follow_up_of'))
    if follow_up_of not in (None, ''):
        # follow-up creation is a supervisor capability on top of plain creation
        _require_perm('RQ.FOLLOWUP')
    req = transitions.create_request(
        session,
        resolve_actor(),
        subject=data.get('subject'),
        equipment_id=data.get('equipment_id'),
        request_type=data.get('type'),
        team_id=data.get('team_id'),
        scheduled_date=data.get('scheduled_date'),
        technician_id=data.get('technician_id'),
        follow_up_of=follow_up_of,
    )
    return queries.request_view(req), 201


@req_bp.patch('/<int:request_id>/status')
@require_permissions('RQ.STATUS')
@audit_log('RQ.STATUS', entity=ENTITY, entity_id_key='id', diff_keys=AUDITED_FIELDS, pre_fetch=lambda a, kw: _snapshot(kw.get('request_id')), meta_keys=['status', 'duration_hours'])
def update_status(request_id: int):
    session = get_db()
    data = request.get_json(silent=True) or {}
    req = transitions.update_status(
        session,
        resolve_actor(),
        request_id,
        data.get('status'),
        duration_hours=data.get('duration_hours'),
        scrap_policy=current_app.config['SCRAP_EQUIPMENT_POLICY'],
    )
    return queries.request_view(req)


@req_bp.patch('/<int:request_id>/assign')
@require_permissions('RQ.ASSIGN')
@audit_log('RQ.ASSIGN', entity=ENTITY, entity_id_key='id', diff_keys=AUDITED_FIELDS, pre_fetch=lambda a, kw: _snapshot(kw.get('request_id')), meta_keys=['technician_id', 'status'])
def assign_technician(request_id: int):
    session = get_db()
    data = request.get_json(silent=True) or {}
    req = transitions.assign_technician(session, resolve_actor(), request_id, data.get('technician_id'))
    return queries.request_view(req)


@req_bp.patch('/<int:request_id>/team')
@require_permissions('RQ.ROUTE')
@audit_log('RQ.ROUTE', entity=ENTITY, entity_id_key='id', diff_keys=AUDITED_FIELDS, pre_fetch=lambda a, kw: _snapshot(kw.get('request_id')), meta_keys=['team_id'])
def route_team(request_id: int):
    session = get_db()
    data = request.get_json(silent=True) or {}
    req = transitions.route_team(session, resolve_actor(), request_id, data.get('team_id'))
    return queries.request_view(req)


def _require_perm(code: str):
    if not has_permissions(code):
        raise AuthorizationError('Missing permission', meta={'required': [code]})


def _snapshot(request_id: int):
    session = get_db()
    r = session.get(MaintenanceRequest, request_id)
    if not r:
        return {}
    return {k: getattr(r, k) for k in AUDITED_FIELDS}
