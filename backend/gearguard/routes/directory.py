from __future__ import annotations
from flask import Blueprint, request
from gearguard.decorators.auth import require_permissions
from gearguard.models.directory import Team, Staff
from gearguard.services import directory
from gearguard.services.identity import resolve_actor
from gearguard.utils.validation import parse_int
from gearguard import get_db

dir_bp = Blueprint('directory', __name__)


@dir_bp.get('/teams')
@require_permissions('DIR.READ')
def list_teams():
    return [_team_json(t) for t in directory.list_teams(get_db())]


@dir_bp.get('/staff')
@require_permissions('DIR.READ')
def list_staff():
    actor = resolve_actor()
    team_id = parse_int(request.args.get('team_id'), 'team_id')
    role = request.args.get('role') or None
    if not actor.is_super_admin:
        # squad members only see their own squad
        team_id = actor.team_id
    return [_staff_json(s) for s in directory.list_staff(get_db(), team_id=team_id, role=role)]


def _team_json(t: Team):
    return {'id': t.id, 'name': t.name, 'is_triage': bool(t.is_triage)}


def _staff_json(s: Staff):
    return {'id': s.id, 'name': s.name, 'role': s.role, 'team_id': s.team_id}
