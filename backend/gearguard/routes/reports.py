from __future__ import annotations
from flask import Blueprint, request
from gearguard.decorators.auth import require_permissions
from gearguard.services.identity import resolve_actor
from gearguard.services.queries import summary
from gearguard.utils.validation import parse_int
from gearguard import get_db

rpt_bp = Blueprint('reports', __name__)


@rpt_bp.get('/summary')
@require_permissions('RPT.READ')
def get_summary():
    """Per-team request counts plus global totals, scoped to what the caller may see."""
    equipment_id = parse_int(request.args.get('equipment_id'), 'equipment_id')
    return summary(get_db(), resolve_actor(), equipment_id=equipment_id)
