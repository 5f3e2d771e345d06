from __future__ import annotations
from flask import Blueprint
from gearguard.decorators.auth import require_permissions
from gearguard.decorators.audit import audit_log
from gearguard.services.admin import reset_transactional_data
from gearguard.services.identity import resolve_actor
from gearguard import get_db

admin_bp = Blueprint('admin', __name__)


@admin_bp.delete('/reset')
@require_permissions('ADMIN.RESET')
@audit_log('ADMIN.RESET', entity='MaintenanceRequest', meta_keys=['removed'])
def reset():
    removed = reset_transactional_data(get_db(), resolve_actor())
    return {'status': 'reset', 'removed': removed}
