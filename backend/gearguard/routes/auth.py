from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity, get_jwt
from gearguard.errors import ValidationError
from gearguard.services import directory
from gearguard.services.identity import issue_token
from gearguard import get_db

auth_bp = Blueprint('auth', __name__)


@auth_bp.post('/token')
def token():
    """Issue a token for a directory staff member.

    Role and team claims are read from the staff table; the body only names
    who is acting. Credential checks belong to the deployment's identity
    provider in front of this service.
    """
    data = request.get_json(silent=True) or {}
    staff_id = data.get('staff_id')
    if staff_id in (None, ''):
        raise ValidationError('staff_id required', meta={'missing': ['staff_id']})
    staff = directory.get_staff(get_db(), str(staff_id))
    return {
        'access_token': issue_token(staff),
        'staff': {'id': staff.id, 'name': staff.name, 'role': staff.role, 'team_id': staff.team_id},
    }


@auth_bp.get('/me')
@jwt_required()
def me():
    claims = get_jwt()
    staff = directory.get_staff(get_db(), get_jwt_identity())
    return {
        'id': staff.id,
        'name': staff.name,
        'role': claims.get('role'),
        'team_id': claims.get('team_id'),
        'perms': claims.get('perms', []),
    }
