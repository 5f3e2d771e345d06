"""Acting-user resolution.

Every core operation receives an explicit ``ActorContext`` instead of reading
request globals. In the HTTP layer it is built from a JWT verified by
flask-jwt-extended whose role/team claims were filled in from the staff
directory when the token was issued, so clients never assert their own role.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity

from gearguard.constants.roles import (
    ALL_ROLES, ROLE_SUPER_ADMIN, ROLE_TEAM_LEAD, ROLE_TECHNICIAN, SUPERVISOR_ROLES, permissions_for_role,
)
from gearguard.errors import AuthorizationError
from gearguard.models.directory import Staff


@dataclass(frozen=True)
class ActorContext:
    id: str
    role: str
    team_id: Optional[int] = None

    @property
    def is_super_admin(self) -> bool:
        return self.role == ROLE_SUPER_ADMIN

    @property
    def is_team_lead(self) -> bool:
        return self.role == ROLE_TEAM_LEAD

    @property
    def is_technician(self) -> bool:
        return self.role == ROLE_TECHNICIAN

    @property
    def is_supervisor(self) -> bool:
        return self.role in SUPERVISOR_ROLES

    @classmethod
    def for_staff(cls, staff: Staff) -> 'ActorContext':
        return cls(id=staff.id, role=staff.role, team_id=staff.team_id)


def build_claims(staff: Staff) -> dict:
    return {
        'role': staff.role,
        'team_id': staff.team_id,
        'perms': permissions_for_role(staff.role),
        'name': staff.name,
    }


def issue_token(staff: Staff) -> str:
    return create_access_token(identity=str(staff.id), additional_claims=build_claims(staff))


def resolve_actor() -> ActorContext:
    """Build the actor from the JWT verified for the current request."""
    claims = get_jwt()
    role = claims.get('role')
    if role not in ALL_ROLES:
        raise AuthorizationError('Unknown role in token')
    team_id = claims.get('team_id')
    if role != ROLE_SUPER_ADMIN and team_id is None:
        raise AuthorizationError('Team membership required for role')
    return ActorContext(id=str(get_jwt_identity()), role=role, team_id=int(team_id) if team_id is not None else None)

__all__ = ['ActorContext', 'build_claims', 'issue_token', 'resolve_actor']
