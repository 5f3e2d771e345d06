from __future__ import annotations
import logging
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session

from gearguard.errors import NotFoundError, ValidationError
from gearguard.models.directory import Team, Staff
from gearguard.constants.roles import ALL_ROLES

logger = logging.getLogger(__name__)


def get_team(session: Session, team_id: int) -> Team:
    team = session.get(Team, team_id)
    if team is None:
        raise NotFoundError(f'Team {team_id} not found', meta={'team_id': team_id})
    return team


def get_staff(session: Session, staff_id: str) -> Staff:
    staff = session.get(Staff, str(staff_id))
    if staff is None:
        raise NotFoundError(f'Staff {staff_id} not found', meta={'staff_id': staff_id})
    return staff


def list_teams(session: Session) -> List[Team]:
    return list(session.execute(select(Team).order_by(Team.id.asc())).scalars())


def list_staff(session: Session, team_id: Optional[int] = None, role: Optional[str] = None) -> List[Staff]:
    q = select(Staff)
    if team_id is not None:
        q = q.where(Staff.team_id == team_id)
    if role is not None:
        if role not in ALL_ROLES:
            raise ValidationError('role invalid', meta={'field': 'role'})
        q = q.where(Staff.role == role)
    return list(session.execute(q.order_by(Staff.name.asc(), Staff.id.asc())).scalars())


def list_staff_by_team(session: Session, team_id: int) -> List[Staff]:
    return list_staff(session, team_id=team_id)


def find_triage_team(session: Session) -> Optional[Team]:
    return session.execute(select(Team).where(Team.is_triage.is_(True)).order_by(Team.id.asc())).scalars().first()


def ensure_triage_team(session: Session, name: str = 'Triage Squad') -> Team:
    """Return the triage team, creating it (flushed, not committed) when absent."""
    team = find_triage_team(session)
    if team is not None:
        return team
    team = session.execute(select(Team).where(Team.name == name)).scalar_one_or_none()
    if team is not None:
        # adopt a pre-existing row carrying the configured name
        team.is_triage = True
    else:
        team = Team(name=name, is_triage=True)
        session.add(team)
    session.flush()
    logger.info('Triage team ready: id=%s name=%s', team.id, team.name)
    return team

__all__ = [
    'get_team', 'get_staff', 'list_teams', 'list_staff', 'list_staff_by_team',
    'find_triage_team', 'ensure_triage_team',
]
