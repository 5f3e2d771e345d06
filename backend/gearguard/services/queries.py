"""Read-only, role-scoped projections of maintenance requests.

Filters arrive as a structured ``RequestFilter`` and become bound SQLAlchemy
predicates; role visibility (``policy.scope_requests``) is always overlaid
after the caller's filters, for listings and aggregates alike.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional
from sqlalchemy import select, func, case
from sqlalchemy.orm import Session, joinedload

from gearguard.errors import NotFoundError
from gearguard.models.directory import Team
from gearguard.models.maintenance_request import MaintenanceRequest, Unrouted
from gearguard.services.directory import list_teams
from gearguard.services.identity import ActorContext
from gearguard.services.policy import scope_requests, can_view
from gearguard.services.transitions import get_request, utcnow
from gearguard.utils.filters import apply_filters
from gearguard.utils.sorting import apply_multi_sort

R = MaintenanceRequest

SORT_FIELDS = {
    'id': R.id,
    'status': R.status,
    'type': R.type,
    'subject': R.subject,
    'scheduled_date': R.scheduled_date,
    'created_at': R.created_at,
    'updated_at': R.updated_at,
}


@dataclass(frozen=True)
class RequestFilter:
    status: Optional[str] = None
    equipment_id: Optional[int] = None
    type: Optional[str] = None
    technician_id: Optional[str] = None
    team_id: Optional[int] = None

    def apply(self, query):
        for name, value in asdict(self).items():
            if value is not None:
                query = query.where(getattr(R, name) == value)
        return query


def _with(name: str):
    return lambda fields, value: {**fields, name: value}


FILTER_SPECS = {
    'status': {'validate': lambda v: v in R.ALL_STATUSES, 'op': _with('status')},
    'equipment_id': {'coerce': int, 'op': _with('equipment_id')},
    'type': {'validate': lambda v: v in R.ALL_TYPES, 'op': _with('type')},
    'technician_id': {'coerce': str, 'op': _with('technician_id')},
    'team_id': {'coerce': int, 'op': _with('team_id')},
}


def build_request_filter(params: Mapping[str, Any]) -> RequestFilter:
    return RequestFilter(**apply_filters({}, FILTER_SPECS, params))


def list_requests(session: Session, actor: ActorContext, flt: Optional[RequestFilter] = None,
                  sort: Optional[str] = None, limit: Optional[int] = None, offset: int = 0) -> List[MaintenanceRequest]:
    q = select(R).options(joinedload(R.equipment), joinedload(R.team), joinedload(R.technician))
    q = (flt or RequestFilter()).apply(q)
    q = scope_requests(q, actor)
    q = apply_multi_sort(q, sort, SORT_FIELDS, R.id)
    if limit is not None:
        q = q.limit(limit).offset(offset)
    return list(session.execute(q).unique().scalars())


def get_visible_request(session: Session, actor: ActorContext, request_id: int) -> MaintenanceRequest:
    req = get_request(session, request_id)
    if not can_view(actor, req):
        # out-of-scope tickets are indistinguishable from missing ones
        raise NotFoundError(f'Request {request_id} not found', meta={'request_id': request_id})
    return req


def _iso(dt: Optional[datetime]) -> Optional[str]:
    if dt is None:
        return None
    return dt.isoformat().replace('+00:00', 'Z')


def request_view(req: MaintenanceRequest, now: Optional[datetime] = None) -> Dict[str, Any]:
    """JSON projection of a request, enriched with display names and the derived overdue flag."""
    now = now or utcnow()
    return {
        'id': req.id,
        'subject': req.subject,
        'equipment_id': req.equipment_id,
        'equipment_name': req.equipment.name if req.equipment else None,
        'team_id': req.team_id,
        'team_name': req.team.name if req.team else None,
        'is_unrouted': isinstance(req.routing, Unrouted),
        'technician_id': req.technician_id,
        'technician_name': req.technician.name if req.technician else None,
        'type': req.type,
        'status': req.status,
        'scheduled_date': req.scheduled_date.isoformat() if req.scheduled_date else None,
        'duration_hours': req.duration_hours,
        'created_by_user_id': req.created_by_user_id,
        'created_at': _iso(req.created_at),
        'picked_up_by_user_id': req.picked_up_by_user_id,
        'picked_up_at': _iso(req.picked_up_at),
        'completed_by_user_id': req.completed_by_user_id,
        'completed_at': _iso(req.completed_at),
        'follow_up_of_request_id': req.follow_up_of_request_id,
        'isOverdue': req.is_overdue(now),
    }


def _open_case():
    return case((R.status.not_in(R.TERMINAL_STATUSES), 1), else_=0)


def summary(session: Session, actor: ActorContext, equipment_id: Optional[int] = None) -> Dict[str, Any]:
    per_team = select(
        R.team_id,
        func.count(R.id),
        func.coalesce(func.sum(case((R.status == R.STATUS_REPAIRED, 1), else_=0)), 0),
        func.coalesce(func.sum(_open_case()), 0),
    )
    totals = select(
        func.count(R.id),
        func.coalesce(func.sum(_open_case()), 0),
        func.coalesce(func.sum(R.duration_hours), 0.0),
    )
    if equipment_id is not None:
        per_team = per_team.where(R.equipment_id == equipment_id)
        totals = totals.where(R.equipment_id == equipment_id)
    per_team = scope_requests(per_team, actor).group_by(R.team_id)
    totals = scope_requests(totals, actor)

    counts = {row[0]: (int(row[1]), int(row[2]), int(row[3])) for row in session.execute(per_team).all()}
    if actor.is_super_admin:
        teams = list_teams(session)
    else:
        visible_ids = set(counts) | {actor.team_id}
        teams = list(session.execute(select(Team).where(Team.id.in_(visible_ids)).order_by(Team.id.asc())).scalars())

    team_rows = []
    for team in teams:
        total, completed, open_count = counts.get(team.id, (0, 0, 0))
        team_rows.append({
            'team_id': team.id,
            'team': team.name,
            'total': total,
            'completed': completed,
            'open': open_count,
        })
    total_requests, total_open, total_hours = session.execute(totals).one()
    return {
        'teams': team_rows,
        'global': {
            'total_requests': int(total_requests),
            'total_open': int(total_open or 0),
            'total_hours': float(total_hours or 0.0),
        },
    }

__all__ = [
    'RequestFilter', 'FILTER_SPECS', 'build_request_filter', 'list_requests', 'get_visible_request',
    'request_view', 'summary',
]
