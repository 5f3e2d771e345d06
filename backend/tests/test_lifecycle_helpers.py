"""Reusable test helpers for the maintenance request lifecycle.

Patterns unified:
 - Auth header creation from directory staff (same claims /auth/token issues).
 - A ready-made squad: team, lead, two technicians and a piece of equipment.
 - Creation + transition sequencing with assertion helpers.
"""
from __future__ import annotations
from types import SimpleNamespace
from typing import Dict, Optional
from gearguard.constants.roles import ROLE_SUPER_ADMIN, ROLE_TEAM_LEAD, ROLE_TECHNICIAN
from gearguard.models.directory import Staff
from gearguard.services.identity import ActorContext, issue_token
from tests.test_utils_seed import ensure_team, ensure_staff, ensure_equipment

# ---------- Generic Auth Helpers ---------- #

def jwt_headers(staff: Staff) -> Dict[str, str]:
    return {'Authorization': f'Bearer {issue_token(staff)}'}


def actor_for(staff: Staff) -> ActorContext:
    return ActorContext.for_staff(staff)


def seed_super_admin() -> Staff:
    return ensure_staff(ROLE_SUPER_ADMIN)


def seed_squad(name: Optional[str] = None) -> SimpleNamespace:
    """Team with one lead, two technicians and one equipment item maintained by it."""
    team = ensure_team(name)
    return SimpleNamespace(
        team=team,
        lead=ensure_staff(ROLE_TEAM_LEAD, team),
        tech=ensure_staff(ROLE_TECHNICIAN, team),
        tech2=ensure_staff(ROLE_TECHNICIAN, team),
        equipment=ensure_equipment(team),
    )

# ---------- Assertion Helpers ---------- #

def create_request_and_assert(client, payload: dict, headers: Dict[str, str], expected_status: int = 201):
    resp = client.post('/requests', json=payload, headers=headers)
    assert resp.status_code == expected_status, resp.get_json()
    return resp.get_json()


def patch_and_assert(client, url: str, payload: dict, headers: Dict[str, str], expected_status: int = 200,
                     expected_code: Optional[str] = None):
    resp = client.patch(url, json=payload, headers=headers)
    assert resp.status_code == expected_status, resp.get_json()
    body = resp.get_json()
    if expected_code is not None:
        assert body['error']['code'] == expected_code
    return body


def corrective_payload(squad: SimpleNamespace, **extra) -> dict:
    payload = {'subject': 'Pump leak', 'equipment_id': squad.equipment.id, 'team_id': squad.team.id, 'type': 'corrective'}
    payload.update(extra)
    return payload

# ---------- Domain Specific Wrappers ---------- #

def exercise_request_lifecycle(client, squad: SimpleNamespace):
    """Lead opens, technician picks up, technician closes as repaired."""
    lead_h = jwt_headers(squad.lead)
    tech_h = jwt_headers(squad.tech)
    body = create_request_and_assert(client, corrective_payload(squad), lead_h)
    assert body['status'] == 'new'
    rid = body['id']
    body = patch_and_assert(client, f'/requests/{rid}/assign', {'technician_id': squad.tech.id}, tech_h)
    assert body['status'] == 'in_progress'
    body = patch_and_assert(client, f'/requests/{rid}/status', {'status': 'repaired', 'duration_hours': 2}, tech_h)
    assert body['status'] == 'repaired'
    return body

__all__ = [
    'jwt_headers', 'actor_for', 'seed_super_admin', 'seed_squad', 'create_request_and_assert',
    'patch_and_assert', 'corrective_payload', 'exercise_request_lifecycle',
]
