"""Central enum-like definitions for staff roles and request permission codes.
Extend cautiously; tokens already issued carry the codes, so never rename one silently.
"""
from __future__ import annotations
from typing import List, Dict

ROLE_SUPER_ADMIN = 'SUPER_ADMIN'
ROLE_TEAM_LEAD = 'TEAM_LEAD'
ROLE_TECHNICIAN = 'TECHNICIAN'
ALL_ROLES = (ROLE_SUPER_ADMIN, ROLE_TEAM_LEAD, ROLE_TECHNICIAN)

# Roles allowed to open follow-ups and re-route requests between teams
SUPERVISOR_ROLES = (ROLE_SUPER_ADMIN, ROLE_TEAM_LEAD)

SERVICE_ACTIONS = {
    'RQ': ['READ', 'CREATE', 'ASSIGN', 'STATUS', 'ROUTE', 'FOLLOWUP'],
    'RPT': ['READ'],
    'DIR': ['READ'],
    'ADMIN': ['RESET'],
}


def build_all_permission_codes() -> List[str]:
    codes: List[str] = []
    for svc, actions in SERVICE_ACTIONS.items():
        for act in actions:
            codes.append(f"{svc}.{act}")
    return codes

ALL_PERMISSION_CODES = build_all_permission_codes()

ROLE_PRESETS: Dict[str, List[str]] = {
    # Technicians pick up and progress work; they never route or open follow-ups
    ROLE_TECHNICIAN: ['RQ.READ', 'RQ.CREATE', 'RQ.ASSIGN', 'RQ.STATUS', 'RPT.READ', 'DIR.READ'],
    ROLE_TEAM_LEAD: ['RQ.READ', 'RQ.CREATE', 'RQ.ASSIGN', 'RQ.STATUS', 'RQ.ROUTE', 'RQ.FOLLOWUP', 'RPT.READ', 'DIR.READ'],
    ROLE_SUPER_ADMIN: ['*'],
}


def permissions_for_role(role: str) -> List[str]:
    """Expand a role preset into explicit permission codes (wildcard aware)."""
    codes = ROLE_PRESETS.get(role, [])
    if '*' in codes:
        return list(ALL_PERMISSION_CODES)
    return list(codes)
