from flask import Flask
from tests.test_lifecycle_helpers import (
    jwt_headers, seed_squad, seed_super_admin, create_request_and_assert, patch_and_assert, corrective_payload,
)


def _team_row(body, team_id):
    rows = [t for t in body['teams'] if t['team_id'] == team_id]
    assert len(rows) == 1, body
    return rows[0]


def _seed_mixed(client, squad):
    """One open, one repaired (3h), one scrapped (1.5h) request on the squad's equipment."""
    lead_h = jwt_headers(squad.lead)
    create_request_and_assert(client, corrective_payload(squad), lead_h)
    for status, hours in (('repaired', 3), ('scrap', 1.5)):
        rid = create_request_and_assert(client, corrective_payload(squad), lead_h)['id']
        patch_and_assert(client, f'/requests/{rid}/assign', {'technician_id': squad.tech.id}, lead_h)
        patch_and_assert(client, f'/requests/{rid}/status', {'status': status, 'duration_hours': hours}, lead_h)


def test_summary_counts_for_lead(app_context: Flask):
    client = app_context.test_client()
    squad = seed_squad()
    other = seed_squad()
    _seed_mixed(client, squad)
    _seed_mixed(client, other)

    resp = client.get('/reports/summary', headers=jwt_headers(squad.lead))
    assert resp.status_code == 200
    body = resp.get_json()
    assert [t['team_id'] for t in body['teams']] == [squad.team.id]
    row = _team_row(body, squad.team.id)
    assert row == {'team_id': squad.team.id, 'team': squad.team.name, 'total': 3, 'completed': 1, 'open': 1}
    assert body['global'] == {'total_requests': 3, 'total_open': 1, 'total_hours': 4.5}


def test_summary_for_technician_and_equipment_filter(app_context: Flask):
    client = app_context.test_client()
    squad = seed_squad()
    _seed_mixed(client, squad)
    # tech2 sees only the unassigned open request of the squad
    body = client.get('/reports/summary', headers=jwt_headers(squad.tech2)).get_json()
    assert _team_row(body, squad.team.id)['total'] == 1
    assert body['global']['total_open'] == 1

    admin_h = jwt_headers(seed_super_admin())
    body = client.get(f'/reports/summary?equipment_id={squad.equipment.id}', headers=admin_h).get_json()
    assert body['global'] == {'total_requests': 3, 'total_open': 1, 'total_hours': 4.5}
    assert _team_row(body, squad.team.id)['completed'] == 1


def test_summary_lists_empty_teams_for_super_admin(app_context: Flask):
    client = app_context.test_client()
    idle = seed_squad()
    admin_h = jwt_headers(seed_super_admin())
    body = client.get(f'/reports/summary?equipment_id={idle.equipment.id}', headers=admin_h).get_json()
    assert _team_row(body, idle.team.id) == {'team_id': idle.team.id, 'team': idle.team.name, 'total': 0, 'completed': 0, 'open': 0}
    assert body['global']['total_requests'] == 0
    assert client.get('/reports/summary?equipment_id=x', headers=admin_h).status_code == 400
