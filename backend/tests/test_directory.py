import pytest
from flask import Flask
from gearguard import get_db
from gearguard.errors import NotFoundError, ValidationError
from gearguard.services import directory
from tests.test_utils_seed import ensure_triage_team
from tests.test_lifecycle_helpers import jwt_headers, seed_squad, seed_super_admin


def test_teams_listing(app_context: Flask):
    client = app_context.test_client()
    squad = seed_squad()
    triage = ensure_triage_team()
    resp = client.get('/teams', headers=jwt_headers(squad.tech))
    assert resp.status_code == 200
    by_id = {t['id']: t for t in resp.get_json()}
    assert by_id[squad.team.id] == {'id': squad.team.id, 'name': squad.team.name, 'is_triage': False}
    assert by_id[triage.id]['is_triage'] is True


def test_staff_listing_is_squad_scoped(app_context: Flask):
    client = app_context.test_client()
    squad = seed_squad()
    other = seed_squad()
    # non-admins always get their own squad, whatever they ask for
    resp = client.get(f'/staff?team_id={other.team.id}', headers=jwt_headers(squad.lead))
    assert {s['id'] for s in resp.get_json()} == {squad.lead.id, squad.tech.id, squad.tech2.id}

    admin_h = jwt_headers(seed_super_admin())
    resp = client.get(f'/staff?team_id={other.team.id}&role=TECHNICIAN', headers=admin_h)
    assert {s['id'] for s in resp.get_json()} == {other.tech.id, other.tech2.id}
    assert client.get('/staff?role=JANITOR', headers=admin_h).status_code == 400


def test_directory_lookups(app_context: Flask):
    session = get_db()
    squad = seed_squad()
    assert directory.get_team(session, squad.team.id).name == squad.team.name
    assert directory.get_staff(session, squad.tech.id).role == 'TECHNICIAN'
    assert {s.id for s in directory.list_staff_by_team(session, squad.team.id)} == {squad.lead.id, squad.tech.id, squad.tech2.id}
    with pytest.raises(NotFoundError):
        directory.get_team(session, 999999)
    with pytest.raises(NotFoundError):
        directory.get_staff(session, 'missing-staff')
    with pytest.raises(ValidationError):
        directory.list_staff(session, role='JANITOR')


def test_ensure_triage_team_is_idempotent(app_context: Flask):
    session = get_db()
    first = ensure_triage_team()
    again = directory.ensure_triage_team(session, name='Some Other Name')
    assert again.id == first.id
    assert directory.find_triage_team(session).id == first.id
