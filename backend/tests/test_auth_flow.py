from flask import Flask
from flask_jwt_extended import create_access_token
from tests.test_lifecycle_helpers import seed_squad, seed_super_admin


def test_token_and_me(app_context: Flask):
    client = app_context.test_client()
    squad = seed_squad()
    resp = client.post('/auth/token', json={'staff_id': squad.lead.id})
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body['staff'] == {'id': squad.lead.id, 'name': squad.lead.name, 'role': 'TEAM_LEAD', 'team_id': squad.team.id}

    me = client.get('/auth/me', headers={'Authorization': f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    me_body = me.get_json()
    assert me_body['id'] == squad.lead.id
    assert me_body['role'] == 'TEAM_LEAD'
    assert 'RQ.ROUTE' in me_body['perms']
    assert 'ADMIN.RESET' not in me_body['perms']


def test_super_admin_token_carries_all_permissions(app_context: Flask):
    client = app_context.test_client()
    admin = seed_super_admin()
    token = client.post('/auth/token', json={'staff_id': admin.id}).get_json()['access_token']
    me = client.get('/auth/me', headers={'Authorization': f'Bearer {token}'}).get_json()
    assert me['team_id'] is None
    assert 'ADMIN.RESET' in me['perms']


def test_token_errors(client):
    resp = client.post('/auth/token', json={})
    assert resp.status_code == 400
    assert resp.get_json()['error']['code'] == 'ValidationError'
    resp = client.post('/auth/token', json={'staff_id': 'nobody'})
    assert resp.status_code == 404


def test_forged_role_claim_is_rejected(app_context: Flask):
    client = app_context.test_client()
    token = create_access_token(identity='intruder', additional_claims={'role': 'OWNER', 'perms': ['RQ.READ']})
    resp = client.get('/requests', headers={'Authorization': f'Bearer {token}'})
    assert resp.status_code == 403
    assert resp.get_json()['error']['code'] == 'AuthorizationError'


def test_missing_permission_is_forbidden(app_context: Flask):
    client = app_context.test_client()
    squad = seed_squad()
    token = create_access_token(identity=squad.tech.id, additional_claims={'role': 'TECHNICIAN', 'team_id': squad.team.id, 'perms': []})
    resp = client.get('/requests', headers={'Authorization': f'Bearer {token}'})
    assert resp.status_code == 403
    assert resp.get_json()['error']['detail'] == 'Missing permission'
