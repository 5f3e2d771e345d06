import pytest
from flask import Flask
from sqlalchemy import func, select
from gearguard import get_db
from gearguard.errors import AuthorizationError
from gearguard.models.audit import AuditLog
from gearguard.models.directory import Team
from gearguard.models.maintenance_request import MaintenanceRequest
from gearguard.services.admin import reset_transactional_data
from tests.test_lifecycle_helpers import (
    actor_for, jwt_headers, seed_squad, seed_super_admin, create_request_and_assert, corrective_payload,
    exercise_request_lifecycle,
)


def test_reset_requires_super_admin(app_context: Flask):
    client = app_context.test_client()
    squad = seed_squad()
    resp = client.delete('/admin/reset', headers=jwt_headers(squad.lead))
    assert resp.status_code == 403
    with pytest.raises(AuthorizationError):
        reset_transactional_data(get_db(), actor_for(squad.lead))


def test_reset_clears_requests_and_keeps_master_data(app_context: Flask):
    client = app_context.test_client()
    session = get_db()
    squad = seed_squad()
    admin = seed_super_admin()
    parent = exercise_request_lifecycle(client, squad)
    create_request_and_assert(client, corrective_payload(squad, followUpOf=parent['id']), jwt_headers(squad.lead))
    teams_before = session.execute(select(func.count(Team.id))).scalar_one()

    resp = client.delete('/admin/reset', headers=jwt_headers(admin))
    assert resp.status_code == 200, resp.get_json()
    body = resp.get_json()
    assert body['status'] == 'reset'
    assert body['removed'] >= 2

    assert session.execute(select(func.count(MaintenanceRequest.id))).scalar_one() == 0
    assert session.execute(select(func.count(Team.id))).scalar_one() == teams_before
    # the audit trail survives, including the reset itself
    actions = set(session.execute(select(AuditLog.action).where(AuditLog.actor_user_id.in_([admin.id, squad.lead.id]))).scalars())
    assert {'ADMIN.RESET', 'RQ.CREATE'} <= actions

    # ids restart once the table is empty
    fresh = create_request_and_assert(client, corrective_payload(squad), jwt_headers(squad.lead))
    assert fresh['id'] == 1
