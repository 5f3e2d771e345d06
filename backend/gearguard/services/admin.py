from __future__ import annotations
import logging
from sqlalchemy import delete, text, update
from sqlalchemy.orm import Session

from gearguard.constants.roles import ROLE_SUPER_ADMIN
from gearguard.models.maintenance_request import MaintenanceRequest
from gearguard.services.identity import ActorContext
from gearguard.services.policy import assert_role

logger = logging.getLogger(__name__)


def reset_transactional_data(session: Session, actor: ActorContext) -> int:
    """Delete every maintenance request, keeping teams, staff, equipment and the audit log.

    Returns the number of requests removed. On SQLite the AUTOINCREMENT
    counter is rewound so ids restart at 1.
    """
    assert_role(actor, ROLE_SUPER_ADMIN, action='administrative reset')
    # follow-up links point inside the same table; clear them before the bulk delete
    session.execute(
        update(MaintenanceRequest)
        .where(MaintenanceRequest.follow_up_of_request_id.is_not(None))
        .values(follow_up_of_request_id=None)
    )
    result = session.execute(delete(MaintenanceRequest))
    removed = result.rowcount or 0
    bind = session.get_bind()
    if bind.dialect.name == 'sqlite':
        session.execute(
            text('DELETE FROM sqlite_sequence WHERE name = :name'),
            {'name': MaintenanceRequest.__tablename__},
        )
    logger.warning('Administrative reset by %s removed %s requests', actor.id, removed)
    return removed
