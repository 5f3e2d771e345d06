"""Audit logging decorator that also owns the unit of work for mutating routes.

Usage examples:

@audit_log('RQ.CREATE', entity='MaintenanceRequest', entity_id_key='id', meta_keys=['status', 'team_id'])
def create_request():
    ... return request_view(req), 201

@audit_log('RQ.STATUS', entity='MaintenanceRequest', entity_id_key='id',
           diff_keys=['status'], pre_fetch=lambda a, kw: _snapshot(kw['request_id']))
def update_status(request_id): ...

Parameters:
  action: required audit action code (e.g. RQ.ASSIGN)
  entity: optional entity label (MaintenanceRequest, Team)
  entity_id_key: key in the returned JSON object whose value becomes entity_id.
  meta_keys: list of keys to project from returned JSON into meta dict (shallow copy).
  diff_keys / pre_fetch: snapshot taken before the handler runs; changed keys are recorded as meta['changes'].

Transaction handling:
  The handler must not commit. After it returns, the audit row is added to the
  same session and everything is committed once. Any exception, from the
  handler or from the audit step, rolls the session back and propagates, so a
  rejected call leaves neither the mutation nor its audit row behind.

Return handling:
  Flask view functions commonly return one of:
    dict
    (dict, status)
    (dict, status, headers)
  The decorator extracts the first element as the JSON payload for key/meta extraction while preserving the original return value.
"""

from functools import wraps
from typing import Any, Callable, Iterable, Optional, Dict

from gearguard.services.audit import add_audit
from gearguard.services.identity import resolve_actor
from gearguard import get_db


def _extract_payload(rv: Any):
    """Return (data, original_rv) where data is the JSON-able dict for inspection."""
    if isinstance(rv, tuple) and rv:
        data = rv[0]
        return data, rv
    return rv, rv


def _diff(before: Dict[str, Any], data: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    changes = {}
    for k in keys:
        if k in before and k in data and before.get(k) != data.get(k):
            changes[k] = {'before': before.get(k), 'after': data.get(k)}
    return changes


def audit_log(
    action: str,
    *,
    entity: Optional[str] = None,
    entity_id_key: Optional[str] = None,
    meta_keys: Optional[Iterable[str]] = None,
    # Diff support
    diff_keys: Optional[Iterable[str]] = None,
    pre_fetch: Optional[Callable[[tuple, dict], Dict[str, Any]]] = None,
):
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            session = get_db()
            try:
                before_snapshot = pre_fetch(args, kwargs) if (diff_keys and pre_fetch) else None
                rv = fn(*args, **kwargs)
                data, _ = _extract_payload(rv)
                if not isinstance(data, dict):  # nothing to inspect
                    data = {}
                entity_id = None
                if entity_id_key and entity_id_key in data:
                    entity_id = data.get(entity_id_key)
                # Build meta
                meta = None
                if meta_keys:
                    meta = {k: data.get(k) for k in meta_keys if k in data}
                # Append diff if requested
                if diff_keys and isinstance(before_snapshot, dict):
                    changes = _diff(before_snapshot, data, diff_keys)
                    if changes:
                        meta = dict(meta or {})
                        meta['changes'] = changes
                add_audit(session, resolve_actor(), action, entity, entity_id, meta)
                session.commit()
                return rv
            except Exception:
                session.rollback()
                raise
        return wrapper
    return outer
