"""Environment-backed defaults for the Flask app config.

``create_app`` loads ``.env`` (python-dotenv) first, then reads these keys;
any mapping passed to ``create_app(config=...)`` overrides them.
"""
from __future__ import annotations
import os
from typing import Any, Dict

DEFAULT_LIMIT = 50
MAX_LIMIT = 200

SCRAP_POLICY_ANY = 'any'
SCRAP_POLICY_SUPER_ADMIN = 'super_admin'
SCRAP_POLICIES = (SCRAP_POLICY_ANY, SCRAP_POLICY_SUPER_ADMIN)


def load_settings() -> Dict[str, Any]:
    return {
        'DATABASE_URL': os.getenv('DATABASE_URL', 'sqlite:///dev.db'),
        'JWT_SECRET_KEY': os.getenv('JWT_SECRET_KEY', 'dev-secret'),
        'TRIAGE_TEAM_NAME': os.getenv('TRIAGE_TEAM_NAME', 'Triage Squad'),
        # Who may flip Equipment.is_scrapped by closing a request as scrap
        'SCRAP_EQUIPMENT_POLICY': os.getenv('SCRAP_EQUIPMENT_POLICY', SCRAP_POLICY_ANY),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO').upper(),
        'DEFAULT_LIMIT': int(os.getenv('DEFAULT_LIMIT', DEFAULT_LIMIT)),
        'MAX_LIMIT': int(os.getenv('MAX_LIMIT', MAX_LIMIT)),
    }


def normalize_pagination(limit_raw, offset_raw, default_limit=DEFAULT_LIMIT, max_limit=MAX_LIMIT):
    """Clamp limit into [1, max_limit] and offset to >= 0. ``None`` limit means default."""
    try:
        limit = int(limit_raw) if limit_raw is not None else default_limit
        offset = int(offset_raw) if offset_raw is not None else 0
    except ValueError:
        raise ValueError('limit/offset must be int')
    limit = max(1, min(limit, max_limit))
    offset = max(0, offset)
    return limit, offset
