"""Reusable validation helpers for request payloads.

Focuses on enum-like fields and the small set of scalar coercions the request
endpoints need, so every rejection surfaces as the same ValidationError shape.
"""
from __future__ import annotations
import math
from datetime import date, datetime
from typing import Any, Iterable, Optional
from gearguard.errors import ValidationError


def validate_status(new_status: str, allowed: Iterable[str], field_name: str = 'status') -> str:
    """Validate that new_status is inside allowed.

    Returns the status (to enable inline usage) or raises ValidationError.
    """
    if new_status not in allowed:
        raise ValidationError(f"{field_name} invalid", meta={'field': field_name, 'value': new_status})
    return new_status


def require_fields(data: dict, *names: str):
    missing = [n for n in names if data.get(n) in (None, '')]
    if missing:
        raise ValidationError(f"{', '.join(missing)} required", meta={'missing': missing})


def parse_iso_date(value: Any, field_name: str) -> Optional[date]:
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        # Accept full timestamps from date pickers, keep the calendar day
        return datetime.fromisoformat(str(value).replace('Z', '+00:00')).date()
    except ValueError:
        raise ValidationError(f"{field_name} must be an ISO date", meta={'field': field_name})


def parse_int(value: Any, field_name: str) -> Optional[int]:
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} invalid", meta={'field': field_name})
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} invalid", meta={'field': field_name})


def parse_duration(value: Any) -> Optional[float]:
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        raise ValidationError("duration_hours invalid")
    try:
        hours = float(value)
    except (TypeError, ValueError):
        raise ValidationError("duration_hours invalid")
    if not math.isfinite(hours):
        raise ValidationError("duration_hours must be a finite number")
    if hours < 0:
        raise ValidationError("duration_hours must not be negative")
    return hours

__all__ = ['validate_status', 'require_fields', 'parse_iso_date', 'parse_int', 'parse_duration']
