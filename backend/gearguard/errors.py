"""Domain error taxonomy for the maintenance request core.

Every error carries the HTTP status it maps to so the Flask error handler in
``gearguard.create_app`` can render it without a lookup table. None of these
are retryable: they all describe a mismatch between the caller and the stored
state.
"""
from __future__ import annotations
from typing import Any, Dict, Optional


class DomainError(Exception):
    status_code = 500
    title = 'Domain Error'

    def __init__(self, detail: str, meta: Optional[Dict[str, Any]] = None):
        super().__init__(detail)
        self.detail = detail
        self.meta = meta or {}

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_payload(self) -> Dict[str, Any]:
        return {
            'error': {
                'status': self.status_code,
                'title': self.title,
                'code': self.code,
                'detail': self.detail,
            }
        }


class ValidationError(DomainError):
    status_code = 400
    title = 'Bad Request'


class NotFoundError(DomainError):
    status_code = 404
    title = 'Not Found'


class AuthorizationError(DomainError):
    status_code = 403
    title = 'Forbidden'


class ImmutableStateError(DomainError):
    """Mutation attempted on a request already in a terminal status."""
    status_code = 403
    title = 'Forbidden'


class TraceabilityError(DomainError):
    """Completion attempted on a request nobody has picked up."""
    status_code = 400
    title = 'Bad Request'


class WorkflowViolationError(DomainError):
    status_code = 400
    title = 'Bad Request'


__all__ = [
    'DomainError', 'ValidationError', 'NotFoundError', 'AuthorizationError',
    'ImmutableStateError', 'TraceabilityError', 'WorkflowViolationError',
]
