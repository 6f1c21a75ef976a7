"""
exceptions.py — Service-layer error taxonomy

Services raise these; main.py turns them into the JSON envelope with the
matching HTTP status. None of them are retried.

Business Rules:
- ValidationError: malformed input or an illegal state transition (400)
- NotFoundError: a referenced entity does not exist (404)
- ConflictError: uniqueness violation; carries the existing record when known (409)
- UnexpectedError: storage or upstream failure (500)

Called by: services/*, main.py (exception handlers)
Depends on: nothing
"""

from typing import Any


class ServiceError(Exception):
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        data: Any = None,
        errors: list[str] | None = None,
        extra: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.data = data
        self.errors = errors
        self.extra = extra or {}


class ValidationError(ServiceError):
    status_code = 400


class NotFoundError(ServiceError):
    status_code = 404


class ConflictError(ServiceError):
    status_code = 409


class UnexpectedError(ServiceError):
    status_code = 500
