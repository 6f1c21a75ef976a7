"""
schemas/errors.py — Structured error response model

Shared by the ServiceError, RequestValidationError and HTTPException
handlers in main.py.
"""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    error: str | None = None
    errors: list[str] | None = None
    data: Any = None
    request_id: str = ""
