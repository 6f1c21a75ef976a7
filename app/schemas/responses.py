"""
schemas/responses.py — Shared response envelope

Every endpoint answers {success, message?, data?, error?}; list endpoints
add {pagination: {page, limit, total, pages}}. The helpers below build
those dicts so routers stay one-liners.

Called by: routers/*.py
Depends on: pydantic
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel


class Pagination(BaseModel):
    page: int = 1
    limit: int = 10
    total: int = 0
    pages: int = 0

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


# ── response_model envelopes (OpenAPI docs; routers use exclude_unset) ──


class OkResponse(BaseModel, extra="allow"):
    success: bool = True
    message: str | None = None


class ItemResponse(OkResponse):
    data: dict[str, Any]


class VendorListResponse(OkResponse):
    data: list[dict[str, Any]]
    count: int


class PaginatedResponse(OkResponse):
    data: list[dict[str, Any]]
    pagination: Pagination


def ok(data: Any = None, message: str | None = None, **extra: Any) -> dict:
    body: dict[str, Any] = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def paginated(items: list[dict], page: int, limit: int, total: int) -> dict:
    return ok(items, pagination=Pagination.build(page, limit, total).model_dump())


def page_limit(limit: int | None) -> int:
    """Apply the configured default and ceiling to a requested page size."""
    from ..config import settings

    return min(limit or settings.default_page_size, settings.max_page_size)
