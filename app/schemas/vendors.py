"""
schemas/vendors.py — Pydantic models for Vendor endpoints

Validates vendor registration, partial profile updates and the explicit
activation toggle.

Business Rules:
- Emails are trimmed, lowercased and must match the address pattern
- Name 2-100 chars, contact person max 100, notes max 500
- Phone is optional but must look like +15550100 when present
- Categories must come from VENDOR_CATEGORIES, at least one, duplicates collapsed
- Rating 1-5 (rejected, not clamped)

Called by: routers/vendors.py, services/vendor_service.py
Depends on: pydantic, utils/normalization.py
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, StringConstraints, field_validator

from ..constants import DEFAULT_VENDOR_CATEGORY
from ..utils.normalization import (
    dedupe,
    is_valid_email,
    is_valid_phone,
    normalize_category,
    normalize_email,
)
from .base import CamelModel

VendorName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=100)]
ContactName = Annotated[str, StringConstraints(strip_whitespace=True, max_length=100)]
Notes = Annotated[str, StringConstraints(max_length=500)]


def _clean_email(v: str | None) -> str | None:
    if v is None:
        return None
    cleaned = normalize_email(v)
    if not cleaned or not is_valid_email(cleaned):
        raise ValueError("Please enter a valid email address")
    return cleaned


def _clean_phone(v: str | None) -> str | None:
    if v is None:
        return None
    cleaned = str(v).strip()
    if not cleaned:
        return None
    if not is_valid_phone(cleaned):
        raise ValueError("Please enter a valid phone number")
    return cleaned


def _clean_categories(v: list[str] | None) -> list[str] | None:
    if v is None:
        return None
    result = []
    for raw in v:
        cat = normalize_category(raw)
        if cat is None:
            raise ValueError(f"{raw} is not a valid category")
        result.append(cat)
    if not result:
        raise ValueError("At least one category is required")
    return dedupe(result)


class VendorCreate(CamelModel):
    name: VendorName
    email: str
    contact_person: ContactName | None = None
    phone: str | None = None
    category: list[str] = Field(default_factory=lambda: [DEFAULT_VENDOR_CATEGORY])
    notes: Notes | None = None
    rating: int = Field(default=3, ge=1, le=5)
    is_active: bool = True

    @field_validator("email")
    @classmethod
    def clean_email(cls, v: str) -> str:
        return _clean_email(v)

    @field_validator("phone")
    @classmethod
    def clean_phone(cls, v: str | None) -> str | None:
        return _clean_phone(v)

    @field_validator("category")
    @classmethod
    def clean_category(cls, v: list[str]) -> list[str]:
        return _clean_categories(v)


class VendorUpdate(CamelModel):
    """Partial update: only keys present in the body are applied."""
    name: VendorName | None = None
    email: str | None = None
    contact_person: ContactName | None = None
    phone: str | None = None
    category: list[str] | None = None
    notes: Notes | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    is_active: bool | None = None

    @field_validator("email")
    @classmethod
    def clean_email(cls, v: str | None) -> str | None:
        return _clean_email(v)

    @field_validator("phone")
    @classmethod
    def clean_phone(cls, v: str | None) -> str | None:
        return _clean_phone(v)

    @field_validator("category")
    @classmethod
    def clean_category(cls, v: list[str] | None) -> list[str] | None:
        return _clean_categories(v)


class VendorActiveToggle(CamelModel):
    is_active: bool
