"""
schemas/rfps.py — Pydantic models for RFP endpoints

Validates RFP creation, partial updates and status change requests.

Business Rules:
- Title 5-200 chars, description at least 20 chars, both trimmed
- Budget may not be negative; item quantity at least 1
- Terms default to Net 30 / 1 year / Within 30 days
- assignedVendors is a list of vendor IDs; duplicates collapsed
- Status is not part of RFPUpdate, it only moves through the status endpoint

Called by: routers/rfps.py, services/rfp_service.py
Depends on: pydantic
"""

from __future__ import annotations

from datetime import date
from typing import Annotated

from pydantic import Field, StringConstraints, field_validator

from ..utils.normalization import dedupe
from .base import CamelModel, SpecMap

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=5, max_length=200)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, min_length=20)]
ItemName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class RFPItem(CamelModel):
    name: ItemName
    quantity: int = Field(ge=1)
    specifications: SpecMap = Field(default_factory=dict)


class RFPTerms(CamelModel):
    payment: str = "Net 30"
    warranty: str = "1 year"
    delivery: str = "Within 30 days"
    other: SpecMap = Field(default_factory=dict)


class StructuredData(CamelModel):
    """AI-parsed reading of the description, kept apart from items/terms."""
    extracted_items: list[RFPItem] = Field(default_factory=list)
    extracted_terms: RFPTerms = Field(default_factory=RFPTerms)
    budget: float | None = Field(default=None, ge=0)
    deadline: str | None = None
    other_details: SpecMap = Field(default_factory=dict)


def _clean_vendor_ids(v: list[int] | None) -> list[int] | None:
    if v is None:
        return None
    return dedupe(v)


class RFPCreate(CamelModel):
    title: Title
    description: Description
    terms: RFPTerms | None = None
    items: list[RFPItem] = Field(default_factory=list)
    budget: float | None = Field(default=None, ge=0)
    deadline: date | None = None
    structured_data: StructuredData | None = None
    assigned_vendors: list[int] = Field(default_factory=list)
    created_by: str | None = None

    @field_validator("assigned_vendors")
    @classmethod
    def clean_vendor_ids(cls, v: list[int]) -> list[int]:
        return _clean_vendor_ids(v)


class RFPUpdate(CamelModel):
    """Partial update: only keys present in the body are applied."""
    title: Title | None = None
    description: Description | None = None
    terms: RFPTerms | None = None
    items: list[RFPItem] | None = None
    budget: float | None = Field(default=None, ge=0)
    deadline: date | None = None
    structured_data: StructuredData | None = None
    assigned_vendors: list[int] | None = None

    @field_validator("assigned_vendors")
    @classmethod
    def clean_vendor_ids(cls, v: list[int] | None) -> list[int] | None:
        return _clean_vendor_ids(v)


class RFPStatusChange(CamelModel):
    status: str = ""
