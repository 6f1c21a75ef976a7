"""
schemas/proposals.py — Pydantic models for Proposal endpoints

Validates manual proposal creation, field updates, status changes and
the attachment records shared with the email webhook.

Business Rules:
- extractedData prices/delivery days are non-negative
- Compliance and AI scores are 0-100
- Evaluator notes max 1000 chars
- Attachments missing fields get filename "attachment",
  contentType "application/octet-stream", size 0, url ""

Called by: routers/proposals.py, routers/email_webhook.py, services/proposal_service.py
Depends on: pydantic
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import Field, StringConstraints, model_validator

from .base import CamelModel, SpecMap

EvaluatorNotes = Annotated[str, StringConstraints(max_length=1000)]


class ExtractedData(CamelModel):
    total_price: float = Field(default=0, ge=0)
    delivery_days: int = Field(default=30, ge=0)
    warranty: str = "Not specified"
    payment_terms: str = "Not specified"
    specifications: SpecMap = Field(default_factory=dict)
    notes: str = ""
    compliance_score: float = Field(default=0, ge=0, le=100)


class AIAnalysis(CamelModel):
    score: float = Field(default=0, ge=0, le=100)
    summary: str = ""
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    comparison_data: SpecMap = Field(default_factory=dict)
    last_updated: datetime | None = None


class Attachment(CamelModel):
    filename: str = "attachment"
    content_type: str = "application/octet-stream"
    size: int = Field(default=0, ge=0)
    url: str = ""

    @model_validator(mode="before")
    @classmethod
    def _drop_blanks(cls, data):
        # falsy values fall back to the defaults above
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v}
        return data


class ProposalCreate(CamelModel):
    # Optional here so the service can report the missing pair in one message
    rfp_id: int | None = None
    vendor_id: int | None = None
    extracted_data: ExtractedData | None = None
    ai_analysis: AIAnalysis | None = None
    raw_email_content: str | None = None
    raw_attachments: list[Attachment] = Field(default_factory=list)
    evaluator_notes: EvaluatorNotes | None = None


class ProposalUpdate(CamelModel):
    """Partial update: only keys present in the body are applied."""
    status: str | None = None
    extracted_data: ExtractedData | None = None
    ai_analysis: AIAnalysis | None = None
    evaluator_notes: EvaluatorNotes | None = None


class ProposalStatusChange(CamelModel):
    status: str = ""
    evaluator_notes: EvaluatorNotes | None = None
