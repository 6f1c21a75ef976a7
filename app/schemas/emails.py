"""
schemas/emails.py — Pydantic model for the inbound email webhook

Shape posted by the mail provider when a vendor replies to an RFP.

Business Rules:
- "from" is mandatory (checked by the intake service so the caller gets a
  specific message rather than a generic validation error)
- Plain text is preferred over HTML when both are present

Called by: routers/email_webhook.py, services/email_intake_service.py
Depends on: pydantic
"""

from __future__ import annotations

from pydantic import Field

from .base import CamelModel
from .proposals import Attachment


class InboundEmail(CamelModel):
    from_: str | None = Field(default=None, alias="from")
    subject: str | None = None
    text: str | None = None
    html: str | None = None
    attachments: list[Attachment] = Field(default_factory=list)
