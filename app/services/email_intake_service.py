"""
email_intake_service.py — Inbound email → proposal

Maps a vendor's reply email onto the proposal for the RFP it answers.

Business Rules:
- Sender address is trimmed + lowercased and must match an active vendor
- The target RFP is the vendor's most recently created RFP that is still
  sent or in_progress
- Body is the plain text, else the HTML, else "No content"
- An existing proposal for (RFP, vendor) is overwritten in place and
  forced back to "received"; otherwise a new one is created through
  proposal_service.create_proposal
- Either path advances a "sent" RFP to in_progress
- Re-posting the same email updates the same proposal, never duplicates it

Called by: routers/email_webhook.py
Depends on: services/vendor_service.py, services/rfp_service.py, services/proposal_service.py
"""

from loguru import logger
from sqlalchemy.orm import Session

from ..constants import EMPTY_EMAIL_CONTENT, PROPOSAL_RECEIVED
from ..database import utcnow
from ..exceptions import NotFoundError, ValidationError
from ..models import Proposal
from ..schemas.emails import InboundEmail
from ..schemas.proposals import ProposalCreate
from ..utils.normalization import normalize_email
from . import proposal_service, rfp_service, vendor_service


def email_body(email: InboundEmail) -> str:
    return email.text or email.html or EMPTY_EMAIL_CONTENT


def upsert_from_email(db: Session, email: InboundEmail) -> tuple[Proposal, bool]:
    """Record a vendor's email reply. Returns (proposal, created)."""
    sender = normalize_email(email.from_)
    if not sender:
        raise ValidationError("Missing sender email (from field)")

    vendor = vendor_service.find_active_vendor_by_email(db, sender)
    if not vendor:
        logger.warning("Inbound email from unknown or inactive sender {}", sender)
        raise NotFoundError(f"Vendor not found or inactive for email: {sender}")

    rfp = rfp_service.find_open_rfp_for_vendor(db, vendor.id)
    if not rfp:
        raise NotFoundError(
            "No active RFPs found for this vendor",
            extra={
                "suggestion": "Assign this vendor to an RFP and mark it as 'sent'",
                "vendorName": vendor.name,
            },
        )

    body = email_body(email)
    attachments = [a.model_dump(mode="json", by_alias=True) for a in email.attachments]

    existing = proposal_service.find_proposal(db, rfp.id, vendor.id)
    if existing:
        existing.raw_email_content = body
        existing.raw_attachments = attachments
        existing.status = PROPOSAL_RECEIVED
        existing.received_at = utcnow()
        rfp_service.record_proposal_received(db, rfp)
        db.commit()
        logger.info(
            "Proposal {} updated from email: {} → RFP {} ({!r})",
            existing.id, sender, rfp.id, email.subject,
        )
        return existing, False

    proposal = proposal_service.create_proposal(
        db,
        ProposalCreate(
            rfp_id=rfp.id,
            vendor_id=vendor.id,
            raw_email_content=body,
            raw_attachments=email.attachments,
        ),
    )
    logger.info(
        "Proposal {} created from email: {} → RFP {} ({!r})",
        proposal.id, sender, rfp.id, email.subject,
    )
    return proposal, True
