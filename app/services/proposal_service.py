"""
proposal_service.py — Proposal intake and lifecycle

Manual proposal creation, field updates, status changes, ranked listing
and AI analysis of vendor proposals.

Business Rules:
- One proposal per (RFP, vendor); enforced up front and by the unique index
- Creation checks run in a fixed order: IDs present → RFP exists →
  vendor assigned → vendor active → no existing proposal
- A proposal with raw content starts as "received", otherwise "pending"
- The first proposal on a "sent" RFP advances it to in_progress (same commit)
- Proposal status may move freely between pending/received/evaluated/rejected;
  evaluated_at is stamped only the first time it becomes "evaluated"
- Listings rank by AI score desc, then most recently received, and never
  include the raw email body
- ai_score always mirrors ai_analysis["score"]

Called by: routers/proposals.py, services/email_intake_service.py
Depends on: models, schemas/proposals.py, services/rfp_service.py, services/ai_service.py
"""

from typing import Any

from loguru import logger
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ..constants import (
    DEFAULT_AI_ANALYSIS,
    DEFAULT_EXTRACTED_DATA,
    MANUAL_PROPOSAL_CONTENT,
    PROPOSAL_EVALUATED,
    PROPOSAL_PENDING,
    PROPOSAL_RECEIVED,
    PROPOSAL_STATUSES,
)
from ..database import commit_unique, utcnow
from ..exceptions import ConflictError, NotFoundError, ValidationError
from ..models import Proposal, Vendor
from ..schemas.proposals import AIAnalysis, ExtractedData, ProposalCreate, ProposalUpdate
from . import rfp_service
from .vendor_service import vendor_summary

DUPLICATE_PROPOSAL = "Proposal already exists for this vendor and RFP"
INVALID_STATUS = "Valid status is required: pending, received, evaluated, or rejected"

# ── Serialization ────────────────────────────────────────────────────


def _camel(model_cls, stored: dict | None) -> dict:
    return model_cls.model_validate(stored or {}).model_dump(mode="json", by_alias=True)


def proposal_to_dict(p: Proposal, include_raw: bool = True, include_rfp: bool = True) -> dict:
    d = {
        "id": p.id,
        "rfpId": p.rfp_id,
        "vendorId": p.vendor_id,
        "vendor": vendor_summary(p.vendor),
        "status": p.status,
        "rawAttachments": list(p.raw_attachments or []),
        "extractedData": _camel(ExtractedData, p.extracted_data),
        "aiAnalysis": _camel(AIAnalysis, p.ai_analysis),
        "receivedAt": p.received_at.isoformat() if p.received_at else None,
        "evaluatedAt": p.evaluated_at.isoformat() if p.evaluated_at else None,
        "evaluatorNotes": p.evaluator_notes,
        "createdAt": p.created_at.isoformat() if p.created_at else None,
        "updatedAt": p.updated_at.isoformat() if p.updated_at else None,
    }
    if include_rfp:
        d["rfp"] = rfp_service.rfp_summary(p.rfp)
    if include_raw:
        d["rawEmailContent"] = p.raw_email_content
    return d


def _set_ai_analysis(p: Proposal, analysis: dict) -> None:
    p.ai_analysis = analysis
    p.ai_score = float(analysis.get("score") or 0)


# ── Lookups ──────────────────────────────────────────────────────────


def get_proposal(db: Session, proposal_id: int) -> Proposal:
    p = (
        db.query(Proposal)
        .options(joinedload(Proposal.vendor), joinedload(Proposal.rfp))
        .filter(Proposal.id == proposal_id)
        .first()
    )
    if not p:
        raise NotFoundError("Proposal not found")
    return p


def find_proposal(db: Session, rfp_id: int, vendor_id: int) -> Proposal | None:
    return db.query(Proposal).filter_by(rfp_id=rfp_id, vendor_id=vendor_id).first()


# ── Create ───────────────────────────────────────────────────────────


def create_proposal(db: Session, payload: ProposalCreate) -> Proposal:
    """Attach a vendor's proposal to an RFP after checking every precondition.

    Raises ValidationError, NotFoundError or ConflictError (with the existing
    proposal under ``data``).
    """
    if not payload.rfp_id or not payload.vendor_id:
        raise ValidationError("RFP ID and Vendor ID are required")

    rfp = rfp_service.get_rfp(db, payload.rfp_id)
    if payload.vendor_id not in {v.id for v in rfp.assigned_vendors}:
        raise ValidationError("Vendor is not assigned to this RFP")

    vendor = db.get(Vendor, payload.vendor_id)
    if not vendor or not vendor.is_active:
        raise NotFoundError("Vendor not found or inactive")

    existing = find_proposal(db, rfp.id, vendor.id)
    if existing:
        raise ConflictError(DUPLICATE_PROPOSAL, data=proposal_to_dict(existing))

    raw = payload.raw_email_content
    proposal = Proposal(
        rfp=rfp,
        vendor=vendor,
        status=PROPOSAL_RECEIVED if raw else PROPOSAL_PENDING,
        raw_email_content=raw or MANUAL_PROPOSAL_CONTENT,
        raw_attachments=[a.model_dump(mode="json", by_alias=True) for a in payload.raw_attachments],
        extracted_data=(
            payload.extracted_data.model_dump(mode="json")
            if payload.extracted_data else dict(DEFAULT_EXTRACTED_DATA)
        ),
        evaluator_notes=payload.evaluator_notes,
        received_at=utcnow(),
    )
    _set_ai_analysis(
        proposal,
        payload.ai_analysis.model_dump(mode="json") if payload.ai_analysis else dict(DEFAULT_AI_ANALYSIS),
    )
    db.add(proposal)
    rfp_service.record_proposal_received(db, rfp)

    rfp_id, vendor_id = rfp.id, vendor.id

    def _winner():
        won = find_proposal(db, rfp_id, vendor_id)
        return proposal_to_dict(won) if won else None

    commit_unique(db, DUPLICATE_PROPOSAL, lookup=_winner)
    logger.info(
        "Proposal {} created: RFP {} / vendor {} ({})",
        proposal.id, rfp_id, vendor_id, proposal.status,
    )
    return proposal


# ── Update ───────────────────────────────────────────────────────────


def _apply_status(p: Proposal, status: str) -> None:
    if status not in PROPOSAL_STATUSES:
        raise ValidationError(INVALID_STATUS)
    if status == PROPOSAL_EVALUATED and p.evaluated_at is None:
        p.evaluated_at = utcnow()
    p.status = status


def update_proposal(db: Session, proposal_id: int, patch: ProposalUpdate) -> Proposal:
    p = get_proposal(db, proposal_id)
    fields = patch.model_dump(exclude_unset=True)

    if patch.status is not None:
        _apply_status(p, patch.status)
    if "evaluator_notes" in fields:
        p.evaluator_notes = patch.evaluator_notes

    analysis = patch.ai_analysis.model_dump(mode="json") if patch.ai_analysis else None
    if patch.extracted_data is not None:
        p.extracted_data = patch.extracted_data.model_dump(mode="json")
        if patch.extracted_data.model_fields_set:
            analysis = analysis or dict(p.ai_analysis or DEFAULT_AI_ANALYSIS)
            analysis["last_updated"] = utcnow().isoformat()
    if analysis is not None:
        _set_ai_analysis(p, analysis)

    db.commit()
    logger.info("Proposal {} updated: {}", p.id, sorted(fields))
    return p


def change_proposal_status(
    db: Session, proposal_id: int, status: str, evaluator_notes: str | None = None
) -> Proposal:
    if status not in PROPOSAL_STATUSES:
        raise ValidationError(INVALID_STATUS)
    p = get_proposal(db, proposal_id)
    old = p.status
    _apply_status(p, status)
    if evaluator_notes:
        p.evaluator_notes = evaluator_notes
    db.commit()
    logger.info("Proposal {} status {} → {}", p.id, old, status)
    return p


async def analyze_proposal(db: Session, ai, proposal_id: int) -> Proposal:
    """Run the proposal text through the AI client and store the result."""
    p = get_proposal(db, proposal_id)
    result: dict[str, Any] = await ai.analyze(p.raw_email_content)
    analysis = AIAnalysis.model_validate({
        **(p.ai_analysis or {}),
        **result,
        "last_updated": utcnow(),
    })
    return update_proposal(db, p.id, ProposalUpdate(ai_analysis=analysis))


# ── Queries ──────────────────────────────────────────────────────────


def list_proposals(
    db: Session,
    rfp_id: int | None = None,
    vendor_id: int | None = None,
    status: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[Proposal], int]:
    q = db.query(Proposal)
    if rfp_id is not None:
        q = q.filter(Proposal.rfp_id == rfp_id)
    if vendor_id is not None:
        q = q.filter(Proposal.vendor_id == vendor_id)
    if status and status != "all":
        q = q.filter(Proposal.status == status)
    total = q.with_entities(func.count(Proposal.id)).scalar() or 0
    rows = (
        q.options(joinedload(Proposal.vendor), joinedload(Proposal.rfp))
        .order_by(Proposal.ai_score.desc(), Proposal.received_at.desc(), Proposal.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total
