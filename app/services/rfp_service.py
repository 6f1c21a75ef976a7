"""
rfp_service.py — RFP lifecycle manager

Creation, partial updates, deletion, status state machine and listing of
RFPs, plus the hook the proposal manager calls when a proposal lands.

Business Rules:
- New RFPs always start in draft with default terms Net 30 / 1 year / Within 30 days
- Every assigned vendor ID must resolve to an active vendor at assignment time
- Status moves only along RFP_TRANSITIONS; closed is terminal
- Entering "sent" requires at least one assigned vendor
- Only draft RFPs can be deleted
- The first proposal against a "sent" RFP moves it to in_progress, inside
  the proposal's own transaction (record_proposal_received)
- Email intake picks the most recently created sent/in_progress RFP for a vendor

Called by: routers/rfps.py, services/proposal_service.py, services/email_intake_service.py
Depends on: models, schemas/rfps.py, constants.py
"""

from loguru import logger
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from ..config import settings
from ..constants import (
    DEFAULT_RFP_TERMS,
    RFP_ACCEPTING_PROPOSALS,
    RFP_DRAFT,
    RFP_IN_PROGRESS,
    RFP_SENT,
    RFP_STATUSES,
    RFP_TRANSITIONS,
)
from ..exceptions import NotFoundError, ValidationError
from ..models import RFP, Vendor
from ..schemas.rfps import RFPCreate, RFPTerms, RFPUpdate, StructuredData
from ..utils.normalization import like_pattern
from .vendor_service import vendor_summary

# ── Serialization ────────────────────────────────────────────────────


def rfp_to_dict(rfp: RFP, include_proposals: bool = False) -> dict:
    d = {
        "id": rfp.id,
        "title": rfp.title,
        "description": rfp.description,
        "structuredData": rfp.structured_data or {},
        "budget": rfp.budget,
        "deadline": rfp.deadline.isoformat() if rfp.deadline else None,
        "items": rfp.items or [],
        "terms": rfp.terms or {},
        "status": rfp.status,
        "createdBy": rfp.created_by,
        "assignedVendors": [vendor_summary(v) for v in rfp.assigned_vendors],
        "vendorCount": rfp.vendor_count,
        "createdAt": rfp.created_at.isoformat() if rfp.created_at else None,
        "updatedAt": rfp.updated_at.isoformat() if rfp.updated_at else None,
    }
    if include_proposals:
        from .proposal_service import proposal_to_dict

        d["proposals"] = [
            proposal_to_dict(p, include_raw=False, include_rfp=False)
            for p in rfp.proposals
        ]
    return d


def rfp_summary(rfp: RFP | None) -> dict | None:
    if rfp is None:
        return None
    return {"id": rfp.id, "title": rfp.title, "status": rfp.status}


def _dump_items(items) -> list[dict]:
    return [item.model_dump() for item in items or []]


def _dump_terms(terms: RFPTerms | None) -> dict:
    if terms is None:
        return {**DEFAULT_RFP_TERMS, "other": {}}
    return terms.model_dump()


def _dump_structured(data: StructuredData | None) -> dict:
    return (data or StructuredData()).model_dump()


# ── Vendor assignment ────────────────────────────────────────────────


def resolve_assigned_vendors(db: Session, vendor_ids: list[int]) -> list[Vendor]:
    """Load the vendors for an assignment list, rejecting unknown or inactive IDs."""
    if not vendor_ids:
        return []
    found = (
        db.query(Vendor)
        .filter(Vendor.id.in_(vendor_ids), Vendor.is_active.is_(True))
        .all()
    )
    by_id = {v.id: v for v in found}
    invalid = [vid for vid in vendor_ids if vid not in by_id]
    if invalid:
        raise ValidationError(
            "Some vendor IDs are invalid or inactive",
            extra={"invalidVendorIds": invalid},
        )
    return [by_id[vid] for vid in vendor_ids]


# ── CRUD ─────────────────────────────────────────────────────────────


def get_rfp(db: Session, rfp_id: int, with_proposals: bool = False) -> RFP:
    q = db.query(RFP).options(selectinload(RFP.assigned_vendors))
    if with_proposals:
        from ..models import Proposal

        q = q.options(selectinload(RFP.proposals).selectinload(Proposal.vendor))
    rfp = q.filter(RFP.id == rfp_id).first()
    if not rfp:
        raise NotFoundError("RFP not found")
    return rfp


def create_rfp(db: Session, payload: RFPCreate) -> RFP:
    vendors = resolve_assigned_vendors(db, payload.assigned_vendors)
    rfp = RFP(
        title=payload.title,
        description=payload.description,
        structured_data=_dump_structured(payload.structured_data),
        budget=payload.budget,
        deadline=payload.deadline,
        items=_dump_items(payload.items),
        terms=_dump_terms(payload.terms),
        status=RFP_DRAFT,
        created_by=payload.created_by or settings.default_created_by,
        assigned_vendors=vendors,
    )
    db.add(rfp)
    db.commit()
    logger.info("RFP created: {!r} (id={}, vendors={})", rfp.title, rfp.id, len(vendors))
    return rfp


def update_rfp(db: Session, rfp_id: int, patch: RFPUpdate) -> RFP:
    rfp = get_rfp(db, rfp_id)
    fields = patch.model_dump(exclude_unset=True)

    if "assigned_vendors" in fields and fields["assigned_vendors"] is not None:
        rfp.assigned_vendors = resolve_assigned_vendors(db, patch.assigned_vendors)
    if fields.get("title") is not None:
        rfp.title = patch.title
    if fields.get("description") is not None:
        rfp.description = patch.description
    if "budget" in fields:
        rfp.budget = patch.budget
    if "deadline" in fields:
        rfp.deadline = patch.deadline
    if fields.get("items") is not None:
        rfp.items = _dump_items(patch.items)
    if fields.get("terms") is not None:
        rfp.terms = _dump_terms(patch.terms)
    if fields.get("structured_data") is not None:
        rfp.structured_data = _dump_structured(patch.structured_data)

    db.commit()
    logger.info("RFP {} updated: {}", rfp.id, sorted(fields))
    return rfp


def delete_rfp(db: Session, rfp_id: int) -> None:
    rfp = get_rfp(db, rfp_id)
    if rfp.status != RFP_DRAFT:
        raise ValidationError("Only draft RFPs can be deleted")
    db.delete(rfp)
    db.commit()
    logger.info("RFP {} deleted", rfp_id)


# ── Status state machine ─────────────────────────────────────────────


def can_transition(current: str, new: str) -> bool:
    return new in RFP_TRANSITIONS.get(current, frozenset())


def change_rfp_status(db: Session, rfp_id: int, new_status: str) -> RFP:
    if new_status not in RFP_STATUSES:
        raise ValidationError(
            "Valid status is required: draft, sent, in_progress, or closed"
        )
    rfp = get_rfp(db, rfp_id)
    if not can_transition(rfp.status, new_status):
        raise ValidationError(f"Cannot change status from {rfp.status} to {new_status}")
    if new_status == RFP_SENT and not rfp.assigned_vendors:
        raise ValidationError("Cannot send RFP without assigned vendors")

    old = rfp.status
    rfp.status = new_status
    db.commit()
    logger.info("RFP {} status {} → {}", rfp.id, old, new_status)
    return rfp


def record_proposal_received(db: Session, rfp: RFP) -> bool:
    """Advance sent → in_progress when a proposal arrives. Caller commits.

    Returns True if the status changed.
    """
    if rfp.status != RFP_SENT:
        return False
    rfp.status = RFP_IN_PROGRESS
    logger.info("RFP {} status {} → {} (first proposal)", rfp.id, RFP_SENT, RFP_IN_PROGRESS)
    return True


# ── Queries ──────────────────────────────────────────────────────────


def list_rfps(
    db: Session,
    status: str | None = None,
    search: str | None = None,
    page: int = 1,
    limit: int = 10,
) -> tuple[list[RFP], int]:
    q = db.query(RFP)
    if status and status != "all":
        q = q.filter(RFP.status == status)
    if search:
        pattern = like_pattern(search)
        q = q.filter(
            or_(
                RFP.title.ilike(pattern, escape="\\"),
                RFP.description.ilike(pattern, escape="\\"),
            )
        )
    total = q.with_entities(func.count(RFP.id)).scalar() or 0
    rows = (
        q.options(selectinload(RFP.assigned_vendors))
        .order_by(RFP.created_at.desc(), RFP.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def find_open_rfp_for_vendor(db: Session, vendor_id: int) -> RFP | None:
    """Most recently created RFP assigned to the vendor that still takes proposals."""
    return (
        db.query(RFP)
        .filter(
            RFP.assigned_vendors.any(Vendor.id == vendor_id),
            RFP.status.in_(RFP_ACCEPTING_PROPOSALS),
        )
        .order_by(RFP.created_at.desc(), RFP.id.desc())
        .first()
    )
