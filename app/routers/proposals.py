"""
routers/proposals.py — Proposal routes

Manual proposal creation, field updates, status changes, ranked listing
and on-demand AI analysis.

Business Rules:
- Listing is ranked by AI score then recency and omits rawEmailContent
- Duplicate (RFP, vendor) → 409 with the existing proposal under "data"
- No DELETE endpoint; proposals are kept for the audit trail

Called by: main.py (router mount)
Depends on: services/proposal_service.py, services/ai_service.py
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.proposals import ProposalCreate, ProposalStatusChange, ProposalUpdate
from ..schemas.responses import ItemResponse, PaginatedResponse, ok, page_limit, paginated
from ..services import proposal_service
from ..services.ai_service import HuggingFaceClient, get_ai_client
from ..services.proposal_service import proposal_to_dict

router = APIRouter(tags=["proposals"])


@router.get("/api/proposals", response_model=PaginatedResponse, response_model_exclude_unset=True)
async def list_proposals(
    rfp_id: int | None = Query(None, alias="rfpId"),
    vendor_id: int | None = Query(None, alias="vendorId"),
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    limit = page_limit(limit)
    rows, total = proposal_service.list_proposals(
        db, rfp_id=rfp_id, vendor_id=vendor_id, status=status, page=page, limit=limit
    )
    return paginated([proposal_to_dict(p, include_raw=False) for p in rows], page, limit, total)


@router.post("/api/proposals", status_code=201, response_model=ItemResponse, response_model_exclude_unset=True)
async def create_proposal(payload: ProposalCreate, db: Session = Depends(get_db)):
    proposal = proposal_service.create_proposal(db, payload)
    return ok(proposal_to_dict(proposal), "Proposal created successfully")


@router.get("/api/proposals/{proposal_id}", response_model=ItemResponse, response_model_exclude_unset=True)
async def get_proposal(proposal_id: int, db: Session = Depends(get_db)):
    return ok(proposal_to_dict(proposal_service.get_proposal(db, proposal_id)))


@router.put("/api/proposals/{proposal_id}", response_model=ItemResponse, response_model_exclude_unset=True)
async def update_proposal(
    proposal_id: int, payload: ProposalUpdate, db: Session = Depends(get_db)
):
    proposal = proposal_service.update_proposal(db, proposal_id, payload)
    return ok(proposal_to_dict(proposal, include_raw=False), "Proposal updated successfully")


@router.patch("/api/proposals/{proposal_id}/status", response_model=ItemResponse, response_model_exclude_unset=True)
async def change_proposal_status(
    proposal_id: int, payload: ProposalStatusChange, db: Session = Depends(get_db)
):
    proposal = proposal_service.change_proposal_status(
        db, proposal_id, payload.status, payload.evaluator_notes
    )
    return ok(proposal_to_dict(proposal), f"Proposal status updated to {proposal.status}")


@router.post("/api/proposals/{proposal_id}/analyze", response_model=ItemResponse, response_model_exclude_unset=True)
async def analyze_proposal(
    proposal_id: int,
    db: Session = Depends(get_db),
    ai: HuggingFaceClient = Depends(get_ai_client),
):
    proposal = await proposal_service.analyze_proposal(db, ai, proposal_id)
    return ok(proposal_to_dict(proposal, include_raw=False), "Proposal analyzed")
