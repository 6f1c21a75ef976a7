"""
routers/rfps.py — RFP lifecycle routes

CRUD for RFPs plus the status endpoint that drives the state machine.

Business Rules:
- New RFPs are always drafts; status only changes through PATCH .../status
- Only drafts can be deleted
- Detail view includes assigned vendors and every proposal received

Called by: main.py (router mount)
Depends on: services/rfp_service.py, schemas/rfps.py
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.responses import (
    ItemResponse,
    OkResponse,
    PaginatedResponse,
    ok,
    page_limit,
    paginated,
)
from ..schemas.rfps import RFPCreate, RFPStatusChange, RFPUpdate
from ..services import rfp_service
from ..services.rfp_service import rfp_to_dict

router = APIRouter(tags=["rfps"])


@router.get("/api/rfps", response_model=PaginatedResponse, response_model_exclude_unset=True)
async def list_rfps(
    status: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1),
    db: Session = Depends(get_db),
):
    limit = page_limit(limit)
    rows, total = rfp_service.list_rfps(
        db, status=status, search=(search or "").strip() or None, page=page, limit=limit
    )
    return paginated([rfp_to_dict(r) for r in rows], page, limit, total)


@router.post("/api/rfps", status_code=201, response_model=ItemResponse, response_model_exclude_unset=True)
async def create_rfp(payload: RFPCreate, db: Session = Depends(get_db)):
    rfp = rfp_service.create_rfp(db, payload)
    return ok(rfp_to_dict(rfp), "RFP created successfully")


@router.get("/api/rfps/{rfp_id}", response_model=ItemResponse, response_model_exclude_unset=True)
async def get_rfp(rfp_id: int, db: Session = Depends(get_db)):
    rfp = rfp_service.get_rfp(db, rfp_id, with_proposals=True)
    return ok(rfp_to_dict(rfp, include_proposals=True))


@router.put("/api/rfps/{rfp_id}", response_model=ItemResponse, response_model_exclude_unset=True)
async def update_rfp(rfp_id: int, payload: RFPUpdate, db: Session = Depends(get_db)):
    rfp = rfp_service.update_rfp(db, rfp_id, payload)
    return ok(rfp_to_dict(rfp), "RFP updated successfully")


@router.delete("/api/rfps/{rfp_id}", response_model=OkResponse, response_model_exclude_unset=True)
async def delete_rfp(rfp_id: int, db: Session = Depends(get_db)):
    rfp_service.delete_rfp(db, rfp_id)
    return ok(message="RFP deleted successfully")


@router.patch("/api/rfps/{rfp_id}/status", response_model=ItemResponse, response_model_exclude_unset=True)
async def change_rfp_status(
    rfp_id: int, payload: RFPStatusChange, db: Session = Depends(get_db)
):
    rfp = rfp_service.change_rfp_status(db, rfp_id, payload.status)
    return ok(rfp_to_dict(rfp), f"RFP status updated to {rfp.status}")
