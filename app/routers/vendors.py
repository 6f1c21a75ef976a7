"""
routers/vendors.py — Vendor registry routes

Register, update, activate/deactivate, fetch and list vendors.

Business Rules:
- Listing shows active vendors unless ?active=false is passed
- There is no DELETE; deactivation is the removal path
- Duplicate email → 409 with the existing vendor under "data"

Called by: main.py (router mount)
Depends on: services/vendor_service.py, schemas/vendors.py
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.responses import ItemResponse, VendorListResponse, ok
from ..schemas.vendors import VendorActiveToggle, VendorCreate, VendorUpdate
from ..services import vendor_service
from ..services.vendor_service import vendor_to_dict

router = APIRouter(tags=["vendors"])


@router.get("/api/vendors", response_model=VendorListResponse, response_model_exclude_unset=True)
async def list_vendors(
    active: str | None = Query(None, description='"false" includes inactive vendors'),
    category: str | None = Query(None),
    search: str | None = Query(None),
    db: Session = Depends(get_db),
):
    vendors = vendor_service.list_vendors(
        db,
        active_only=active != "false",
        category=category or None,
        search=(search or "").strip() or None,
    )
    return ok([vendor_to_dict(v) for v in vendors], count=len(vendors))


@router.post("/api/vendors", status_code=201, response_model=ItemResponse, response_model_exclude_unset=True)
async def create_vendor(payload: VendorCreate, db: Session = Depends(get_db)):
    vendor = vendor_service.register_vendor(db, payload)
    return ok(vendor_to_dict(vendor), "Vendor created successfully")


@router.get("/api/vendors/{vendor_id}", response_model=ItemResponse, response_model_exclude_unset=True)
async def get_vendor(vendor_id: int, db: Session = Depends(get_db)):
    return ok(vendor_to_dict(vendor_service.get_vendor(db, vendor_id)))


@router.put("/api/vendors/{vendor_id}", response_model=ItemResponse, response_model_exclude_unset=True)
async def update_vendor(vendor_id: int, payload: VendorUpdate, db: Session = Depends(get_db)):
    vendor = vendor_service.update_vendor(db, vendor_id, payload)
    return ok(vendor_to_dict(vendor), "Vendor updated successfully")


@router.patch("/api/vendors/{vendor_id}/active", response_model=ItemResponse, response_model_exclude_unset=True)
async def set_vendor_active(
    vendor_id: int, payload: VendorActiveToggle, db: Session = Depends(get_db)
):
    vendor = vendor_service.set_vendor_active(db, vendor_id, payload.is_active)
    state = "activated" if vendor.is_active else "deactivated"
    return ok(vendor_to_dict(vendor), f"Vendor {state}")
