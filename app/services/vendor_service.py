"""
vendor_service.py — Vendor registry

Registration, partial profile updates, activation toggle, lookup and
filtered listing of vendors.

Business Rules:
- Email is unique across all vendors (compared trimmed + lowercased)
- Uniqueness is checked up front and again by the unique index on commit,
  so two racing registrations end in one success and one ConflictError
- Partial updates only touch keys present in the body; null on a required
  field leaves it unchanged
- No hard delete: deactivate instead
- Listing is sorted by name; search is a case-insensitive substring over
  name, email and contact person

Called by: routers/vendors.py, services/rfp_service.py, services/email_intake_service.py
Depends on: models, schemas/vendors.py, database.py (commit_unique)
"""

from loguru import logger
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..database import commit_unique
from ..exceptions import ConflictError, NotFoundError
from ..models import Vendor
from ..schemas.vendors import VendorCreate, VendorUpdate
from ..utils.normalization import like_pattern, normalize_email

DUPLICATE_EMAIL = "A vendor with this email already exists"

# Columns that may be explicitly cleared by an update
_NULLABLE_FIELDS = {"contact_person", "phone", "notes"}


def vendor_to_dict(vendor: Vendor) -> dict:
    return {
        "id": vendor.id,
        "name": vendor.name,
        "email": vendor.email,
        "contactPerson": vendor.contact_person,
        "phone": vendor.phone,
        "category": list(vendor.category or []),
        "notes": vendor.notes,
        "rating": vendor.rating,
        "isActive": vendor.is_active,
        "createdAt": vendor.created_at.isoformat() if vendor.created_at else None,
        "updatedAt": vendor.updated_at.isoformat() if vendor.updated_at else None,
    }


def vendor_summary(vendor: Vendor | None) -> dict | None:
    """Compact form used when a vendor is embedded in an RFP or proposal."""
    if vendor is None:
        return None
    return {
        "id": vendor.id,
        "name": vendor.name,
        "email": vendor.email,
        "contactPerson": vendor.contact_person,
    }


def get_vendor(db: Session, vendor_id: int) -> Vendor:
    vendor = db.get(Vendor, vendor_id)
    if not vendor:
        raise NotFoundError("Vendor not found")
    return vendor


def find_active_vendor_by_email(db: Session, email: str) -> Vendor | None:
    cleaned = normalize_email(email)
    if not cleaned:
        return None
    return db.query(Vendor).filter_by(email=cleaned, is_active=True).first()


def _find_by_email(db: Session, email: str, exclude_id: int | None = None) -> Vendor | None:
    q = db.query(Vendor).filter(Vendor.email == email)
    if exclude_id is not None:
        q = q.filter(Vendor.id != exclude_id)
    return q.first()


def register_vendor(db: Session, payload: VendorCreate) -> Vendor:
    """Create a vendor. Raises ConflictError if the email is already registered."""
    existing = _find_by_email(db, payload.email)
    if existing:
        raise ConflictError(DUPLICATE_EMAIL, data=vendor_summary(existing))

    vendor = Vendor(**payload.model_dump())
    db.add(vendor)
    commit_unique(
        db, DUPLICATE_EMAIL,
        lookup=lambda: vendor_summary(_find_by_email(db, payload.email)),
    )
    logger.info("Vendor registered: {} <{}> (id={})", vendor.name, vendor.email, vendor.id)
    return vendor


def update_vendor(db: Session, vendor_id: int, patch: VendorUpdate) -> Vendor:
    vendor = get_vendor(db, vendor_id)
    fields = {
        k: v for k, v in patch.model_dump(exclude_unset=True).items()
        if v is not None or k in _NULLABLE_FIELDS
    }

    new_email = fields.get("email")
    if new_email and new_email != vendor.email:
        clash = _find_by_email(db, new_email, exclude_id=vendor.id)
        if clash:
            raise ConflictError(DUPLICATE_EMAIL, data=vendor_summary(clash))

    def _winner():
        if not new_email:
            return None
        return vendor_summary(_find_by_email(db, new_email, exclude_id=vendor_id))

    for key, value in fields.items():
        setattr(vendor, key, value)
    commit_unique(db, DUPLICATE_EMAIL, lookup=_winner)
    logger.info("Vendor {} updated: {}", vendor.id, sorted(fields))
    return vendor


def set_vendor_active(db: Session, vendor_id: int, is_active: bool) -> Vendor:
    vendor = get_vendor(db, vendor_id)
    if vendor.is_active != is_active:
        vendor.is_active = is_active
        db.commit()
        logger.info("Vendor {} {}", vendor.id, "activated" if is_active else "deactivated")
    return vendor


def list_vendors(
    db: Session,
    active_only: bool = True,
    category: str | None = None,
    search: str | None = None,
) -> list[Vendor]:
    q = db.query(Vendor)
    if active_only:
        q = q.filter(Vendor.is_active.is_(True))
    if search:
        pattern = like_pattern(search)
        q = q.filter(
            or_(
                Vendor.name.ilike(pattern, escape="\\"),
                Vendor.email.ilike(pattern, escape="\\"),
                Vendor.contact_person.ilike(pattern, escape="\\"),
            )
        )
    vendors = q.order_by(Vendor.name.asc(), Vendor.id.asc()).all()
    # category lives in a JSON list; membership is checked here to stay dialect-neutral
    if category:
        vendors = [v for v in vendors if category in (v.category or [])]
    return vendors
