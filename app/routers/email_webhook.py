"""
routers/email_webhook.py — Inbound vendor email webhook

The mail provider posts each vendor reply here; it becomes (or refreshes)
the proposal for that vendor's open RFP.

Business Rules:
- "from" is mandatory → 400 without it
- 201 when a new proposal was created, 200 when an existing one was refreshed

Called by: main.py (router mount)
Depends on: services/email_intake_service.py
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.emails import InboundEmail
from ..schemas.responses import ItemResponse, ok
from ..services.email_intake_service import upsert_from_email
from ..services.proposal_service import proposal_to_dict

router = APIRouter(tags=["email"])


@router.post("/api/email-webhook", response_model=ItemResponse, response_model_exclude_unset=True)
async def email_webhook(payload: InboundEmail, db: Session = Depends(get_db)):
    proposal, created = upsert_from_email(db, payload)
    message = "Proposal created from email" if created else "Proposal updated from email"
    return JSONResponse(
        ok(proposal_to_dict(proposal, include_raw=False), message),
        status_code=201 if created else 200,
    )
