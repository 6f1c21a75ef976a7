"""
test_email_intake.py — Tests for app/services/email_intake_service.py

Covers sender resolution, RFP selection, body fallback, attachment
defaults and the create-then-update idempotence of repeated emails.

Called by: pytest
Depends on: app/services/email_intake_service.py, tests/conftest.py
"""

from datetime import timedelta

import pytest

from app.exceptions import NotFoundError, ValidationError
from app.models import Proposal
from app.schemas.emails import InboundEmail
from app.services.email_intake_service import upsert_from_email


def _email(**kw) -> InboundEmail:
    body = {"from": "sales@acme.com", "subject": "Re: RFP", "text": "Price is $45,000"}
    body.update(kw)
    return InboundEmail.model_validate(body)


def test_missing_sender(db_session):
    with pytest.raises(ValidationError, match=r"Missing sender email \(from field\)"):
        upsert_from_email(db_session, _email(**{"from": "   "}))


def test_unknown_sender(db_session):
    with pytest.raises(NotFoundError, match="Vendor not found or inactive for email: ghost@nowhere.com"):
        upsert_from_email(db_session, _email(**{"from": "Ghost@Nowhere.com"}))


def test_no_open_rfp(db_session, vendor, make_rfp):
    make_rfp(vendors=[vendor], status="draft")
    with pytest.raises(NotFoundError, match="No active RFPs found for this vendor") as exc:
        upsert_from_email(db_session, _email())
    assert exc.value.extra["vendorName"] == "Acme Supplies"


def test_creates_received_proposal_and_advances_rfp(db_session, sent_rfp):
    proposal, created = upsert_from_email(db_session, _email(**{"from": "  SALES@ACME.COM "}))
    assert created is True
    assert proposal.status == "received"
    assert proposal.raw_email_content == "Price is $45,000"
    db_session.refresh(sent_rfp)
    assert sent_rfp.status == "in_progress"


def test_second_email_updates_same_proposal(db_session, sent_rfp):
    first, created = upsert_from_email(db_session, _email())
    assert created
    first.status = "evaluated"
    db_session.commit()

    second, created = upsert_from_email(db_session, _email(text="Revised: $42,000"))
    assert created is False
    assert second.id == first.id
    assert second.status == "received"
    assert second.raw_email_content == "Revised: $42,000"
    assert db_session.query(Proposal).count() == 1


def test_repeat_email_restamps_received_at_and_replaces_attachments(db_session, sent_rfp, monkeypatch):
    first, _ = upsert_from_email(
        db_session, _email(attachments=[{"filename": "quote.pdf"}, {"filename": "specs.xlsx"}])
    )
    first_received = first.received_at
    later = first_received + timedelta(minutes=5)
    monkeypatch.setattr("app.services.email_intake_service.utcnow", lambda: later)

    second, created = upsert_from_email(
        db_session, _email(attachments=[{"filename": "revised.pdf", "size": 2048}])
    )
    assert created is False
    db_session.refresh(second)
    assert second.received_at == later
    assert second.received_at > first_received
    assert second.raw_attachments == [
        {"filename": "revised.pdf", "contentType": "application/octet-stream", "size": 2048, "url": ""},
    ]


def test_emailed_update_advances_sent_rfp(db_session, vendor, make_rfp, make_proposal):
    rfp = make_rfp(vendors=[vendor])
    make_proposal(rfp, vendor, status="pending")
    rfp.status = "sent"
    db_session.commit()

    _, created = upsert_from_email(db_session, _email())
    assert created is False
    db_session.refresh(rfp)
    assert rfp.status == "in_progress"


def test_body_falls_back_to_html_then_placeholder(db_session, sent_rfp):
    p, _ = upsert_from_email(db_session, _email(text=None, html="<p>Quote</p>"))
    assert p.raw_email_content == "<p>Quote</p>"
    p, _ = upsert_from_email(db_session, _email(text="", html=""))
    assert p.raw_email_content == "No content"


def test_attachment_defaults(db_session, sent_rfp):
    p, _ = upsert_from_email(db_session, _email(attachments=[{"filename": "quote.pdf"}, {}]))
    assert p.raw_attachments == [
        {"filename": "quote.pdf", "contentType": "application/octet-stream", "size": 0, "url": ""},
        {"filename": "attachment", "contentType": "application/octet-stream", "size": 0, "url": ""},
    ]


def test_targets_most_recent_open_rfp(db_session, vendor, make_rfp):
    make_rfp(vendors=[vendor], status="in_progress", title="Older RFP")
    newer = make_rfp(vendors=[vendor], status="sent", title="Newer RFP")
    p, _ = upsert_from_email(db_session, _email())
    assert p.rfp_id == newer.id
