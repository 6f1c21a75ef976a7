"""
conftest.py — Shared test fixtures

Provides an in-memory SQLite database, a FastAPI TestClient wired to it,
a stubbed Hugging Face transport, and factory fixtures for vendors, RFPs
and proposals.

Business Rules:
- All tests run against an isolated in-memory DB
- The AI client never leaves the process (httpx.MockTransport)
- Each test function gets fresh tables

Called by: all test files via pytest autodiscovery
Depends on: app.models (Base), app.database (Database, get_db), app.main
"""

import os

os.environ["TESTING"] = "1"  # Must be set before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["ENVIRONMENT"] = "test"
os.environ["HF_API_KEY"] = "hf_test_key"

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Database
from app.models import RFP, Base, Proposal, Vendor
from app.services.ai_service import HuggingFaceClient

# ── In-memory SQLite engine ──────────────────────────────────────────

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@event.listens_for(engine, "connect")
def _enable_fk(dbapi_conn, _):
    """SQLite ignores FKs unless asked."""
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


# ── Fixtures ─────────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


class FakeHuggingFace:
    """Records requests and answers with a canned generated_text."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.generated_text = (
            '{"score": 82, "summary": "Solid offer", "strengths": ["price"], '
            '"weaknesses": ["warranty"], "recommendations": ["negotiate warranty"]}'
        )

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code != 200:
            return httpx.Response(self.status_code, json={"error": "stubbed failure"})
        return httpx.Response(200, json=[{"generated_text": self.generated_text}])


@pytest.fixture()
def fake_hf() -> FakeHuggingFace:
    return FakeHuggingFace()


@pytest.fixture()
def ai_client(fake_hf) -> HuggingFaceClient:
    return HuggingFaceClient(
        api_key="hf_test_key",
        model="test/model",
        base_url="https://hf.test/models",
        transport=httpx.MockTransport(fake_hf),
    )


@pytest.fixture()
def client(db_session: Session, ai_client: HuggingFaceClient) -> TestClient:
    """FastAPI TestClient bound to the test session and the stubbed AI client."""
    from app.database import get_db
    from app.main import app

    def _override_db():
        yield db_session

    app.state.db = Database(engine)
    app.state.ai = ai_client
    app.dependency_overrides[get_db] = _override_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()
    app.state.db = None
    app.state.ai = None


# ── Factories ────────────────────────────────────────────────────────


@pytest.fixture()
def make_vendor(db_session: Session):
    counter = {"n": 0}

    def _make(**overrides) -> Vendor:
        counter["n"] += 1
        n = counter["n"]
        fields = dict(
            name=f"Vendor {n:02d}",
            email=f"vendor{n}@example.com",
            contact_person=f"Contact {n}",
            category=["IT Equipment"],
            rating=3,
            is_active=True,
        )
        fields.update(overrides)
        vendor = Vendor(**fields)
        db_session.add(vendor)
        db_session.commit()
        db_session.refresh(vendor)
        return vendor

    return _make


@pytest.fixture()
def make_rfp(db_session: Session):
    def _make(vendors: list[Vendor] | None = None, **overrides) -> RFP:
        fields = dict(
            title="Office laptops 2026",
            description="Twenty laptops with 16GB RAM and 512GB SSD for the sales team.",
            items=[{"name": "Laptop", "quantity": 20, "specifications": {"ram": "16GB"}}],
            terms={"payment": "Net 30", "warranty": "1 year", "delivery": "Within 30 days", "other": {}},
            structured_data={},
            budget=50000,
            status="draft",
            created_by="admin@example.com",
        )
        fields.update(overrides)
        rfp = RFP(**fields)
        rfp.assigned_vendors = list(vendors or [])
        db_session.add(rfp)
        db_session.commit()
        db_session.refresh(rfp)
        return rfp

    return _make


@pytest.fixture()
def make_proposal(db_session: Session):
    def _make(rfp: RFP, vendor: Vendor, score: float = 0, **overrides) -> Proposal:
        fields = dict(
            rfp_id=rfp.id,
            vendor_id=vendor.id,
            status="received",
            raw_email_content="We can deliver in 14 days.",
            raw_attachments=[],
            extracted_data={},
            ai_analysis={"score": score},
            ai_score=score,
        )
        fields.update(overrides)
        p = Proposal(**fields)
        db_session.add(p)
        db_session.commit()
        db_session.refresh(p)
        return p

    return _make


@pytest.fixture()
def vendor(make_vendor) -> Vendor:
    return make_vendor(name="Acme Supplies", email="sales@acme.com", contact_person="Jane Roe")


@pytest.fixture()
def sent_rfp(make_rfp, vendor) -> RFP:
    return make_rfp(vendors=[vendor], status="sent")
