"""Shared enumerations and defaults for vendors, RFPs and proposals."""

RFP_DRAFT = "draft"
RFP_SENT = "sent"
RFP_IN_PROGRESS = "in_progress"
RFP_CLOSED = "closed"
RFP_STATUSES = (RFP_DRAFT, RFP_SENT, RFP_IN_PROGRESS, RFP_CLOSED)

# current status -> statuses it may move to; closed is terminal
RFP_TRANSITIONS: dict[str, frozenset[str]] = {
    RFP_DRAFT: frozenset({RFP_SENT, RFP_CLOSED}),
    RFP_SENT: frozenset({RFP_IN_PROGRESS, RFP_CLOSED}),
    RFP_IN_PROGRESS: frozenset({RFP_CLOSED}),
    RFP_CLOSED: frozenset(),
}

# RFPs that can still take vendor replies by email
RFP_ACCEPTING_PROPOSALS = (RFP_SENT, RFP_IN_PROGRESS)

PROPOSAL_PENDING = "pending"
PROPOSAL_RECEIVED = "received"
PROPOSAL_EVALUATED = "evaluated"
PROPOSAL_REJECTED = "rejected"
PROPOSAL_STATUSES = (PROPOSAL_PENDING, PROPOSAL_RECEIVED, PROPOSAL_EVALUATED, PROPOSAL_REJECTED)

VENDOR_CATEGORIES = (
    "IT Equipment",
    "Office Supplies",
    "Software",
    "Services",
    "Furniture",
    "Consulting",
    "Other",
)
DEFAULT_VENDOR_CATEGORY = "Other"

DEFAULT_RFP_TERMS = {
    "payment": "Net 30",
    "warranty": "1 year",
    "delivery": "Within 30 days",
    "other": {},
}

DEFAULT_EXTRACTED_DATA = {
    "total_price": 0,
    "delivery_days": 30,
    "warranty": "Not specified",
    "payment_terms": "Not specified",
    "specifications": {},
    "notes": "",
    "compliance_score": 0,
}

DEFAULT_AI_ANALYSIS = {
    "score": 0,
    "summary": "",
    "strengths": [],
    "weaknesses": [],
    "recommendations": [],
    "comparison_data": {},
}

MANUAL_PROPOSAL_CONTENT = "Manually created proposal"
EMPTY_EMAIL_CONTENT = "No content"
