"""Proposal model — a vendor's reply to one RFP."""

from sqlalchemy import (
    JSON,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from ..database import UTCDateTime, utcnow
from .base import Base


class Proposal(Base):
    __tablename__ = "proposals"
    id = Column(Integer, primary_key=True)
    rfp_id = Column(Integer, ForeignKey("rfps.id", ondelete="CASCADE"), nullable=False)
    vendor_id = Column(Integer, ForeignKey("vendors.id"), nullable=False)
    status = Column(String(20), nullable=False, default="pending")

    raw_email_content = Column(Text, nullable=False)
    raw_attachments = Column(JSON, default=list)

    extracted_data = Column(JSON, default=dict)
    ai_analysis = Column(JSON, default=dict)
    # Mirrors ai_analysis["score"] so listings can sort in SQL
    ai_score = Column(Float, nullable=False, default=0)

    received_at = Column(UTCDateTime, default=utcnow)
    evaluated_at = Column(UTCDateTime)
    evaluator_notes = Column(String(1000))

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    rfp = relationship("RFP", back_populates="proposals")
    vendor = relationship("Vendor", back_populates="proposals")

    __table_args__ = (
        UniqueConstraint("rfp_id", "vendor_id", name="uq_proposals_rfp_vendor"),
        Index("ix_proposals_rfp", "rfp_id"),
        Index("ix_proposals_vendor", "vendor_id"),
        Index("ix_proposals_status", "status"),
        Index("ix_proposals_score", "ai_score"),
        Index("ix_proposals_received", "received_at"),
    )
