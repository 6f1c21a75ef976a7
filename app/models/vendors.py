"""Vendor model — one row per supplier that can be invited to RFPs."""

from sqlalchemy import JSON, Boolean, Column, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from ..database import UTCDateTime, utcnow
from .base import Base


class Vendor(Base):
    __tablename__ = "vendors"
    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    contact_person = Column(String(100))
    phone = Column(String(20))
    category = Column(JSON, nullable=False, default=lambda: ["Other"])
    notes = Column(Text)
    rating = Column(Integer, nullable=False, default=3)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    rfps = relationship("RFP", secondary="rfp_vendors", back_populates="assigned_vendors")
    proposals = relationship("Proposal", back_populates="vendor")

    __table_args__ = (
        Index("ix_vendors_name", "name"),
        Index("ix_vendors_active", "is_active"),
    )
