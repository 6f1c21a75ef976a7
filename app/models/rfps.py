"""RFP model and the RFP ↔ Vendor assignment table."""

from sqlalchemy import (
    JSON,
    Column,
    Date,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship

from ..database import UTCDateTime, utcnow
from .base import Base

rfp_vendors = Table(
    "rfp_vendors",
    Base.metadata,
    Column("rfp_id", Integer, ForeignKey("rfps.id", ondelete="CASCADE"), primary_key=True),
    Column("vendor_id", Integer, ForeignKey("vendors.id"), primary_key=True),
    Index("ix_rfp_vendors_vendor", "vendor_id"),
)


class RFP(Base):
    __tablename__ = "rfps"
    id = Column(Integer, primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)

    # AI-parsed view of the description; never promoted into items/terms
    structured_data = Column(JSON, default=dict)

    budget = Column(Float)
    deadline = Column(Date)
    items = Column(JSON, default=list)
    terms = Column(JSON, nullable=False)
    status = Column(String(20), nullable=False, default="draft")
    created_by = Column(String(255), nullable=False, default="admin@example.com")

    created_at = Column(UTCDateTime, default=utcnow)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow)

    assigned_vendors = relationship(
        "Vendor", secondary=rfp_vendors, back_populates="rfps", order_by="Vendor.name"
    )
    proposals = relationship(
        "Proposal", back_populates="rfp", cascade="all, delete-orphan"
    )

    @property
    def vendor_count(self) -> int:
        return len(self.assigned_vendors or [])

    __table_args__ = (
        Index("ix_rfps_status", "status"),
        Index("ix_rfps_created", "created_at"),
    )
