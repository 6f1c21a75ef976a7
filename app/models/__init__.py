"""Database models — re-exports all models.

Import from here:  from app.models import Vendor, RFP, Proposal
Or from submodules: from app.models.rfps import RFP
"""

from .base import Base  # noqa: F401

# Vendors
from .vendors import Vendor  # noqa: F401

# RFPs & vendor assignment
from .rfps import RFP, rfp_vendors  # noqa: F401

# Proposals
from .proposals import Proposal  # noqa: F401
