"""
routers/ — HTTP surface of the procurement service.

One APIRouter per resource (vendors, rfps, proposals, email webhook,
health). Handlers parse the request, call the matching service and wrap
the result in the response envelope; no business rules live here.
"""
