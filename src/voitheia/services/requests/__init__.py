"""Help request services."""

from .finder import ProximityRequestFinder, RankedRequest
from .service import (
    change_status,
    close_requests_for_user,
    create_request,
    delete_request,
    expire_stale_requests,
    get_request,
)

__all__ = [
    "ProximityRequestFinder",
    "RankedRequest",
    "create_request",
    "get_request",
    "delete_request",
    "change_status",
    "expire_stale_requests",
    "close_requests_for_user",
]
