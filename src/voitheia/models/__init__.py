"""Domain model exports."""

from .domain import (
    ConfidenceLevel,
    Coordinate,
    GeocodeResult,
    ProximityQuery,
    RequestDraft,
    RequestRecord,
    RequestStatus,
    UserDraft,
    UserProfile,
)

__all__ = [
    "Coordinate",
    "RequestStatus",
    "RequestDraft",
    "RequestRecord",
    "ProximityQuery",
    "UserDraft",
    "UserProfile",
    "ConfidenceLevel",
    "GeocodeResult",
]
