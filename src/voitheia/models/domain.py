"""Domain models for help requests and user profiles."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ..exceptions import InvalidArgument


@dataclass(frozen=True, slots=True)
class Coordinate:
    """A latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        for name, value, bound in (("latitude", self.latitude, 90.0), ("longitude", self.longitude, 180.0)):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidArgument(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or not -bound <= value <= bound:
                raise InvalidArgument(f"{name} must be within [-{bound:g}, {bound:g}], got {value}")


class RequestStatus(str, Enum):
    OPEN = "OPEN"
    PENDING = "PENDING"
    CLOSED = "CLOSED"
    TIMEOUT = "TIMEOUT"


@dataclass(frozen=True, slots=True)
class RequestDraft:
    """A help request that has not been stored yet."""

    requestor_id: int
    topic: str
    description: str
    location: Coordinate
    created_on: datetime
    status: RequestStatus = RequestStatus.OPEN
    acceptor_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class RequestRecord:
    """A stored help request. The location is fixed when the request is created."""

    id: int
    requestor_id: int
    topic: str
    description: str
    status: RequestStatus
    created_on: datetime
    location: Coordinate
    acceptor_id: Optional[int] = None


@dataclass(frozen=True, slots=True)
class ProximityQuery:
    center: Coordinate
    max_results: int = 10
    radius_m: float = 2000.0


@dataclass(frozen=True, slots=True)
class UserDraft:
    email: str
    first_name: str
    last_name: str
    street: str
    city: str
    zip_code: str
    country: str
    location: Coordinate


@dataclass(frozen=True, slots=True)
class UserProfile:
    """A registered user with a geocoded home location."""

    id: int
    email: str
    first_name: str
    last_name: str
    street: str
    city: str
    zip_code: str
    country: str
    location: Coordinate


class ConfidenceLevel(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True, slots=True)
class GeocodeResult:
    coordinate: Coordinate
    confidence: ConfidenceLevel
    display_name: str = ""
