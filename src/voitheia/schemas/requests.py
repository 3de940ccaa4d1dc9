"""Pydantic request/response models for help request endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import RequestRecord, RequestStatus


class CreateRequestModel(BaseModel):
    requestorId: int = Field(..., description="Id of the user asking for help.")
    topic: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=4000)
    latitude: Optional[float] = Field(
        default=None, description="Where help is needed. Defaults to the requestor's home location."
    )
    longitude: Optional[float] = None


class CreateRequestResponse(BaseModel):
    id: int


class PatchRequestModel(BaseModel):
    status: RequestStatus
    acceptorId: Optional[int] = Field(default=None, description="Required when moving to PENDING.")


class RequestModel(BaseModel):
    id: int
    requestorId: int
    acceptorId: Optional[int] = None
    topic: str
    description: str
    status: RequestStatus
    createdOn: datetime
    latitude: float
    longitude: float

    @classmethod
    def from_record(cls, record: RequestRecord) -> "RequestModel":
        return cls(
            id=record.id,
            requestorId=record.requestor_id,
            acceptorId=record.acceptor_id,
            topic=record.topic,
            description=record.description,
            status=record.status,
            createdOn=record.created_on,
            latitude=record.location.latitude,
            longitude=record.location.longitude,
        )


class NearbyRequestModel(RequestModel):
    distanceMeters: float


class NearbyRequestsResponse(BaseModel):
    requests: List[NearbyRequestModel]


class ExpireRequestsResponse(BaseModel):
    expired: int
    requestIds: List[int]
