"""Help request endpoints."""

from __future__ import annotations

import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ...config import settings
from ...data.requests_repository import RequestRepository
from ...data.users_repository import UserRepository
from ...exceptions import (
    InvalidArgument,
    InvalidStatusTransition,
    RequestNotFound,
    StorageUnavailable,
    UserNotFound,
)
from ...models.domain import Coordinate
from ...schemas.requests import (
    CreateRequestModel,
    CreateRequestResponse,
    ExpireRequestsResponse,
    NearbyRequestModel,
    NearbyRequestsResponse,
    PatchRequestModel,
    RequestModel,
)
from ...services.requests import (
    ProximityRequestFinder,
    change_status,
    create_request,
    delete_request,
    expire_stale_requests,
    get_request,
)
from ..dependencies import get_finder, get_request_repository, get_user_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["requests"])


def _storage_error(exc: StorageUnavailable) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@router.get("", response_model=NearbyRequestsResponse, status_code=status.HTTP_200_OK)
def list_nearby_requests(
    longitude: float = Query(..., description="Longitude in degrees"),
    latitude: float = Query(..., description="Latitude in degrees"),
    amount: int | None = Query(default=None, description="How many requests to retrieve"),
    meters_perimeter: float | None = Query(
        default=None,
        alias="metersPerimeter",
        description="Search radius around the point, in meters",
    ),
    finder: ProximityRequestFinder = Depends(get_finder),
) -> NearbyRequestsResponse:
    """Get the open requests closest to a point, nearest first."""
    max_results = amount if amount is not None else settings.default_request_amount
    radius_m = meters_perimeter if meters_perimeter is not None else settings.default_request_perimeter_m
    try:
        center = Coordinate(latitude, longitude)
        ranked = finder.find_nearby_ranked(
            center, radius_m, max_results, timeout=settings.storage_timeout_seconds
        )
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StorageUnavailable as exc:
        raise _storage_error(exc) from exc

    return NearbyRequestsResponse(
        requests=[
            NearbyRequestModel(**RequestModel.from_record(item.record).model_dump(), distanceMeters=item.distance_m)
            for item in ranked
        ]
    )


@router.post("", response_model=CreateRequestResponse, status_code=status.HTTP_201_CREATED)
def insert_request(
    payload: CreateRequestModel,
    response: Response,
    requests: RequestRepository = Depends(get_request_repository),
    users: UserRepository = Depends(get_user_repository),
) -> CreateRequestResponse:
    if (payload.latitude is None) != (payload.longitude is None):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="latitude and longitude must be given together",
        )
    try:
        location = (
            Coordinate(payload.latitude, payload.longitude) if payload.latitude is not None else None
        )
        record = create_request(
            requests,
            users,
            requestor_id=payload.requestorId,
            topic=payload.topic,
            description=payload.description,
            location=location,
        )
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except UserNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageUnavailable as exc:
        raise _storage_error(exc) from exc

    response.headers["Location"] = f"{settings.api_prefix}/requests/{record.id}"
    return CreateRequestResponse(id=record.id)


@router.post("/expire", response_model=ExpireRequestsResponse, status_code=status.HTTP_200_OK)
def expire_requests(
    requests: RequestRepository = Depends(get_request_repository),
) -> ExpireRequestsResponse:
    """Move requests that stayed OPEN or PENDING too long to TIMEOUT."""
    try:
        expired = expire_stale_requests(requests, timedelta(hours=settings.request_timeout_hours))
    except StorageUnavailable as exc:
        raise _storage_error(exc) from exc
    return ExpireRequestsResponse(expired=len(expired), requestIds=[record.id for record in expired])


@router.get("/{request_id}", response_model=RequestModel, status_code=status.HTTP_200_OK)
def get_by_id(
    request_id: int,
    requests: RequestRepository = Depends(get_request_repository),
) -> RequestModel:
    try:
        return RequestModel.from_record(get_request(requests, request_id))
    except RequestNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageUnavailable as exc:
        raise _storage_error(exc) from exc


@router.delete("/{request_id}", status_code=status.HTTP_200_OK)
def remove_request(
    request_id: int,
    requests: RequestRepository = Depends(get_request_repository),
) -> dict:
    try:
        delete_request(requests, request_id)
    except RequestNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageUnavailable as exc:
        raise _storage_error(exc) from exc
    return {"success": True, "id": request_id}


@router.patch("/{request_id}", response_model=RequestModel, status_code=status.HTTP_200_OK)
def patch_request(
    request_id: int,
    payload: PatchRequestModel,
    requests: RequestRepository = Depends(get_request_repository),
    users: UserRepository = Depends(get_user_repository),
) -> RequestModel:
    """Update the status of a request."""
    try:
        record = change_status(
            requests,
            request_id,
            payload.status,
            acceptor_id=payload.acceptorId,
            users=users,
        )
    except (RequestNotFound, UserNotFound) as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvalidStatusTransition as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StorageUnavailable as exc:
        raise _storage_error(exc) from exc
    return RequestModel.from_record(record)
