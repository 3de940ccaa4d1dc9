"""Per-request access to the storage handles and geocoder held on app state."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, HTTPException, Request, status

from ..data.requests_repository import RequestRepository
from ..data.users_repository import UserRepository
from ..services.requests.finder import ProximityRequestFinder
from ..services.users.service import Geocoder

logger = logging.getLogger(__name__)


def _from_state(request: Request, name: str) -> Any:
    value = getattr(request.app.state, name, None)
    if value is None:
        logger.error(f"Application state has no '{name}' configured")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"{name} unavailable")
    return value


def get_request_repository(request: Request) -> RequestRepository:
    return _from_state(request, "request_repository")


def get_user_repository(request: Request) -> UserRepository:
    return _from_state(request, "user_repository")


def get_geocoder(request: Request) -> Geocoder:
    return _from_state(request, "geocoder")


def get_finder(
    repository: RequestRepository = Depends(get_request_repository),
) -> ProximityRequestFinder:
    return ProximityRequestFinder(repository)
