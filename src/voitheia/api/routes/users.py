"""User profile endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...data.requests_repository import RequestRepository
from ...data.users_repository import UserRepository
from ...exceptions import (
    AddressNotConfirmed,
    DuplicateUser,
    GeocodingUnavailable,
    InvalidArgument,
    StorageUnavailable,
    UserNotFound,
)
from ...schemas.users import DeleteUserResponse, RegisterUserModel, UpdateUserModel, UserModel
from ...services.users import delete_user, get_user, register_user, update_user
from ...services.users.service import Geocoder
from ..dependencies import get_geocoder, get_request_repository, get_user_repository

router = APIRouter(prefix="/users", tags=["users"])


def _address_error(exc: AddressNotConfirmed) -> HTTPException:
    return HTTPException(status_code=status.HTTP_424_FAILED_DEPENDENCY, detail=f"FailedDependency; {exc}")


@router.post("/register", response_model=UserModel, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterUserModel,
    users: UserRepository = Depends(get_user_repository),
    geocoder: Geocoder = Depends(get_geocoder),
) -> UserModel:
    """Register a profile. The address must geocode with high confidence."""
    try:
        profile = register_user(
            users,
            geocoder,
            email=payload.email,
            first_name=payload.firstName,
            last_name=payload.lastName,
            street=payload.street,
            city=payload.city,
            zip_code=payload.zip,
            country=payload.country,
        )
    except DuplicateUser as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except AddressNotConfirmed as exc:
        raise _address_error(exc) from exc
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (GeocodingUnavailable, StorageUnavailable) as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return UserModel.from_profile(profile)


@router.get("/{user_id}", response_model=UserModel, status_code=status.HTTP_200_OK)
def get_profile(user_id: int, users: UserRepository = Depends(get_user_repository)) -> UserModel:
    try:
        return UserModel.from_profile(get_user(users, user_id))
    except UserNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc


@router.put("/{user_id}", response_model=UserModel, status_code=status.HTTP_200_OK)
def update_profile(
    user_id: int,
    payload: UpdateUserModel,
    users: UserRepository = Depends(get_user_repository),
    geocoder: Geocoder = Depends(get_geocoder),
) -> UserModel:
    try:
        profile = update_user(users, geocoder, user_id, payload.to_changes())
    except UserNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except DuplicateUser as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except AddressNotConfirmed as exc:
        raise _address_error(exc) from exc
    except InvalidArgument as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (GeocodingUnavailable, StorageUnavailable) as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return UserModel.from_profile(profile)


@router.delete("/{user_id}", response_model=DeleteUserResponse, status_code=status.HTTP_200_OK)
def remove_profile(
    user_id: int,
    users: UserRepository = Depends(get_user_repository),
    requests: RequestRepository = Depends(get_request_repository),
) -> DeleteUserResponse:
    """Delete a profile; the user's outstanding requests are closed."""
    try:
        closed = delete_user(users, requests, user_id)
    except UserNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except StorageUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)) from exc
    return DeleteUserResponse(deleted=True, closedRequests=closed)
