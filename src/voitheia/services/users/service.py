"""User profile registration and maintenance."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Protocol

from ...data.requests_repository import RequestRepository
from ...data.users_repository import UserRepository
from ...exceptions import AddressNotConfirmed, DuplicateUser, InvalidArgument, UserNotFound
from ...models.domain import ConfidenceLevel, Coordinate, GeocodeResult, UserDraft, UserProfile
from ..requests.service import close_requests_for_user

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("street", "city", "zip_code", "country")


class Geocoder(Protocol):
    def geocode(self, *, street: str, city: str, zip_code: str, country: str) -> GeocodeResult | None: ...


def _locate(geocoder: Geocoder, *, street: str, city: str, zip_code: str, country: str) -> Coordinate:
    result = geocoder.geocode(street=street, city=city, zip_code=zip_code, country=country)
    if result is None or result.confidence is not ConfidenceLevel.HIGH:
        confidence = result.confidence.value if result else "NONE"
        logger.info(f"Address '{street}, {zip_code} {city}' rejected with confidence {confidence}")
        raise AddressNotConfirmed("Address is invalid")
    return result.coordinate


def register_user(
    users: UserRepository,
    geocoder: Geocoder,
    *,
    email: str,
    first_name: str,
    last_name: str,
    street: str,
    city: str,
    zip_code: str,
    country: str,
) -> UserProfile:
    """Create a profile whose location is the geocoded postal address.

    Only addresses the geocoder resolves with HIGH confidence are accepted.
    """
    email = email.strip()
    required = {"email": email, "first_name": first_name, "last_name": last_name}
    blank = [name for name, value in required.items() if not value.strip()]
    if blank:
        raise InvalidArgument(f"Profile fields must not be empty: {', '.join(blank)}")
    if users.get_by_email(email) is not None:
        raise DuplicateUser(f"A user with email '{email}' already exists.")

    location = _locate(geocoder, street=street, city=city, zip_code=zip_code, country=country)
    profile = users.add(
        UserDraft(
            email=email,
            first_name=first_name.strip(),
            last_name=last_name.strip(),
            street=street.strip(),
            city=city.strip(),
            zip_code=zip_code.strip(),
            country=country.strip(),
            location=location,
        )
    )
    logger.info(f"Registered user {profile.id}")
    return profile


def get_user(users: UserRepository, user_id: int) -> UserProfile:
    profile = users.get(user_id)
    if profile is None:
        raise UserNotFound(user_id)
    return profile


def update_user(
    users: UserRepository,
    geocoder: Geocoder,
    user_id: int,
    changes: dict[str, Any],
) -> UserProfile:
    """Apply partial profile changes, re-geocoding when the address moves.

    Existing requests keep the location they were created with.
    """
    profile = get_user(users, user_id)
    changes = {key: value.strip() for key, value in changes.items() if value is not None}
    unknown = set(changes) - {"email", "first_name", "last_name", *ADDRESS_FIELDS}
    if unknown:
        raise InvalidArgument(f"Unknown profile fields: {', '.join(sorted(unknown))}")
    blank = sorted(key for key, value in changes.items() if not value)
    if blank:
        raise InvalidArgument(f"Profile fields must not be empty: {', '.join(blank)}")

    new_email = changes.get("email")
    if new_email and new_email.lower() != profile.email.lower():
        existing = users.get_by_email(new_email)
        if existing is not None and existing.id != profile.id:
            raise DuplicateUser(f"A user with email '{new_email}' already exists.")

    updated = replace(profile, **changes)
    if any(getattr(updated, field) != getattr(profile, field) for field in ADDRESS_FIELDS):
        updated = replace(
            updated,
            location=_locate(
                geocoder,
                street=updated.street,
                city=updated.city,
                zip_code=updated.zip_code,
                country=updated.country,
            ),
        )

    try:
        return users.update(updated)
    except KeyError as exc:
        raise UserNotFound(user_id) from exc


def delete_user(users: UserRepository, requests: RequestRepository, user_id: int) -> int:
    """Delete a profile and close the outstanding requests the user created or accepted.

    Returns the number of requests that were closed.
    """
    get_user(users, user_id)
    closed = close_requests_for_user(requests, user_id)
    if not users.delete(user_id):
        raise UserNotFound(user_id)
    logger.info(f"Deleted user {user_id}, closed {closed} open request(s)")
    return closed
