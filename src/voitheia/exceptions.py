"""Error taxonomy shared by the service and API layers."""

from __future__ import annotations


class InvalidArgument(ValueError):
    """A caller supplied a malformed coordinate, radius, cap or field."""


class StorageUnavailable(ConnectionError):
    """The backing store failed or timed out. Retrying is the caller's decision."""


class RequestNotFound(LookupError):
    def __init__(self, request_id: int) -> None:
        super().__init__(f"Request {request_id} not found.")
        self.request_id = request_id


class UserNotFound(LookupError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"User {user_id} not found.")
        self.user_id = user_id


class InvalidStatusTransition(ValueError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(f"Cannot move request from {current} to {target}.")
        self.current = current
        self.target = target


class DuplicateUser(ValueError):
    """A profile with the same email already exists."""


class AddressNotConfirmed(ValueError):
    """The geocoder could not place the address with high confidence."""


class GeocodingUnavailable(ConnectionError):
    """The geocoding service could not be reached."""
