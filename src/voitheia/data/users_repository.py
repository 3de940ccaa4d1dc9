"""Storage for user profiles."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import asdict
from typing import Any, Iterable, Protocol

import httpx
from postgrest.exceptions import APIError

from ..exceptions import StorageUnavailable
from ..models.domain import Coordinate, UserDraft, UserProfile

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    def get(self, user_id: int) -> UserProfile | None: ...

    def get_by_email(self, email: str) -> UserProfile | None: ...

    def add(self, draft: UserDraft) -> UserProfile: ...

    def update(self, profile: UserProfile) -> UserProfile: ...

    def delete(self, user_id: int) -> bool: ...


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class InMemoryUserRepository:
    def __init__(self, profiles: Iterable[UserProfile] = ()) -> None:
        self._lock = threading.Lock()
        self._profiles: dict[int, UserProfile] = {profile.id: profile for profile in profiles}
        self._ids = itertools.count(max(self._profiles, default=0) + 1)

    def get(self, user_id: int) -> UserProfile | None:
        with self._lock:
            return self._profiles.get(user_id)

    def get_by_email(self, email: str) -> UserProfile | None:
        wanted = _normalize_email(email)
        with self._lock:
            for profile in self._profiles.values():
                if _normalize_email(profile.email) == wanted:
                    return profile
        return None

    def add(self, draft: UserDraft) -> UserProfile:
        with self._lock:
            profile = UserProfile(id=next(self._ids), **_draft_fields(draft))
            self._profiles[profile.id] = profile
        return profile

    def update(self, profile: UserProfile) -> UserProfile:
        with self._lock:
            if profile.id not in self._profiles:
                raise KeyError(profile.id)
            self._profiles[profile.id] = profile
        return profile

    def delete(self, user_id: int) -> bool:
        with self._lock:
            return self._profiles.pop(user_id, None) is not None


def _draft_fields(draft: UserDraft | UserProfile) -> dict[str, Any]:
    return {
        "email": draft.email,
        "first_name": draft.first_name,
        "last_name": draft.last_name,
        "street": draft.street,
        "city": draft.city,
        "zip_code": draft.zip_code,
        "country": draft.country,
        "location": draft.location,
    }


def _profile_to_row(profile: UserDraft | UserProfile) -> dict[str, Any]:
    row = _draft_fields(profile)
    location = row.pop("location")
    row["email"] = _normalize_email(row["email"])
    row.update(asdict(location))
    return row


def _row_to_profile(row: dict[str, Any]) -> UserProfile:
    return UserProfile(
        id=int(row["id"]),
        email=row["email"],
        first_name=row.get("first_name") or "",
        last_name=row.get("last_name") or "",
        street=row.get("street") or "",
        city=row.get("city") or "",
        zip_code=row.get("zip_code") or "",
        country=row.get("country") or "",
        location=Coordinate(float(row["latitude"]), float(row["longitude"])),
    )


class SupabaseUserRepository:
    """Reads and writes the ``users`` table through the Supabase client."""

    def __init__(self, client: Any, table: str = "users") -> None:
        self._client = client
        self._table = table

    def _execute(self, query: Any, operation: str) -> list[dict[str, Any]]:
        try:
            response = query.execute()
        except (APIError, httpx.HTTPError) as exc:
            logger.error(f"User storage {operation} failed: {exc}")
            raise StorageUnavailable(f"User storage {operation} failed: {exc}") from exc
        return response.data or []

    def get(self, user_id: int) -> UserProfile | None:
        rows = self._execute(self._client.table(self._table).select("*").eq("id", user_id).limit(1), "get")
        return _row_to_profile(rows[0]) if rows else None

    def get_by_email(self, email: str) -> UserProfile | None:
        query = self._client.table(self._table).select("*").eq("email", _normalize_email(email)).limit(1)
        rows = self._execute(query, "get")
        return _row_to_profile(rows[0]) if rows else None

    def add(self, draft: UserDraft) -> UserProfile:
        rows = self._execute(self._client.table(self._table).insert(_profile_to_row(draft)), "insert")
        if not rows:
            raise StorageUnavailable("User storage insert returned no row.")
        return _row_to_profile(rows[0])

    def update(self, profile: UserProfile) -> UserProfile:
        query = self._client.table(self._table).update(_profile_to_row(profile)).eq("id", profile.id)
        rows = self._execute(query, "update")
        if not rows:
            raise KeyError(profile.id)
        return _row_to_profile(rows[0])

    def delete(self, user_id: int) -> bool:
        return bool(self._execute(self._client.table(self._table).delete().eq("id", user_id), "delete"))
