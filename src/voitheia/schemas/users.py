"""User profile API schemas."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from ..models.domain import UserProfile


class RegisterUserModel(BaseModel):
    email: str = Field(..., min_length=3, max_length=320)
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    zip: str = Field(..., min_length=1, max_length=16)
    country: str = Field(default="Germany")


class UpdateUserModel(BaseModel):
    email: Optional[str] = None
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None

    def to_changes(self) -> dict[str, Optional[str]]:
        return {
            "email": self.email,
            "first_name": self.firstName,
            "last_name": self.lastName,
            "street": self.street,
            "city": self.city,
            "zip_code": self.zip,
            "country": self.country,
        }


class UserModel(BaseModel):
    id: int
    email: str
    firstName: str
    lastName: str
    street: str
    city: str
    zip: str
    country: str
    latitude: float
    longitude: float

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserModel":
        return cls(
            id=profile.id,
            email=profile.email,
            firstName=profile.first_name,
            lastName=profile.last_name,
            street=profile.street,
            city=profile.city,
            zip=profile.zip_code,
            country=profile.country,
            latitude=profile.location.latitude,
            longitude=profile.location.longitude,
        )


class DeleteUserResponse(BaseModel):
    deleted: bool
    closedRequests: int
