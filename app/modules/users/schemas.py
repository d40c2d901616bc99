"""Pydantic schemas for the users domain."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AnyUrl, BaseModel, ConfigDict, EmailStr, Field, field_validator


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=r"^[A-Za-z0-9]+$")
    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1, max_length=100)


class UserLogin(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserOut(BaseModel):
    """Account view returned to the account holder (includes email)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: EmailStr
    name: str
    profile_picture: Optional[str] = None
    created_at: datetime


class UserPublicOut(BaseModel):
    """Fields any caller may see about a user."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    name: str
    profile_picture: Optional[str] = None
    created_at: datetime


class UserProfileUpdate(BaseModel):
    """Partial profile update; only fields sent by the client are applied."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    profile_picture: Optional[AnyUrl] = None

    @field_validator("name", mode="before")
    @classmethod
    def _name_not_null(cls, value):
        if value is None:
            raise ValueError("name cannot be null")
        return value

    @field_validator("profile_picture", mode="before")
    @classmethod
    def _empty_picture(cls, value):
        return _blank_to_none(value)

    def to_patch(self) -> Dict[str, Any]:
        patch = self.model_dump(exclude_unset=True)
        if patch.get("profile_picture") is not None:
            patch["profile_picture"] = str(patch["profile_picture"])
        return patch


class PasswordChange(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6)


__all__ = [
    "UserCreate",
    "UserLogin",
    "UserOut",
    "UserPublicOut",
    "UserProfileUpdate",
    "PasswordChange",
]
