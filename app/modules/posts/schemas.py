"""Pydantic schemas for posts, comments and likes."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AnyUrl, BaseModel, Field, field_validator

CONTENT_MAX_LENGTH = 1000


class TimeFrame(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    ALL = "all"


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class PostCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=CONTENT_MAX_LENGTH)
    media_url: Optional[AnyUrl] = None
    comments_enabled: bool = True

    @field_validator("media_url", mode="before")
    @classmethod
    def _empty_media(cls, value):
        return _blank_to_none(value)

    @property
    def media_url_str(self) -> Optional[str]:
        return str(self.media_url) if self.media_url is not None else None


class PostUpdate(BaseModel):
    """Partial post update; absent fields are left untouched."""

    content: Optional[str] = Field(
        default=None, min_length=1, max_length=CONTENT_MAX_LENGTH
    )
    media_url: Optional[AnyUrl] = None
    comments_enabled: Optional[bool] = None

    @field_validator("content", "comments_enabled", mode="before")
    @classmethod
    def _not_null(cls, value, info):
        if value is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return value

    @field_validator("media_url", mode="before")
    @classmethod
    def _empty_media(cls, value):
        return _blank_to_none(value)

    def to_patch(self) -> Dict[str, Any]:
        patch = self.model_dump(exclude_unset=True)
        if patch.get("media_url") is not None:
            patch["media_url"] = str(patch["media_url"])
        return patch


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=CONTENT_MAX_LENGTH)


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=CONTENT_MAX_LENGTH)


__all__ = [
    "CONTENT_MAX_LENGTH",
    "TimeFrame",
    "PostCreate",
    "PostUpdate",
    "CommentCreate",
    "CommentUpdate",
]
