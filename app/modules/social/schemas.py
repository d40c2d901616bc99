"""Pydantic schemas for the social graph."""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, Field


class FollowRequest(BaseModel):
    """Body of follow/unfollow calls; accepts ``user_id`` or ``userId``."""

    user_id: int = Field(..., gt=0, validation_alias=AliasChoices("user_id", "userId"))


__all__ = ["FollowRequest"]
