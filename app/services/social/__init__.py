"""Social graph services exports."""

from app.services.social.follow_service import FollowService

__all__ = ["FollowService"]
