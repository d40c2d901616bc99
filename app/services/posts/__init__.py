"""Posts service exports."""

from app.services.posts.like_service import LikeService
from app.services.posts.post_service import PostService

__all__ = ["PostService", "LikeService"]
