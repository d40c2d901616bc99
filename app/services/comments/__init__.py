"""Comment services exports."""

from app.services.comments.service import CommentService

__all__ = ["CommentService"]
