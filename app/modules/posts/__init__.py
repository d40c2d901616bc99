"""Posts domain public exports."""

from .models import Comment, Like, Post
from .schemas import (
    CommentCreate,
    CommentUpdate,
    PostCreate,
    PostUpdate,
    TimeFrame,
)

__all__ = [
    "Post",
    "Comment",
    "Like",
    "PostCreate",
    "PostUpdate",
    "CommentCreate",
    "CommentUpdate",
    "TimeFrame",
]
