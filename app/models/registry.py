"""Import every ORM model so `Base.metadata` knows the whole schema."""

from app.modules.posts.models import Comment, Like, Post
from app.modules.social.models import Follow
from app.modules.users.models import User

__all__ = ["User", "Post", "Comment", "Like", "Follow"]
