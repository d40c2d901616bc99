"""Centralized API router registration.

Groups:
- Identity: auth.
- Social graph and profiles: users.
- Content and engagement: posts, likes, comments.
"""

from fastapi import APIRouter

from app.routers import auth, comment, like, post, user

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(user.router)
api_router.include_router(post.router)
api_router.include_router(like.router)
api_router.include_router(comment.router)
