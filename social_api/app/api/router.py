"""
Top-level API router.

Aggregates the domain routers under their public prefixes.  The
``user`` prefix is singular and ``posts`` plural, matching the paths
clients already use.
"""

from fastapi import APIRouter

from .endpoints import auth, posts, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/user", tags=["users"])
router.include_router(posts.router, prefix="/posts", tags=["posts"])
