"""
Service layer.

Each service encapsulates the business rules of one domain and talks
to persistence only through the stores passed to its constructor.
"""

from .post_service import PostService
from .user_service import UserService

__all__ = ["PostService", "UserService"]
