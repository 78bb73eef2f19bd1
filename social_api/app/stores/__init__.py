"""
Persistence layer.

Each store owns one collection of the SQLite document database and is
the only code that issues SQL against it.  Services receive store
instances through their constructors.
"""

from .post_store import PostStore
from .user_store import UserStore

__all__ = ["PostStore", "UserStore"]
