"""
Business logic for user accounts and the follow graph.

Every operation raises a ``ServiceError`` subclass for the failures it
recognises.  Anything else (a malformed identifier rejected by the
store, a uniqueness violation on update, ...) is logged and replaced by
the operation's generic failure, so store errors never reach callers.
"""

import logging

from ..core.errors import (
    BadRequest,
    Conflict,
    Forbidden,
    InternalError,
    NotFound,
    ServiceError,
    Unauthorized,
    UnprocessableIdentifier,
)
from ..core.security import Hasher
from ..schemas.user import CallerData, FollowRequest, UserProfile, UserUpdate
from ..stores.user_store import UserStore

logger = logging.getLogger(__name__)


class UserService:
    """Account lifecycle, authorization and follow-graph mutation."""

    def __init__(self, user_store: UserStore, hasher: Hasher) -> None:
        self.user_store = user_store
        self.hasher = hasher

    async def create_user(self, username: str, email: str, password: str) -> str:
        """Register a user and return its identifier.

        The email is stored lower-cased.  Raises ``Conflict`` when the
        username or the email is already taken.
        """
        email = email.lower()
        try:
            existing = await self.user_store.find_by_username_or_email(username, email)
            if existing:
                raise Conflict("Username or email already exists")
            hashed = self.hasher.hash(password)
            user = await self.user_store.create(username, email, hashed)
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Registering %s failed", email)
            raise InternalError("Internal server error.") from exc
        logger.info("Registered user %s (%s)", user.id, username)
        return user.id

    async def login(self, email: str, password: str) -> str:
        """Return the identifier of the user owning these credentials."""
        try:
            user = await self.user_store.find_by_email(email.lower())
            if not user:
                raise Unauthorized("Email is incorrect.")
            if not self.hasher.verify(password, user.password):
                raise Unauthorized("Password is incorrect.")
        except ServiceError:
            raise
        except Exception as exc:
            logger.exception("Login for %s failed", email)
            raise InternalError("Internal server error.") from exc
        return user.id

    async def partial_update(self, target_id: str, caller: CallerData, updates: UserUpdate) -> str:
        """Apply ``updates`` and return the updated identifier.

        Allowed when the caller is the target or an admin.  Existence is
        checked for, and the changes written to, the caller's own
        document, which may not list itself as a follower or following.
        """
        if caller.user_id != target_id and not caller.is_admin:
            raise Forbidden("You are not authorized to update this resource.")
        try:
            user = await self.user_store.find_by_id(caller.user_id)
            if not user:
                raise NotFound("User not found.")
            changes = updates.changes()
            if caller.user_id in changes.get("followers", []) + changes.get("followings", []):
                raise BadRequest("Cannot follow yourself")
            if "password" in changes:
                changes["password"] = self.hasher.hash(changes["password"])
            if "email" in changes:
                changes["email"] = changes["email"].lower()
            updated = await self.user_store.update(caller.user_id, changes)
            if not updated:
                raise NotFound("User not found.")
        except ServiceError:
            raise
        except Exception as exc:
            logger.warning("Update of user %s failed: %s", target_id, exc)
            raise UnprocessableIdentifier() from exc
        logger.info("User %s updated fields %s", updated.id, sorted(changes))
        return updated.id

    async def delete(self, target_id: str, caller: CallerData) -> str:
        """Hard-delete a user and return the deleted identifier.

        Same authorization as ``partial_update``; the caller's document
        is the one checked and removed.
        """
        if caller.user_id != target_id and not caller.is_admin:
            raise Forbidden("You are not authorized to delete this resource.")
        try:
            user = await self.user_store.find_by_id(caller.user_id)
            if not user:
                raise NotFound("User not found.")
            deleted = await self.user_store.delete(caller.user_id)
            if not deleted:
                raise NotFound("User not found.")
        except ServiceError:
            raise
        except Exception as exc:
            logger.warning("Deletion of user %s failed: %s", target_id, exc)
            raise UnprocessableIdentifier() from exc
        logger.info("User %s deleted", deleted.id)
        return deleted.id

    async def find_user(self, user_id: str) -> UserProfile:
        try:
            user = await self.user_store.find_by_id(user_id)
            if not user:
                raise NotFound("User not found.")
        except ServiceError:
            raise
        except Exception as exc:
            logger.warning("Lookup of user %r failed: %s", user_id, exc)
            raise UnprocessableIdentifier() from exc
        return user.to_profile()

    async def follow(self, current_id: str, request: FollowRequest) -> str:
        """Make ``current_id`` follow ``request.user_id``.

        Returns the followed user's username.
        """
        target_id = request.user_id
        try:
            if not target_id:
                raise BadRequest("missing or invalid data")
            if current_id == target_id:
                raise BadRequest("Cannot follow yourself")
            current = await self.user_store.find_by_id(current_id)
            if not current:
                raise NotFound("User doesn't exists")
            target = await self.user_store.find_by_id(target_id)
            if not target:
                raise NotFound("User you want to follow doesn't exists")
            if current_id in target.followers:
                raise Conflict("User is already following this other user")
            if not await self.user_store.add_follow(current_id, target_id):
                raise NotFound("User you want to follow doesn't exists")
        except ServiceError:
            raise
        except Exception as exc:
            logger.warning("Follow %r -> %r failed: %s", current_id, target_id, exc)
            raise UnprocessableIdentifier() from exc
        logger.info("User %s now follows %s", current_id, target_id)
        return target.username

    async def unfollow(self, current_id: str, request: FollowRequest) -> str:
        """Remove the follow edge ``current_id`` -> ``request.user_id``.

        Whether the edge exists is read from the current user's
        ``followings``.  Returns the unfollowed user's username.
        """
        target_id = request.user_id
        try:
            if not target_id:
                raise BadRequest("missing or invalid data")
            if current_id == target_id:
                raise BadRequest("Cannot follow yourself")
            current = await self.user_store.find_by_id(current_id)
            if not current:
                raise NotFound("User doesn't exists")
            target = await self.user_store.find_by_id(target_id)
            if not target:
                raise NotFound("User you want to unfollow doesn't exists")
            if target_id not in current.followings:
                raise NotFound("User is not part of users you follow")
            if not await self.user_store.remove_follow(current_id, target_id):
                raise NotFound("User you want to unfollow doesn't exists")
        except ServiceError:
            raise
        except Exception as exc:
            logger.warning("Unfollow %r -> %r failed: %s", current_id, target_id, exc)
            raise UnprocessableIdentifier() from exc
        logger.info("User %s unfollowed %s", current_id, target_id)
        return target.username
