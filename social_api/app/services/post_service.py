"""
Business logic for posts, reactions and timelines.

A user's reaction to a post is one of three states: none, liked or
disliked.  ``like_post`` moves liked -> none and none/disliked ->
liked; ``dislike_post`` mirrors it.  The service picks the target state
and ``PostStore.set_reaction`` writes it atomically.
"""

import asyncio
import logging
from typing import List, Optional

from ..core.errors import BadRequest, InternalError, NotFound, ServiceError, UnprocessableIdentifier
from ..schemas.post import PostCreate, PostDocument, PostUpdate, Reaction, ReactionRequest, TimelineRequest
from ..stores.post_store import PostStore
from ..stores.user_store import UserStore

logger = logging.getLogger(__name__)


def next_reaction(current: Optional[Reaction], requested: Reaction) -> Optional[Reaction]:
    """Reaction state after ``requested`` is applied to ``current``.

    Repeating the current reaction withdraws it; anything else replaces
    it.
    """
    return None if current is requested else requested


class PostService:
    """Post lifecycle, reaction toggling and timeline aggregation."""

    def __init__(self, post_store: PostStore, user_store: UserStore) -> None:
        self.post_store = post_store
        self.user_store = user_store

    async def create_post(self, data: PostCreate) -> PostDocument:
        # The owner is not required to exist.
        try:
            post = await self.post_store.create(data.fields())
        except Exception as exc:
            logger.exception("Creating a post for %s failed", data.user_id)
            raise InternalError("Internal server error.") from exc
        logger.info("Post %s created by %s", post.id, post.user_id)
        return post

    async def _owned_post(self, post_id: str, data: PostUpdate) -> PostDocument:
        # Ownership is matched against the post's own identifier, not
        # its user_id field.
        post = await self.post_store.find_by_id(post_id)
        if not post:
            raise NotFound("Post not found")
        if post.id != data.user_id:
            raise BadRequest("Incorrect ID")
        return post

    async def update_post(self, post_id: str, data: PostUpdate) -> PostDocument:
        try:
            current = await self._owned_post(post_id, data)
            changes = data.fields()
            likes = changes.get("likes", current.likes)
            dislike = changes.get("dislike", current.dislike)
            if set(likes) & set(dislike):
                raise BadRequest("A user cannot both like and dislike a post")
            post = await self.post_store.update(post_id, changes)
            if not post:
                raise NotFound("Post not found")
        except ServiceError:
            raise
        except Exception as exc:
            logger.warning("Update of post %r failed: %s", post_id, exc)
            raise UnprocessableIdentifier() from exc
        logger.info("Post %s updated", post.id)
        return post

    async def delete_post(self, post_id: str, data: PostUpdate) -> str:
        try:
            await self._owned_post(post_id, data)
            post = await self.post_store.delete(post_id)
            if not post:
                raise NotFound("Post not found")
        except ServiceError:
            raise
        except Exception as exc:
            logger.warning("Deletion of post %r failed: %s", post_id, exc)
            raise UnprocessableIdentifier() from exc
        logger.info("Post %s deleted", post.id)
        return post.id

    async def _react(self, post_id: str, request: ReactionRequest, requested: Reaction) -> PostDocument:
        try:
            post = await self.post_store.find_by_id(post_id)
            if not post:
                raise NotFound("Post not found")
            target = next_reaction(post.reaction_of(request.user_id), requested)
            post = await self.post_store.set_reaction(post_id, request.user_id, target)
            if not post:
                raise NotFound("Post not found")
        except ServiceError:
            raise
        except Exception as exc:
            logger.warning("Reaction on post %r failed: %s", post_id, exc)
            raise UnprocessableIdentifier() from exc
        logger.info("User %s reaction on post %s is now %s", request.user_id, post_id, target)
        return post

    async def like_post(self, post_id: str, request: ReactionRequest) -> PostDocument:
        return await self._react(post_id, request, Reaction.LIKE)

    async def dislike_post(self, post_id: str, request: ReactionRequest) -> PostDocument:
        return await self._react(post_id, request, Reaction.DISLIKE)

    async def _posts_of_followed(self, user_id: str) -> List[PostDocument]:
        try:
            return await self.post_store.find_by_user(user_id)
        except Exception as exc:
            logger.warning("Skipping posts of %r in timeline: %s", user_id, exc)
            return []

    async def get_all_timeline(self, request: TimelineRequest) -> List[PostDocument]:
        """The user's own posts and those of everyone they follow.

        Each followed user is a separate lookup passed to
        ``asyncio.gather``; a failed lookup contributes nothing.  The
        result is sorted by ``updated_at``, oldest first, keeping the
        original order for equal times.
        """
        try:
            user = await self.user_store.find_by_id(request.user_id)
            if not user:
                raise NotFound("User not found")
            own_posts = await self.post_store.find_by_user(user.id)
            followed = await asyncio.gather(
                *(self._posts_of_followed(friend_id) for friend_id in user.followings)
            )
        except ServiceError:
            raise
        except Exception as exc:
            logger.warning("Timeline of %r failed: %s", request.user_id, exc)
            raise UnprocessableIdentifier() from exc
        posts = own_posts + [post for batch in followed for post in batch]
        posts.sort(key=lambda post: post.updated_at)
        return posts
