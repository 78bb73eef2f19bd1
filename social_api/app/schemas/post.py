"""
Pydantic models for posts, reactions and the timeline.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Reaction(str, Enum):
    """A reaction list on a post; the value is the stored field name."""

    LIKE = "likes"
    DISLIKE = "dislike"


class PostDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    user_id: str = Field(..., alias="userId")
    desc: str = ""
    img: List[Any] = Field(default_factory=list)
    likes: List[str] = Field(default_factory=list)
    dislike: List[str] = Field(default_factory=list)
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    def reaction_of(self, user_id: str) -> Optional[Reaction]:
        """The reaction ``user_id`` currently holds on this post, if any."""
        if user_id in self.likes:
            return Reaction.LIKE
        if user_id in self.dislike:
            return Reaction.DISLIKE
        return None


class PostFields(BaseModel):
    """The allow-listed fields a post write may carry.

    Anything else in the payload (``_id``, timestamps, ...) is ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    desc: Optional[str] = Field(None, max_length=500)
    img: Optional[List[Any]] = None
    likes: Optional[List[str]] = None
    dislike: Optional[List[str]] = None

    @model_validator(mode="after")
    def check_reactions_disjoint(self) -> "PostFields":
        if self.likes and self.dislike and set(self.likes) & set(self.dislike):
            raise ValueError("a user cannot both like and dislike a post")
        return self


class PostCreate(PostFields):
    user_id: str = Field(..., alias="userId", min_length=1)

    def fields(self) -> dict:
        return self.model_dump(exclude_none=True)


class PostUpdate(PostFields):
    """Body of ``PUT``/``DELETE /api/posts/{id}``.

    ``user_id`` doubles as the ownership claim checked by
    ``PostService``.  It is never written: a post's owner is fixed at
    creation.
    """

    user_id: Optional[str] = Field(None, alias="userId")

    def fields(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True, exclude={"user_id"})


class ReactionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)


class TimelineRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId")
