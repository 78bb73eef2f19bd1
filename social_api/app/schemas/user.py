"""
Pydantic models for user documents and user requests.

Field names on the wire follow the stored document (``_id``,
``isAdmin``, ``createdAt``, ``from``); the Python attribute names are
snake_case and the models accept either form.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class Relationship(str, Enum):
    SINGLE = "single"
    MARRIED = "married"
    SEPARATED = "separated"


class UserProfile(BaseModel):
    """A user as returned to callers: no password, no timestamps."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    username: str
    email: str
    profile_picture: str = ""
    cover_picture: str = ""
    followers: List[str] = Field(default_factory=list)
    followings: List[str] = Field(default_factory=list)
    is_admin: bool = Field(False, alias="isAdmin")
    desc: str = ""
    city: str = ""
    from_: str = Field("", alias="from")
    relationship: Relationship = Relationship.SINGLE


class UserDocument(UserProfile):
    """The complete stored user document."""

    password: str
    created_at: datetime = Field(..., alias="createdAt")
    updated_at: datetime = Field(..., alias="updatedAt")

    def to_profile(self) -> UserProfile:
        return UserProfile.model_validate(
            self.model_dump(exclude={"password", "created_at", "updated_at"})
        )


class UserCreate(BaseModel):
    """Registration payload."""

    username: str = Field(..., min_length=3, max_length=20, examples=["jane_doe"])
    email: str = Field(..., max_length=50, pattern=EMAIL_PATTERN, examples=["jane@example.com"])
    password: str = Field(..., min_length=8, examples=["strongpassword"])


class UserLogin(BaseModel):
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=8)


class CallerData(BaseModel):
    """Identity of the user performing a request.

    Whether ``user_id`` may act on another user's document is decided
    by ``UserService``; ``is_admin`` lets it act on any.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    is_admin: bool = Field(False, alias="isAdmin")


class UserUpdate(BaseModel):
    """The fields a partial update may overwrite.

    Unknown keys in the payload are ignored, so a body carrying e.g.
    ``isAdmin`` or ``createdAt`` cannot change them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    username: Optional[str] = Field(None, min_length=3, max_length=20)
    email: Optional[str] = Field(None, max_length=50, pattern=EMAIL_PATTERN)
    password: Optional[str] = Field(None, min_length=8)
    profile_picture: Optional[str] = None
    cover_picture: Optional[str] = None
    followers: Optional[List[str]] = None
    followings: Optional[List[str]] = None
    desc: Optional[str] = Field(None, max_length=300)
    city: Optional[str] = Field(None, max_length=100)
    from_: Optional[str] = Field(None, alias="from", max_length=100)
    relationship: Optional[Relationship] = None

    def changes(self) -> dict:
        """Fields explicitly supplied, keyed by attribute name."""
        return self.model_dump(exclude_unset=True, exclude_none=True)


class UserUpdateRequest(CallerData, UserUpdate):
    """Body of ``PATCH /api/user/{id}``: caller identity plus changes."""

    def caller(self) -> CallerData:
        return CallerData(user_id=self.user_id, is_admin=self.is_admin)

    def update(self) -> UserUpdate:
        return UserUpdate.model_validate(
            self.model_dump(exclude_unset=True, exclude={"user_id", "is_admin"})
        )


class FollowRequest(BaseModel):
    """The user to follow or unfollow."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
