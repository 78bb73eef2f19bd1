"""
User endpoints: profile reads and updates, deletion and the follow graph.

The path ``{user_id}`` names the user acted upon; for follow and
unfollow it is the acting user and the body names the other one.
"""

from fastapi import APIRouter, Depends

from social_api.app.core.container import get_user_service
from social_api.app.schemas.common import Envelope, UserIdBody
from social_api.app.schemas.user import CallerData, FollowRequest, UserUpdateRequest
from social_api.app.services.user_service import UserService

router = APIRouter()


@router.patch("/{user_id}", response_model=Envelope)
async def partial_update_user(
    user_id: str,
    body: UserUpdateRequest,
    service: UserService = Depends(get_user_service),
) -> Envelope:
    """Update profile fields.

    The body carries the caller (``userId``, ``isAdmin``) and any of
    the writable profile fields; other keys are ignored.
    """
    updated_id = await service.partial_update(user_id, body.caller(), body.update())
    return Envelope(message="User updated successfully", data={"userId": updated_id})


@router.delete("/{user_id}", response_model=Envelope)
async def delete_user(
    user_id: str,
    body: CallerData,
    service: UserService = Depends(get_user_service),
) -> Envelope:
    deleted_id = await service.delete(user_id, body)
    return Envelope(message="User deleted successfully", data={"userId": deleted_id})


@router.get("/{user_id}", response_model=Envelope)
async def get_user(user_id: str, service: UserService = Depends(get_user_service)) -> Envelope:
    profile = await service.find_user(user_id)
    return Envelope(
        message="successfully retrive user",
        data={"user": profile.model_dump(by_alias=True, mode="json")},
    )


@router.patch("/{user_id}/follow", response_model=Envelope)
async def follow_user(
    user_id: str,
    body: UserIdBody,
    service: UserService = Depends(get_user_service),
) -> Envelope:
    username = await service.follow(user_id, FollowRequest(user_id=body.user_id))
    return Envelope(message="successfully follow other user", data={"username": username})


@router.patch("/{user_id}/unfollow", response_model=Envelope)
async def unfollow_user(
    user_id: str,
    body: UserIdBody,
    service: UserService = Depends(get_user_service),
) -> Envelope:
    username = await service.unfollow(user_id, FollowRequest(user_id=body.user_id))
    return Envelope(message="successfully unfollow user", data={"username": username})
