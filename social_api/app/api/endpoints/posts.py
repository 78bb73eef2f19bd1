"""
Post endpoints: creation, updates, reactions, deletion and timelines.

``GET /{id}`` is the timeline of the *user* ``id``; every other route
takes a post identifier.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from social_api.app.core.container import get_post_service
from social_api.app.schemas.common import Envelope
from social_api.app.schemas.post import PostCreate, PostDocument, PostUpdate, ReactionRequest, TimelineRequest
from social_api.app.services.post_service import PostService

router = APIRouter()


def _dump(post: PostDocument) -> dict:
    return post.model_dump(by_alias=True, mode="json")


@router.post("/", response_model=Envelope, status_code=status.HTTP_201_CREATED)
async def create_post(payload: PostCreate, service: PostService = Depends(get_post_service)) -> Envelope:
    post = await service.create_post(payload)
    return Envelope(message="Post created successfully", data=_dump(post))


@router.get("/{user_id}", response_model=Envelope)
async def get_timeline(user_id: str, service: PostService = Depends(get_post_service)) -> Envelope:
    posts = await service.get_all_timeline(TimelineRequest(user_id=user_id))
    return Envelope(message="Post successfully", data=[_dump(post) for post in posts])


@router.put("/{post_id}", response_model=Envelope)
async def update_post(
    post_id: str,
    payload: Optional[PostUpdate] = None,
    service: PostService = Depends(get_post_service),
) -> Envelope:
    post = await service.update_post(post_id, payload or PostUpdate())
    return Envelope(message="Post updated successfully", data={"userId": _dump(post)})


@router.patch("/{post_id}/likes", response_model=Envelope)
async def like_post(
    post_id: str,
    payload: ReactionRequest,
    service: PostService = Depends(get_post_service),
) -> Envelope:
    post = await service.like_post(post_id, payload)
    return Envelope(message="Post like added successfully", data={"userId": _dump(post)})


@router.patch("/{post_id}/dislike", response_model=Envelope)
async def dislike_post(
    post_id: str,
    payload: ReactionRequest,
    service: PostService = Depends(get_post_service),
) -> Envelope:
    post = await service.dislike_post(post_id, payload)
    return Envelope(message="Post dislike added successfully", data={"userId": _dump(post)})


@router.delete("/{post_id}", response_model=Envelope)
async def delete_post(
    post_id: str,
    payload: Optional[PostUpdate] = None,
    service: PostService = Depends(get_post_service),
) -> Envelope:
    deleted_id = await service.delete_post(post_id, payload or PostUpdate())
    return Envelope(message="Post deleted successfully", data={"userId": deleted_id})
