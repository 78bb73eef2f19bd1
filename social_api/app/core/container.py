"""
Explicit wiring of stores and services.

``build_services`` constructs every collaborator once per application;
``create_app`` stores the result on ``app.state.services`` and the
endpoint dependencies below hand the right service to each route.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from ..services.post_service import PostService
from ..services.user_service import UserService
from ..stores.post_store import PostStore
from ..stores.user_store import UserStore
from .security import Hasher, PBKDF2Hasher


@dataclass(frozen=True)
class Services:
    user_store: UserStore
    post_store: PostStore
    user_service: UserService
    post_service: PostService


def build_services(database_path: str, hasher: Optional[Hasher] = None) -> Services:
    user_store = UserStore(database_path)
    post_store = PostStore(database_path)
    return Services(
        user_store=user_store,
        post_store=post_store,
        user_service=UserService(user_store, hasher or PBKDF2Hasher()),
        post_service=PostService(post_store, user_store),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_user_service(request: Request) -> UserService:
    return get_services(request).user_service


def get_post_service(request: Request) -> PostService:
    return get_services(request).post_service
