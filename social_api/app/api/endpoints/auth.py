"""
Registration and login endpoints.
"""

from fastapi import APIRouter, Depends, status

from social_api.app.core.container import get_user_service
from social_api.app.schemas.common import Envelope
from social_api.app.schemas.user import UserCreate, UserLogin
from social_api.app.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=Envelope, status_code=status.HTTP_201_CREATED)
async def register_user(payload: UserCreate, service: UserService = Depends(get_user_service)) -> Envelope:
    """Create an account; answers 409 if the username or email is taken."""
    user_id = await service.create_user(payload.username, payload.email, payload.password)
    return Envelope(message="User created successfully", data={"userId": user_id})


@router.post("/login", response_model=Envelope)
async def login_user(payload: UserLogin, service: UserService = Depends(get_user_service)) -> Envelope:
    user_id = await service.login(payload.email, payload.password)
    return Envelope(message="User logged in successfully", data={"userId": user_id})
