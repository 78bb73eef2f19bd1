"""Envelopes and small request bodies shared by all endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Envelope(BaseModel):
    message: str
    data: Any = None


class ErrorResponse(BaseModel):
    error: str


class UserIdBody(BaseModel):
    """Request body that must name a user (``{"userId": ...}``)."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
