"""Pydantic schemas for user registration."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserCreateRequest(BaseModel):
    """Request body for registering a username."""

    username: str = Field(min_length=1, max_length=128)


class UserInfoResponse(BaseModel):
    """Response schema for basic user information."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    created_at: datetime
