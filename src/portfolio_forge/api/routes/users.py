"""User registration routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from portfolio_forge.api.dependencies import CurrentUser
from portfolio_forge.api.schemas.users import UserCreateRequest, UserInfoResponse
from portfolio_forge.data.crud import portfolio_repo
from portfolio_forge.data.db import get_session

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserInfoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
    description="Register a username. Subsequent requests identify it via the X-Username header.",
)
def register_user(request: UserCreateRequest) -> UserInfoResponse:
    """Create a user; 409 if the username is taken."""
    with get_session() as session:
        if portfolio_repo.get_user_by_username(session, request.username) is not None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"User {request.username!r} already exists.",
            )
        user = portfolio_repo.get_or_create_user(session, request.username)
        return UserInfoResponse.model_validate(user)


@router.get("/me", response_model=UserInfoResponse, summary="Current user")
def get_me(user: CurrentUser) -> UserInfoResponse:
    return UserInfoResponse.model_validate(user)
