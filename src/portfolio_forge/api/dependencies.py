"""Shared dependencies for API routes."""

from __future__ import annotations

import logging
from typing import Annotated, NoReturn

from fastapi import Depends, Header, HTTPException, Request, status

from portfolio_forge.config import Settings
from portfolio_forge.data.crud import portfolio_repo
from portfolio_forge.data.db import get_session
from portfolio_forge.data.models import User
from portfolio_forge.errors import ErrorKind, ServiceError
from portfolio_forge.services.artifact_cache import PortfolioRenderService
from portfolio_forge.services.generator import PortfolioGenerator
from portfolio_forge.services.llm_providers import LLMError
from portfolio_forge.services.llm_service import LLMService
from portfolio_forge.services.renderer import TemplateRenderer
from portfolio_forge.templates import TemplateRegistry

logger = logging.getLogger(__name__)

_STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.TEMPLATE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.EXTERNAL_SERVICE: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.RENDER: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorKind.PARSE_DEGRADED: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def raise_for_error(error: ServiceError) -> NoReturn:
    """Translate a core :class:`ServiceError` into an ``HTTPException``."""
    detail: dict[str, str] = {"kind": error.kind.value, "message": error.message}
    if error.service:
        detail["service"] = error.service
    raise HTTPException(status_code=_STATUS_BY_KIND[error.kind], detail=detail)


def get_current_username(
    x_username: Annotated[
        str | None,
        Header(
            description=(
                "Current username. In production, this should be extracted "
                "from authenticated session/JWT token."
            )
        ),
    ] = None,
) -> str:
    """Get the current username from the X-Username header.

    Raises:
        HTTPException: If authentication is missing (401).
    """
    if not x_username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication. Please provide X-Username header.",
        )
    return x_username


def get_current_user(username: Annotated[str, Depends(get_current_username)]) -> User:
    """Resolve the authenticated username to a registered :class:`User`.

    Raises:
        HTTPException: If the user has not registered (401).
    """
    with get_session() as session:
        user = portfolio_repo.get_user_by_username(session, username)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user. Register via POST /api/users first.",
        )
    return user


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_registry(request: Request) -> TemplateRegistry:
    return request.app.state.registry


def get_renderer(request: Request) -> TemplateRenderer:
    return request.app.state.renderer


def get_render_service(request: Request) -> PortfolioRenderService:
    return request.app.state.render_service


def get_generator(request: Request) -> PortfolioGenerator:
    """Return the shared generator, building the model client on first use.

    Raises:
        HTTPException: If the text-generation provider is not configured (503).
    """
    state = request.app.state
    if getattr(state, "generator", None) is None:
        try:
            llm_service = LLMService(settings=state.settings)
        except LLMError as e:
            logger.error("Text generation unavailable: %s", e)
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Text generation is not configured: {e}",
            ) from e
        state.generator = PortfolioGenerator(llm_service, state.registry, settings=state.settings)
    return state.generator


CurrentUser = Annotated[User, Depends(get_current_user)]
