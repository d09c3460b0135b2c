"""Preview and rendering routes.

Stored portfolios are served through the artifact cache; ``/render``
renders unsaved content without touching the database.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import HTMLResponse

from portfolio_forge.api.dependencies import CurrentUser, get_render_service, raise_for_error
from portfolio_forge.api.schemas.preview import (
    ArtifactResponse,
    MetadataResponse,
    RegenerateRequest,
    RenderRequest,
)
from portfolio_forge.services.artifact_cache import PortfolioRenderService, record_view

router = APIRouter(prefix="/preview", tags=["preview"])

RenderService = Annotated[PortfolioRenderService, Depends(get_render_service)]


@router.post(
    "/render",
    response_model=ArtifactResponse,
    summary="Render unsaved content",
    description="Render a content document through a template for live preview. Nothing is saved.",
)
def render_transient(
    request: RenderRequest, user: CurrentUser, service: RenderService
) -> ArtifactResponse:
    result = service.render_transient(request.content, request.template_id)
    if not result.ok:
        raise_for_error(result.error)
    return ArtifactResponse(**result.value.to_dict())


@router.get(
    "/public/{slug}",
    response_class=HTMLResponse,
    summary="View a published portfolio",
    description="Serve the published portfolio page and count the view.",
)
def view_public(
    slug: str, background_tasks: BackgroundTasks, service: RenderService
) -> HTMLResponse:
    result = service.render_public(slug)
    if not result.ok:
        raise_for_error(result.error)
    portfolio_id, artifact = result.value
    background_tasks.add_task(record_view, portfolio_id)
    return HTMLResponse(content=artifact.html)


@router.get(
    "/{portfolio_id}",
    response_model=ArtifactResponse,
    summary="Render a portfolio",
    description="Return the cached artifact, rendering it first if the cache is empty.",
)
def render_portfolio(
    portfolio_id: int, user: CurrentUser, service: RenderService
) -> ArtifactResponse:
    result = service.render(portfolio_id, user_id=user.id)
    if not result.ok:
        raise_for_error(result.error)
    return ArtifactResponse(**result.value.to_dict())


@router.get(
    "/{portfolio_id}/html",
    response_class=HTMLResponse,
    summary="Portfolio page",
)
def render_portfolio_html(
    portfolio_id: int, user: CurrentUser, service: RenderService
) -> HTMLResponse:
    result = service.render(portfolio_id, user_id=user.id)
    if not result.ok:
        raise_for_error(result.error)
    return HTMLResponse(content=result.value.html)


@router.post(
    "/{portfolio_id}/regenerate",
    response_model=ArtifactResponse,
    summary="Re-render a portfolio",
    description="Re-render bypassing the cache, optionally switching to another template.",
)
def regenerate(
    portfolio_id: int,
    request: RegenerateRequest,
    user: CurrentUser,
    service: RenderService,
) -> ArtifactResponse:
    result = service.regenerate(portfolio_id, request.template_id, user_id=user.id)
    if not result.ok:
        raise_for_error(result.error)
    return ArtifactResponse(**result.value.to_dict())


@router.get(
    "/{portfolio_id}/metadata",
    response_model=MetadataResponse,
    summary="Sharing metadata",
)
def get_metadata(portfolio_id: int, user: CurrentUser, service: RenderService) -> MetadataResponse:
    result = service.metadata(portfolio_id, user_id=user.id)
    if not result.ok:
        raise_for_error(result.error)
    return MetadataResponse.model_validate(result.value)
