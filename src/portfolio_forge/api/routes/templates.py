"""Template listing and customisation routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from portfolio_forge.api.dependencies import get_registry, get_renderer, raise_for_error
from portfolio_forge.api.schemas.templates import (
    TemplateCustomizeRequest,
    TemplateCustomizeResponse,
    TemplateResponse,
)
from portfolio_forge.errors import TemplateNotFoundError
from portfolio_forge.services.renderer import TemplateRenderer
from portfolio_forge.templates import TemplateRegistry

router = APIRouter(prefix="/templates", tags=["templates"])


@router.get("", response_model=list[TemplateResponse], summary="List templates")
def list_templates(
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
) -> list[TemplateResponse]:
    return [TemplateResponse.model_validate(t) for t in registry.list_templates()]


@router.get("/{template_id}", response_model=TemplateResponse, summary="Get a template")
def get_template(
    template_id: str,
    registry: Annotated[TemplateRegistry, Depends(get_registry)],
) -> TemplateResponse:
    try:
        template = registry.get(template_id)
    except TemplateNotFoundError as e:
        raise_for_error(e.to_service_error())
    return TemplateResponse.model_validate(template.summary())


@router.post(
    "/{template_id}/customize",
    response_model=TemplateCustomizeResponse,
    summary="Build customisation CSS",
    description="Return override CSS for colours, fonts and extra rules on top of a template.",
)
def customize_template(
    template_id: str,
    request: TemplateCustomizeRequest,
    renderer: Annotated[TemplateRenderer, Depends(get_renderer)],
) -> TemplateCustomizeResponse:
    try:
        css = renderer.customize_css(template_id, request.model_dump(exclude_none=True))
    except TemplateNotFoundError as e:
        raise_for_error(e.to_service_error())
    return TemplateCustomizeResponse(template_id=template_id, css=css)
