"""Generation, enhancement and source-preparation routes."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, File, Path, UploadFile, status

from portfolio_forge.api.dependencies import (
    CurrentUser,
    get_generator,
    get_registry,
    get_settings_dep,
    raise_for_error,
)
from portfolio_forge.api.schemas.ai import (
    BioRequest,
    BioResponse,
    EnhanceRequest,
    EnhanceResponse,
    GeneratedPortfolio,
    GenerateRequest,
    GenerateResponse,
    GenerationMetadata,
    ProjectsRequest,
    ProjectsResponse,
    RecommendationsRequest,
    ResumeUploadResponse,
    SuggestionsResponse,
    TemplateRecommendation,
    UsageResponse,
)
from portfolio_forge.api.schemas.common import warnings_from
from portfolio_forge.config import Settings
from portfolio_forge.data.crud import iteration_repo
from portfolio_forge.data.db import get_session
from portfolio_forge.errors import ValidationError
from portfolio_forge.services.generator import PortfolioGenerator
from portfolio_forge.services.recommendations import (
    generation_suggestions,
    template_recommendations,
)
from portfolio_forge.services.resume_extraction import extract_resume_text
from portfolio_forge.templates import TemplateRegistry

router = APIRouter(prefix="/ai", tags=["ai"])

Generator = Annotated[PortfolioGenerator, Depends(get_generator)]
Registry = Annotated[TemplateRegistry, Depends(get_registry)]
AppSettings = Annotated[Settings, Depends(get_settings_dep)]


@router.post(
    "/generate",
    response_model=GenerateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate a portfolio",
    description=(
        "Normalize the supplied sources, ask the model for portfolio content and store "
        "the result as a draft portfolio."
    ),
)
def generate_portfolio(
    request: GenerateRequest, user: CurrentUser, generator: Generator
) -> GenerateResponse:
    result = generator.generate(
        user.id, request.sources, request.preferences.model_dump(exclude_none=True)
    )
    if not result.ok:
        raise_for_error(result.error)
    summary = result.value
    return GenerateResponse(
        portfolio=GeneratedPortfolio(
            id=summary.id,
            title=summary.title,
            slug=summary.slug,
            status=summary.status,
            template_id=summary.template_id,
        ),
        metadata=GenerationMetadata(
            iteration_id=summary.iteration_id,
            sources_processed=summary.sources_processed,
            tokens_used=summary.tokens_used,
            processing_time_ms=summary.processing_time_ms,
            ai_model=summary.ai_model,
        ),
        warnings=warnings_from(result.warnings),
    )


@router.post(
    "/enhance/{portfolio_id}",
    response_model=EnhanceResponse,
    summary="Enhance a portfolio",
    description=(
        "Apply a prompt to one section, or to the whole portfolio when no section is given."
    ),
)
def enhance_portfolio(
    request: EnhanceRequest,
    user: CurrentUser,
    generator: Generator,
    portfolio_id: int = Path(..., ge=1),
) -> EnhanceResponse:
    result = generator.enhance(portfolio_id, request.prompt, request.section, user_id=user.id)
    if not result.ok:
        raise_for_error(result.error)
    change = result.value
    return EnhanceResponse(
        portfolio_id=change.portfolio_id,
        iteration_id=change.iteration_id,
        section=change.section,
        prompt=change.prompt,
        changed_sections=list(change.changed_sections),
        tokens_used=change.tokens_used,
        processing_time_ms=change.processing_time_ms,
        ai_model=change.ai_model,
        warnings=warnings_from(result.warnings),
    )


@router.post(
    "/resume",
    response_model=ResumeUploadResponse,
    summary="Extract resume text",
    description="Upload a .pdf, .docx or .txt resume and receive a ready-to-use resume source.",
)
def upload_resume(
    user: CurrentUser,
    settings: AppSettings,
    file: UploadFile = File(...),  # noqa: B008
) -> ResumeUploadResponse:
    data = file.file.read(settings.max_resume_bytes + 1)
    try:
        text = extract_resume_text(file.filename or "", data, settings)
    except ValidationError as e:
        raise_for_error(e.to_service_error())
    return ResumeUploadResponse(
        filename=file.filename or "",
        characters=len(text),
        source={"type": "resume", "text": text},
    )


@router.get("/suggestions", response_model=SuggestionsResponse, summary="Generation suggestions")
def get_suggestions(
    user: CurrentUser, settings: AppSettings, registry: Registry
) -> SuggestionsResponse:
    return SuggestionsResponse.model_validate(generation_suggestions(settings, registry))


@router.post(
    "/recommendations",
    response_model=list[TemplateRecommendation],
    summary="Template recommendations",
    description="Score the bundled templates against the sources you plan to generate from.",
)
def get_recommendations(
    request: RecommendationsRequest, user: CurrentUser, registry: Registry
) -> list[TemplateRecommendation]:
    return [
        TemplateRecommendation.model_validate(rec)
        for rec in template_recommendations(request.sources, registry)
    ]


@router.post(
    "/generate-bio",
    response_model=BioResponse,
    summary="Generate a bio",
    description="Write a short bio from loose profile fields without creating a portfolio.",
)
def generate_bio(request: BioRequest, user: CurrentUser, generator: Generator) -> BioResponse:
    result = generator.generate_bio(user.id, request.user_data, request.style)
    if not result.ok:
        raise_for_error(result.error)
    bio = result.value
    return BioResponse(
        bio=bio.bio,
        style=bio.style,
        iteration_id=bio.iteration_id,
        tokens_used=bio.tokens_used,
        ai_model=bio.ai_model,
    )


@router.post(
    "/generate-projects",
    response_model=ProjectsResponse,
    summary="Describe repositories",
    description="Turn GitHub repository metadata into portfolio project entries.",
)
def generate_projects(
    request: ProjectsRequest, user: CurrentUser, generator: Generator
) -> ProjectsResponse:
    repositories = [repo.model_dump(exclude_none=True) for repo in request.repositories]
    result = generator.generate_project_descriptions(user.id, repositories)
    if not result.ok:
        raise_for_error(result.error)
    described = result.value
    return ProjectsResponse(
        projects=[project.model_dump() for project in described.projects],
        iteration_id=described.iteration_id,
        tokens_used=described.tokens_used,
        ai_model=described.ai_model,
        warnings=warnings_from(result.warnings),
    )


@router.get("/usage", response_model=UsageResponse, summary="Model usage")
def get_usage(user: CurrentUser) -> UsageResponse:
    with get_session() as session:
        return UsageResponse.model_validate(iteration_repo.usage_summary(session, user.id))
