"""Pydantic schemas for generation and enhancement endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from portfolio_forge.api.schemas.common import WarningResponse


class GenerationPreferences(BaseModel):
    """Caller preferences forwarded to the generation prompt."""

    model_config = ConfigDict(extra="allow")

    template_id: str | None = None
    tone: str | None = None
    focus: str | None = None


class GenerateRequest(BaseModel):
    """Request body for a full generation.

    Each source is an object with a ``type`` of ``github``, ``resume``,
    ``prompt`` or ``linkedin`` plus that type's fields.
    """

    sources: list[dict[str, Any]] = Field(min_length=1)
    preferences: GenerationPreferences = Field(default_factory=GenerationPreferences)


class GenerationMetadata(BaseModel):
    iteration_id: int
    sources_processed: int
    tokens_used: int
    processing_time_ms: int
    ai_model: str | None = None


class GeneratedPortfolio(BaseModel):
    id: int
    title: str
    slug: str
    status: str
    template_id: str


class GenerateResponse(BaseModel):
    portfolio: GeneratedPortfolio
    metadata: GenerationMetadata
    warnings: list[WarningResponse] = Field(default_factory=list)


class EnhanceRequest(BaseModel):
    """Request body for enhancing an existing portfolio."""

    prompt: str = Field(min_length=1, max_length=2000)
    section: str | None = Field(
        default=None, description="Section to enhance; omit to enhance the whole portfolio"
    )


class EnhanceResponse(BaseModel):
    portfolio_id: int
    iteration_id: int
    section: str
    prompt: str
    changed_sections: list[str]
    tokens_used: int
    processing_time_ms: int
    ai_model: str | None = None
    warnings: list[WarningResponse] = Field(default_factory=list)


class ResumeUploadResponse(BaseModel):
    """Extracted résumé text, ready to be sent back as a ``resume`` source."""

    filename: str
    characters: int
    source: dict[str, Any]


class RecommendationsRequest(BaseModel):
    sources: list[dict[str, Any]] = Field(default_factory=list)


class TemplateRecommendation(BaseModel):
    id: str
    name: str
    match_score: float
    reasons: list[str]


class SourceSuggestion(BaseModel):
    type: str
    available: bool
    description: str


class SuggestionsResponse(BaseModel):
    sources: list[SourceSuggestion]
    templates: list[str]
    tips: list[str]


class BioRequest(BaseModel):
    """Loose profile fields (name, title, skills, experience...) to write a bio from."""

    user_data: dict[str, Any] = Field(min_length=1)
    style: str = Field(default="professional", max_length=50)


class BioResponse(BaseModel):
    bio: str
    style: str
    iteration_id: int
    tokens_used: int
    ai_model: str | None = None


class RepositoryInput(BaseModel):
    """Repository metadata as returned by the GitHub API."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    description: str | None = None
    language: str | None = None
    languages: list[str] = Field(default_factory=list)
    topics: list[str] = Field(default_factory=list)
    stargazers_count: int = 0
    html_url: str | None = None
    homepage: str | None = None
    readme: str | None = None


class ProjectsRequest(BaseModel):
    repositories: list[RepositoryInput] = Field(min_length=1, max_length=20)


class ProjectsResponse(BaseModel):
    projects: list[dict[str, Any]]
    iteration_id: int
    tokens_used: int
    ai_model: str | None = None
    warnings: list[WarningResponse] = Field(default_factory=list)


class UsageResponse(BaseModel):
    total_iterations: int
    successful_iterations: int
    failed_iterations: int
    pending_iterations: int
    total_tokens_used: int
    monthly_iterations: int
    monthly_tokens_used: int
    iteration_types: dict[str, int]
