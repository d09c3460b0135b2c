"""Pydantic schemas for portfolio management endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PortfolioResponse(BaseModel):
    """Portfolio metadata without its content document."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str
    status: str
    template_id: str
    view_count: int
    is_public: bool
    meta_title: str | None = None
    meta_description: str | None = None
    published_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PortfolioDetailResponse(PortfolioResponse):
    content: dict[str, Any]
    has_rendered_artifact: bool


class ContentUpdateRequest(BaseModel):
    """Full replacement of the content document; missing sections are defaulted."""

    content: dict[str, Any]


class IterationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    portfolio_id: int | None
    prompt: str
    iteration_type: str
    status: str
    previous_content: dict[str, Any] | None = None
    changes_made: dict[str, Any] | None = None
    ai_model_used: str | None = None
    tokens_used: int
    processing_time_ms: int
    error_message: str | None = None
    created_at: datetime
    completed_at: datetime | None = None


class IterationStatsResponse(BaseModel):
    total_iterations: int
    completed_iterations: int
    failed_iterations: int
    pending_iterations: int
    total_tokens_used: int
    average_processing_time_ms: int
    iteration_types: dict[str, int] = Field(default_factory=dict)


class DuplicateRequest(BaseModel):
    """Optional title for the copy; defaults to ``"<title> (Copy)"``."""

    title: str | None = Field(default=None, max_length=200)
