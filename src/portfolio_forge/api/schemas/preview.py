"""Pydantic schemas for preview and rendering endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RenderRequest(BaseModel):
    """Unsaved content to render for a live preview."""

    content: dict[str, Any]
    template_id: str


class RegenerateRequest(BaseModel):
    template_id: str | None = Field(
        default=None, description="Switch to this template before re-rendering"
    )


class ArtifactResponse(BaseModel):
    html: str
    css: str
    js: str


class PortfolioStats(BaseModel):
    projects_count: int
    skills_count: int
    experience_count: int
    has_contact: bool


class MetadataResponse(BaseModel):
    title: str
    description: str
    image: str | None = None
    url: str
    author: str
    keywords: list[str]
    type: str
    portfolio_data: PortfolioStats
