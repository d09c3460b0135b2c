"""Pydantic schemas for template listing and customisation."""

from __future__ import annotations

from pydantic import BaseModel, Field


class TemplateResponse(BaseModel):
    id: str
    name: str
    description: str
    features: list[str]
    is_premium: bool


class TemplateCustomizeRequest(BaseModel):
    """Overrides applied on top of a template's stylesheet."""

    colors: dict[str, str] = Field(default_factory=dict)
    fonts: dict[str, str] = Field(default_factory=dict)
    custom_css: str | None = Field(default=None, max_length=20000)


class TemplateCustomizeResponse(BaseModel):
    template_id: str
    css: str
