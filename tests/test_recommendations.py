from __future__ import annotations

from dataclasses import replace

from portfolio_forge.config import Settings
from portfolio_forge.services.recommendations import (
    generation_suggestions,
    template_recommendations,
)
from portfolio_forge.templates import build_default_registry


def test_backend_github_profile_prefers_modern_dev() -> None:
    sources = [
        {"type": "github", "username": "octo", "access_token": "api-secret"},
        {"type": "prompt", "description": "Python backend engineer building APIs"},
    ]

    recommendations = template_recommendations(sources, build_default_registry())

    assert [r["id"] for r in recommendations] == ["modern-dev", "minimal"]
    assert recommendations[0]["match_score"] == 0.9
    assert recommendations[0]["name"]


def test_design_work_prefers_creative() -> None:
    sources = [{"type": "prompt", "description": "Product designer working in Figma"}]

    recommendations = template_recommendations(sources, build_default_registry())

    assert [r["id"] for r in recommendations] == ["creative", "minimal"]


def test_backend_keywords_without_github_fall_back_to_minimal() -> None:
    sources = [{"type": "prompt", "description": "Backend developer"}]

    recommendations = template_recommendations(sources, build_default_registry())

    assert [r["id"] for r in recommendations] == ["minimal"]


def test_access_token_is_not_scanned() -> None:
    sources = [{"type": "github", "username": "octo", "access_token": "server-token"}]

    recommendations = template_recommendations(sources, build_default_registry())

    assert [r["id"] for r in recommendations] == ["minimal"]


def test_generation_suggestions_mentions_token_requirement(settings: Settings) -> None:
    registry = build_default_registry()

    without_token = generation_suggestions(settings, registry)
    with_token = generation_suggestions(replace(settings, github_token="tok"), registry)

    assert [s["type"] for s in without_token["sources"]] == [
        "github",
        "resume",
        "prompt",
        "linkedin",
    ]
    assert "need a token" in without_token["sources"][0]["description"]
    assert "pinned projects and contributions" in with_token["sources"][0]["description"]
    assert without_token["templates"] == ["creative", "minimal", "modern-dev"]
    assert without_token["tips"]
