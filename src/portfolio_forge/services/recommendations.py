"""Keyword heuristics for generation suggestions and template recommendations."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from typing import Any

from portfolio_forge.config import Settings
from portfolio_forge.templates import TemplateRegistry

__all__ = ["generation_suggestions", "template_recommendations"]

DESIGN_KEYWORDS = ("design", "ui", "ux", "figma", "photoshop", "illustrator", "sketch")
BACKEND_KEYWORDS = ("api", "server", "database", "backend", "node", "python", "java", "sql")

_TIPS = [
    "Combine multiple sources for the best results",
    "GitHub provides rich project data",
    "A well-written resume helps generate better content",
    "Be specific in your descriptions for personalized results",
]


def _source_text(source: Mapping[str, Any]) -> str:
    values = [v for k, v in source.items() if k not in ("type", "access_token")]
    return json.dumps(values, default=str).lower()


def _mentions(sources: Sequence[Mapping[str, Any]], keywords: Sequence[str]) -> bool:
    # Word-start match: "api" hits "apis", "ui" does not hit "building".
    pattern = re.compile(r"\b(?:" + "|".join(map(re.escape, keywords)) + ")")
    return any(pattern.search(_source_text(source)) for source in sources)


def template_recommendations(
    sources: Sequence[Mapping[str, Any]], registry: TemplateRegistry
) -> list[dict[str, Any]]:
    """Score bundled templates against the supplied sources, best first."""
    has_github = any(source.get("type") == "github" for source in sources)
    candidates: list[tuple[str, float, list[str]]] = []

    if has_github and _mentions(sources, BACKEND_KEYWORDS):
        candidates.append(("modern-dev", 0.9, ["GitHub source", "Backend development focus"]))
    if _mentions(sources, DESIGN_KEYWORDS):
        candidates.append(("creative", 0.8, ["Design work detected", "Visual portfolio layout"]))
    candidates.append(("minimal", 0.7, ["Clean design", "Professional appearance"]))

    recommendations = [
        {
            "id": template_id,
            "name": registry.get(template_id).name,
            "match_score": score,
            "reasons": reasons,
        }
        for template_id, score, reasons in candidates
        if template_id in registry
    ]
    recommendations.sort(key=lambda rec: rec["match_score"], reverse=True)
    return recommendations


def generation_suggestions(settings: Settings, registry: TemplateRegistry) -> dict[str, Any]:
    """Describe which source kinds are usable and how to get the best result."""
    github_description = (
        "Use your GitHub repositories, pinned projects and contributions"
        if settings.github_token
        else "Use your public GitHub repositories (pinned projects need a token)"
    )
    return {
        "sources": [
            {"type": "github", "available": True, "description": github_description},
            {
                "type": "resume",
                "available": True,
                "description": "Upload your resume for comprehensive portfolio generation",
            },
            {"type": "prompt", "available": True, "description": "Describe yourself and your work"},
            {
                "type": "linkedin",
                "available": True,
                "description": "Paste your LinkedIn profile details",
            },
        ],
        "templates": list(registry),
        "tips": list(_TIPS),
    }
