"""Prompt builders for generation, enhancement, résumé parsing, bios and project blurbs."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from portfolio_forge.services.content_schema import ContentDocument

__all__ = [
    "SYSTEM_PROMPTS",
    "build_bio_prompt",
    "build_generation_prompt",
    "build_project_description_prompt",
    "build_resume_prompt",
    "build_section_prompt",
]

_DOCUMENT_SHAPE = """{
  "hero": {"name": "string", "title": "string", "bio": "string", "image": "string",
           "social_links": {"github": "url", "linkedin": "url"}},
  "about": {"description": "string", "skills": ["string"], "interests": ["string"]},
  "projects": [{"title": "string", "description": "string", "tech_stack": ["string"],
                "github_url": "string", "live_url": "string", "key_features": ["string"]}],
  "experience": [{"company": "string", "title": "string", "location": "string",
                  "start_date": "string", "end_date": "string", "current": false,
                  "description": "string", "highlights": ["string"]}],
  "education": [{"institution": "string", "degree": "string", "field": "string",
                 "start_date": "string", "end_date": "string", "description": "string"}],
  "contact": {"email": "string", "phone": "string", "location": "string",
              "message": "string", "social_links": {}}
}"""

SYSTEM_PROMPTS: dict[str, str] = {
    "portfolio_generation": (
        "You are an expert portfolio generator. Create professional, engaging portfolio "
        "content that highlights the person's skills and achievements. Use only facts "
        "present in the sources; do not invent employers, dates, metrics or links. "
        "Return the response as a single valid JSON object with exactly this structure "
        f"and no surrounding prose:\n{_DOCUMENT_SHAPE}"
    ),
    "section_enhancement": (
        "You are an expert content enhancer for professional portfolios. Improve the given "
        "section based on the user's request while maintaining professionalism and "
        "consistency with the rest of the portfolio. Return only the enhanced section as "
        "JSON with the same shape as the input, wrapped as {\"<section>\": <value>}."
    ),
    "project_description": (
        "You are an expert at writing compelling project descriptions for developer "
        "portfolios. Highlight technical skills, problem-solving and project impact "
        "without inventing features the repository data does not support. Return a JSON "
        "array with one object per repository, in the order given, each with title, "
        "description and key_features (an array of short strings)."
    ),
    "bio_generation": (
        "You are an expert at writing professional bios for portfolios. Create engaging, "
        "concise bios that highlight the person's expertise and personality. Return only "
        "the bio text, no additional formatting or JSON."
    ),
    "resume_parsing": (
        "You are an expert at parsing resumes and extracting structured data. Return only "
        "JSON using these keys where the resume supports them: hero (name, title, bio), "
        "about (description, skills), experience, education, projects, contact. Keep dates "
        "in a consistent format and do not add information that is not in the resume. "
        f"Shape reference:\n{_DOCUMENT_SHAPE}"
    ),
}


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, sort_keys=True, default=str)


def build_generation_prompt(
    sources: Sequence[Mapping[str, Any]],
    preferences: Mapping[str, Any] | None = None,
    existing: ContentDocument | None = None,
) -> str:
    """Build the user prompt for a full portfolio generation.

    Args:
        sources: Normalized ``{"type", "data"}`` records, in priority order.
        preferences: Caller preferences (tone, focus, template, ...).
        existing: Current document when regenerating on top of existing content.
    """
    parts: list[str] = ["Generate a professional portfolio based on the following sources:", ""]
    for index, source in enumerate(sources, start=1):
        kind = source.get("type", "unknown")
        data = source.get("data") or {}
        parts.append(f"Source {index} ({kind}):")
        if kind == "github":
            parts.append(f"GitHub Data: {_dump(data)}")
        elif kind == "resume":
            parts.append(f"Resume Content: {_dump(data)}")
        elif kind == "prompt":
            parts.append(f"User Description: {data.get('description', '')}")
            if data.get("preferences"):
                parts.append(f"Description Preferences: {_dump(data['preferences'])}")
        elif kind == "linkedin":
            parts.append(f"LinkedIn Profile: {_dump(data)}")
        else:
            parts.append(_dump(data))
        parts.append("")

    if existing is not None:
        parts.append("Existing portfolio content (keep what the request does not change):")
        parts.append(_dump(existing.to_dict()))
        parts.append("")

    prefs = {k: v for k, v in (preferences or {}).items() if v not in (None, "", {}, [])}
    if prefs:
        parts.append(f"Preferences: {_dump(prefs)}")
        parts.append("")

    parts.append(
        "Generate a complete portfolio with hero, about, projects, experience, education "
        "and contact sections."
    )
    return "\n".join(parts)


def build_section_prompt(
    document: ContentDocument,
    section: str,
    user_prompt: str,
    context: Mapping[str, Any] | None = None,
) -> str:
    """Build a prompt scoped to a single section of *document*."""
    parts = [
        f"Current {section} section content:",
        _dump(document.section_dict(section)),
        "",
        f"User request: {user_prompt}",
    ]
    if context:
        parts.extend(["", f"Context: {_dump(context)}"])
    parts.extend(
        [
            "",
            "Please enhance this section based on the user's request while maintaining "
            "consistency with the overall portfolio.",
        ]
    )
    return "\n".join(parts)


def build_resume_prompt(resume_text: str) -> str:
    """Build the prompt that pre-structures raw résumé text."""
    return (
        "Parse the following resume and extract structured data in JSON format:\n\n"
        f"{resume_text}\n\n"
        "Extract personal information, professional summary, work experience, education, "
        "skills, projects and contact details."
    )


# Longest README excerpt quoted per repository.
README_EXCERPT_CHARS = 500


def _joined(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, Sequence):
        return ", ".join(str(item) for item in value if item)
    return ""


def build_bio_prompt(user_data: Mapping[str, Any], style: str) -> str:
    """Build the prompt for a standalone bio in the requested *style*."""
    lines = [
        f"Generate a {style} bio for a portfolio based on this information:",
        f"Name: {user_data.get('name') or ''}",
        f"Title: {user_data.get('title') or ''}",
        f"Experience: {_joined(user_data.get('experience'))}",
        f"Skills: {_joined(user_data.get('skills'))}",
        f"Interests: {_joined(user_data.get('interests'))}",
        f"Company: {user_data.get('company') or ''}",
        f"Location: {user_data.get('location') or ''}",
        "",
        f"Additional context: {user_data.get('context') or ''}",
        "",
        "Keep it engaging, professional, and around 2-3 sentences.",
    ]
    return "\n".join(lines)


def build_project_description_prompt(repositories: Sequence[Mapping[str, Any]]) -> str:
    """Build the prompt that turns repository metadata into portfolio project blurbs."""
    parts = [
        "Generate professional project descriptions for the following GitHub repositories:",
        "",
    ]
    for index, repo in enumerate(repositories, start=1):
        languages = _joined(repo.get("languages")) or repo.get("language") or "Not specified"
        readme = (repo.get("readme") or "").strip()[:README_EXCERPT_CHARS]
        parts.extend(
            [
                f"Repository {index}:",
                f"Name: {repo.get('name')}",
                f"Description: {repo.get('description') or 'No description'}",
                f"Languages: {languages}",
                f"Topics: {_joined(repo.get('topics')) or 'None'}",
                f"README excerpt: {readme or 'No README available'}",
                "",
            ]
        )
    parts.append(
        "Generate engaging, professional descriptions that highlight the technical aspects "
        "and value of each project."
    )
    return "\n".join(parts)
