"""Normalize heterogeneous generation inputs into ``{"type", "data"}`` records.

Supported source types are ``github``, ``resume``, ``prompt`` and
``linkedin``. Unknown types, and sources whose collaborator fails outright,
are logged and skipped so the remaining sources still reach the prompt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import Any, Literal, TypedDict

import httpx
from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from portfolio_forge.config import Settings, get_settings
from portfolio_forge.errors import ValidationError
from portfolio_forge.services.github_client import GitHubClient, GitHubUserData
from portfolio_forge.services.llm_providers import LLMError
from portfolio_forge.services.llm_service import LLMService
from portfolio_forge.services.prompts import SYSTEM_PROMPTS, build_resume_prompt
from portfolio_forge.services.response_parser import parse_resume

logger = logging.getLogger(__name__)

__all__ = [
    "GitHubSource",
    "LinkedInSource",
    "NormalizedSource",
    "PromptSource",
    "ResumeSource",
    "SourceNormalizer",
    "validate_sources",
]


class NormalizedSource(TypedDict):
    type: str
    data: dict[str, Any]


class GitHubSource(BaseModel):
    type: Literal["github"] = "github"
    username: str
    access_token: str | None = None

    @field_validator("username")
    @classmethod
    def username_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("username must not be blank")
        return value.strip()


class ResumeSource(BaseModel):
    type: Literal["resume"] = "resume"
    text: str

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("resume text must not be blank")
        return value


class PromptSource(BaseModel):
    type: Literal["prompt"] = "prompt"
    description: str
    preferences: dict[str, Any] = Field(default_factory=dict)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("description must not be blank")
        return value.strip()


class LinkedInSource(BaseModel):
    type: Literal["linkedin"] = "linkedin"
    fields: dict[str, Any] = Field(default_factory=dict)


_SOURCE_MODELS: dict[str, type[BaseModel]] = {
    "github": GitHubSource,
    "resume": ResumeSource,
    "prompt": PromptSource,
    "linkedin": LinkedInSource,
}

Source = GitHubSource | ResumeSource | PromptSource | LinkedInSource


def validate_sources(raw_sources: Sequence[Mapping[str, Any]]) -> list[Source | None]:
    """Validate source descriptors before any external call is made.

    Unknown types map to ``None`` (they are skipped later, not rejected).

    Raises:
        ValidationError: A known source type is missing a required field, or
            no usable source was supplied at all.
    """
    if not raw_sources:
        raise ValidationError("At least one source is required")

    validated: list[Source | None] = []
    for index, raw in enumerate(raw_sources):
        if isinstance(raw, BaseModel):
            raw = raw.model_dump()
        kind = raw.get("type") if isinstance(raw, Mapping) else None
        model = _SOURCE_MODELS.get(kind) if isinstance(kind, str) else None
        if model is None:
            validated.append(None)
            continue
        try:
            validated.append(model.model_validate(raw))
        except PydanticValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise ValidationError(f"sources[{index}] ({kind}): {location} {first['msg']}") from e

    if all(source is None for source in validated):
        raise ValidationError("None of the supplied sources has a supported type")
    return validated


class SourceNormalizer:
    """Turn validated sources into prompt-ready records.

    Args:
        llm_service: Used to pre-structure résumé text with the cheap model.
        settings: GitHub limits and model names.
        github_transport: Optional httpx transport for the GitHub client.
    """

    def __init__(
        self,
        llm_service: LLMService | None = None,
        settings: Settings | None = None,
        github_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._llm_service = llm_service
        self._github_transport = github_transport

    @property
    def llm_service(self) -> LLMService:
        if self._llm_service is None:
            self._llm_service = LLMService(settings=self.settings)
        return self._llm_service

    def normalize(self, raw_sources: Sequence[Mapping[str, Any]]) -> list[NormalizedSource]:
        """Normalize *raw_sources*, preserving input order."""
        normalized: list[NormalizedSource] = []
        for raw, source in zip(raw_sources, validate_sources(raw_sources), strict=True):
            if source is None:
                kind = raw.get("type") if isinstance(raw, Mapping) else type(raw).__name__
                logger.warning("Skipping unknown source type: %s", kind)
                continue
            try:
                data = self._normalize_one(source)
            except (LLMError, httpx.HTTPError) as e:
                logger.warning("Source %s could not be processed: %s", source.type, e)
                continue
            normalized.append({"type": source.type, "data": data})
        return normalized

    def _normalize_one(self, source: Source) -> dict[str, Any]:
        if isinstance(source, GitHubSource):
            return self.process_github(source.username, source.access_token)
        if isinstance(source, ResumeSource):
            return self.process_resume(source.text)
        if isinstance(source, PromptSource):
            return {"description": source.description, "preferences": source.preferences}
        return dict(source.fields)

    def process_github(self, username: str, access_token: str | None = None) -> dict[str, Any]:
        """Fetch and summarise one GitHub account; partial data on sub-fetch failure."""
        data = asyncio.run(self._fetch_github(username, access_token))
        top = self.settings.github_top_repositories
        profile = data.profile or {"username": username}
        return {
            "profile": profile,
            "repositories": data.repositories[:top],
            "pinned_repositories": data.pinned_repositories,
            "languages": data.languages[: self.settings.github_top_languages],
            "stats": data.stats,
            "contributions": data.contribution_calendar,
            "profile_readme": data.profile_readme,
            "unavailable": data.failures,
        }

    async def _fetch_github(self, username: str, access_token: str | None) -> GitHubUserData:
        async with GitHubClient(
            self.settings, access_token=access_token, transport=self._github_transport
        ) as github:
            return await github.fetch_user_data(username)

    def process_resume(self, text: str) -> dict[str, Any]:
        """Pre-structure résumé text into a partial content document.

        When the model reply carries no structure the raw text is forwarded
        so the main generation prompt still sees it.
        """
        response = self.llm_service.complete(
            SYSTEM_PROMPTS["resume_parsing"],
            build_resume_prompt(text),
            model=self.settings.llm_cheap_model,
            temperature=0.3,
        )
        outcome = parse_resume(response.text)
        if outcome.degraded:
            logger.warning("Resume pre-structuring degraded: %s", "; ".join(outcome.issues))
        if not outcome.value:
            return {"raw_text": text}
        return outcome.value
