"""Generation orchestrator: full generation, targeted enhancement and standalone blurbs.

Every entry point follows the same bookkeeping: a ``pending`` iteration is
committed first, and every outcome after that point (success, validation
failure, model failure) terminates it exactly once before a
:class:`~portfolio_forge.errors.Result` is returned. A reply that cannot be
parsed is not a failure: the parser's fallback value is used and the result
carries a ``parse_degraded`` warning. Nothing raised inside the flow crosses
the public methods of :class:`PortfolioGenerator`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from portfolio_forge.config import Settings, get_settings
from portfolio_forge.data.crud import iteration_repo, portfolio_repo
from portfolio_forge.data.db import get_session
from portfolio_forge.data.models import IterationType
from portfolio_forge.errors import (
    ErrorKind,
    ExternalServiceError,
    NotFoundError,
    PortfolioForgeError,
    Result,
    ServiceError,
    ValidationError,
)
from portfolio_forge.services.content_schema import (
    SECTIONS,
    ContentDocument,
    Project,
    merge_documents,
    merge_section,
    validate_section_name,
)
from portfolio_forge.services.llm_providers import LLMError, LLMResponse
from portfolio_forge.services.llm_service import LLMService
from portfolio_forge.services.prompts import (
    SYSTEM_PROMPTS,
    build_bio_prompt,
    build_generation_prompt,
    build_project_description_prompt,
    build_section_prompt,
)
from portfolio_forge.services.response_parser import (
    ParseOutcome,
    parse_bio,
    parse_document,
    parse_project_descriptions,
    parse_section,
)
from portfolio_forge.services.source_normalizer import (
    NormalizedSource,
    SourceNormalizer,
    validate_sources,
)
from portfolio_forge.templates import TemplateRegistry

logger = logging.getLogger(__name__)

__all__ = [
    "BioSummary",
    "ChangeSummary",
    "PortfolioGenerator",
    "PortfolioSummary",
    "ProjectDescriptions",
    "portfolio_title",
]

ENTIRE_PORTFOLIO = "entire_portfolio"

GENERATION_MAX_TOKENS = 8192
FALLBACK_MAX_TOKENS = 4096
SECTION_MAX_TOKENS = 2048
BIO_MAX_TOKENS = 500
PROJECT_DESCRIPTION_MAX_TOKENS = 3000
DEFAULT_BIO_STYLE = "professional"


@dataclass(frozen=True)
class PortfolioSummary:
    id: int
    title: str
    slug: str
    status: str
    template_id: str
    iteration_id: int
    sources_processed: int
    tokens_used: int
    processing_time_ms: int
    ai_model: str | None


@dataclass(frozen=True)
class ChangeSummary:
    portfolio_id: int
    iteration_id: int
    section: str
    prompt: str
    changed_sections: tuple[str, ...] = field(default_factory=tuple)
    tokens_used: int = 0
    processing_time_ms: int = 0
    ai_model: str | None = None


@dataclass(frozen=True)
class BioSummary:
    bio: str
    style: str
    iteration_id: int
    tokens_used: int = 0
    ai_model: str | None = None


@dataclass(frozen=True)
class ProjectDescriptions:
    projects: tuple[Project, ...]
    iteration_id: int
    tokens_used: int = 0
    ai_model: str | None = None


def portfolio_title(document: ContentDocument) -> str:
    """``"<name> - <title>"``, or ``"<name>'s Portfolio"`` when there is no title."""
    name = document.hero.name.strip() or "Portfolio"
    title = document.hero.title.strip()
    if title:
        return f"{name} - {title}"
    return f"{name}'s Portfolio"


def _elapsed_ms(start: float) -> int:
    return int((time.perf_counter() - start) * 1000)


def _degraded_warning(outcome: ParseOutcome) -> list[ServiceError]:
    if not outcome.degraded:
        return []
    message = "Model output was incomplete; some content fell back to defaults"
    if outcome.issues:
        message = f"{message}: {'; '.join(outcome.issues)}"
    return [ServiceError(kind=ErrorKind.PARSE_DEGRADED, message=message)]


def _as_service_error(exc: Exception) -> PortfolioForgeError:
    if isinstance(exc, PortfolioForgeError):
        return exc
    if isinstance(exc, LLMError):
        return ExternalServiceError(str(exc), service="llm")
    if isinstance(exc, SQLAlchemyError):
        return ExternalServiceError("Database operation failed", service="database")
    return ExternalServiceError(f"Unexpected error: {exc}", service="internal")


class PortfolioGenerator:
    """Drive generation and enhancement against the model.

    Args:
        llm_service: Text-generation capability.
        normalizer: Source normalizer; built from *llm_service* if omitted.
        registry: Template registry used to validate template ids.
        settings: Model names and the default template.
    """

    def __init__(
        self,
        llm_service: LLMService,
        registry: TemplateRegistry,
        normalizer: SourceNormalizer | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or llm_service.settings or get_settings()
        self.llm_service = llm_service
        self.registry = registry
        self.normalizer = normalizer or SourceNormalizer(llm_service, self.settings)

    # ------------------------------------------------------------------
    # Full generation
    # ------------------------------------------------------------------

    def generate(
        self,
        user_id: int,
        sources: Sequence[Mapping[str, Any]],
        preferences: Mapping[str, Any] | None = None,
    ) -> Result[PortfolioSummary]:
        """Generate and persist a new draft portfolio for *user_id*."""
        start = time.perf_counter()
        kinds = ", ".join(
            str(s.get("type", "?")) if isinstance(s, Mapping) else "?" for s in sources
        )
        try:
            with get_session() as session:
                iteration = iteration_repo.create_iteration(
                    session,
                    prompt=f"Generate portfolio from sources: {kinds}",
                    iteration_type=IterationType.GENERATE,
                    user_id=user_id,
                )
                iteration_id = iteration.id
        except SQLAlchemyError as exc:
            logger.exception("Could not record generation attempt for user %s", user_id)
            return Result.failure(_as_service_error(exc))

        try:
            prefs = dict(preferences or {})
            template_id = prefs.get("template_id") or self.settings.default_template_id
            self.registry.get(template_id)
            validate_sources(sources)

            logger.info("Generating portfolio for user %s from sources: %s", user_id, kinds)
            normalized = self.normalizer.normalize(sources)
            if not normalized:
                raise ExternalServiceError(
                    "None of the sources could be processed", service="sources"
                )

            response = self._complete_document(normalized, prefs)
            # An unusable reply still yields the default document, flagged as degraded.
            outcome = parse_document(response.text)

            document: ContentDocument = outcome.value
            title = portfolio_title(document)
            processing_ms = _elapsed_ms(start)
            with get_session() as session:
                portfolio = portfolio_repo.create_portfolio(
                    session,
                    user_id=user_id,
                    title=title,
                    content=document,
                    template_id=template_id,
                    meta_description=document.hero.bio or None,
                )
                iteration_repo.mark_completed(
                    session,
                    iteration_id,
                    portfolio_id=portfolio.id,
                    tokens_used=response.tokens_used,
                    processing_time_ms=processing_ms,
                    ai_model_used=response.model,
                    changes_made={
                        "generated": True,
                        "sources": [s["type"] for s in normalized],
                        "parse_status": outcome.status.value,
                    },
                )
                summary = PortfolioSummary(
                    id=portfolio.id,
                    title=portfolio.title,
                    slug=portfolio.slug,
                    status=portfolio.status,
                    template_id=portfolio.template_id,
                    iteration_id=iteration_id,
                    sources_processed=len(normalized),
                    tokens_used=response.tokens_used,
                    processing_time_ms=processing_ms,
                    ai_model=response.model,
                )
        except Exception as exc:
            return self._fail(iteration_id, exc, start, "Portfolio generation")

        logger.info("Generated portfolio %s (%s) in %d ms", summary.id, summary.slug, processing_ms)
        return Result.success(summary, warnings=_degraded_warning(outcome))

    # ------------------------------------------------------------------
    # Enhancement
    # ------------------------------------------------------------------

    def enhance(
        self,
        portfolio_id: int,
        prompt: str,
        section: str | None = None,
        *,
        user_id: int | None = None,
    ) -> Result[ChangeSummary]:
        """Apply *prompt* to one section, or to the whole document when *section* is None."""
        start = time.perf_counter()
        try:
            with get_session() as session:
                portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user_id)
                if portfolio is None:
                    return Result.failure(NotFoundError(f"Portfolio {portfolio_id} not found"))
                current = portfolio_repo.get_content(portfolio)
                iteration = iteration_repo.create_iteration(
                    session,
                    prompt=prompt or "",
                    iteration_type=IterationType.ENHANCE,
                    portfolio_id=portfolio_id,
                    user_id=portfolio.user_id,
                    previous_content=portfolio.content,
                )
                iteration_id = iteration.id
        except SQLAlchemyError as exc:
            logger.exception("Could not record enhancement attempt for portfolio %s", portfolio_id)
            return Result.failure(_as_service_error(exc))

        target = section or ENTIRE_PORTFOLIO
        try:
            if not (prompt or "").strip():
                raise ValidationError("Enhancement prompt must not be empty")
            if section is not None:
                validate_section_name(section)

            logger.info("Enhancing portfolio %s (%s)", portfolio_id, target)
            if section is not None:
                response, outcome, merged = self._enhance_section(
                    current, section, prompt, portfolio_id
                )
            else:
                response, outcome, merged = self._enhance_document(current, prompt)

            changed = tuple(s for s in SECTIONS if getattr(merged, s) != getattr(current, s))
            processing_ms = _elapsed_ms(start)
            with get_session() as session:
                portfolio = portfolio_repo.get_portfolio(session, portfolio_id)
                if portfolio is None:
                    raise NotFoundError(f"Portfolio {portfolio_id} was deleted during enhancement")
                portfolio_repo.update_content(session, portfolio, merged)
                iteration_repo.mark_completed(
                    session,
                    iteration_id,
                    tokens_used=response.tokens_used,
                    processing_time_ms=processing_ms,
                    ai_model_used=response.model,
                    changes_made={"enhanced": True, "section": target, "changed": list(changed)},
                )
        except Exception as exc:
            return self._fail(iteration_id, exc, start, "Portfolio enhancement")

        return Result.success(
            ChangeSummary(
                portfolio_id=portfolio_id,
                iteration_id=iteration_id,
                section=target,
                prompt=prompt,
                changed_sections=changed,
                tokens_used=response.tokens_used,
                processing_time_ms=processing_ms,
                ai_model=response.model,
            ),
            warnings=_degraded_warning(outcome),
        )

    def _enhance_section(
        self,
        current: ContentDocument,
        section: str,
        prompt: str,
        portfolio_id: int,
    ) -> tuple[LLMResponse, ParseOutcome, ContentDocument]:
        response = self.llm_service.complete(
            SYSTEM_PROMPTS["section_enhancement"],
            build_section_prompt(current, section, prompt, {"portfolio_id": portfolio_id}),
            model=self.settings.llm_cheap_model,
            temperature=0.7,
            max_tokens=SECTION_MAX_TOKENS,
        )
        outcome = parse_section(response.text, section, current)
        return response, outcome, merge_section(current, section, outcome.value)

    def _enhance_document(
        self, current: ContentDocument, prompt: str
    ) -> tuple[LLMResponse, ParseOutcome, ContentDocument]:
        sources: list[NormalizedSource] = [
            {"type": "prompt", "data": {"description": prompt.strip(), "preferences": {}}}
        ]
        response = self._complete_document(sources, {}, existing=current)
        # A fallback document sets no sections, so the merge keeps *current*.
        outcome = parse_document(response.text)
        return response, outcome, merge_documents(current, outcome.value)

    # ------------------------------------------------------------------
    # Standalone content
    # ------------------------------------------------------------------

    def generate_bio(
        self,
        user_id: int,
        user_data: Mapping[str, Any],
        style: str | None = None,
    ) -> Result[BioSummary]:
        """Write a short bio from loose profile fields; nothing is persisted but the iteration."""
        start = time.perf_counter()
        style = (style or "").strip() or DEFAULT_BIO_STYLE
        try:
            iteration_id = self._start_task(user_id, IterationType.BIO, f"Generate {style} bio")
        except SQLAlchemyError as exc:
            logger.exception("Could not record bio generation for user %s", user_id)
            return Result.failure(_as_service_error(exc))

        try:
            if not any(value for value in (user_data or {}).values()):
                raise ValidationError("user_data must contain at least one non-empty field")
            response = self.llm_service.complete(
                SYSTEM_PROMPTS["bio_generation"],
                build_bio_prompt(user_data, style),
                model=self.settings.llm_cheap_model,
                temperature=0.8,
                max_tokens=BIO_MAX_TOKENS,
            )
            outcome = parse_bio(response.text)
            if not outcome.value:
                raise ExternalServiceError("Model returned an empty bio", service="llm")
            with get_session() as session:
                iteration_repo.mark_completed(
                    session,
                    iteration_id,
                    tokens_used=response.tokens_used,
                    processing_time_ms=_elapsed_ms(start),
                    ai_model_used=response.model,
                    changes_made={"bio": True, "style": style},
                )
        except Exception as exc:
            return self._fail(iteration_id, exc, start, "Bio generation")

        return Result.success(
            BioSummary(
                bio=outcome.value,
                style=style,
                iteration_id=iteration_id,
                tokens_used=response.tokens_used,
                ai_model=response.model,
            )
        )

    def generate_project_descriptions(
        self, user_id: int, repositories: Sequence[Mapping[str, Any]]
    ) -> Result[ProjectDescriptions]:
        """Turn repository metadata into portfolio project entries, one per repository."""
        start = time.perf_counter()
        try:
            iteration_id = self._start_task(
                user_id,
                IterationType.PROJECTS,
                f"Describe {len(repositories)} repositories",
            )
        except SQLAlchemyError as exc:
            logger.exception("Could not record project descriptions for user %s", user_id)
            return Result.failure(_as_service_error(exc))

        try:
            if not repositories:
                raise ValidationError("At least one repository is required")
            for index, repo in enumerate(repositories):
                name = repo.get("name") if isinstance(repo, Mapping) else None
                if not isinstance(name, str) or not name.strip():
                    raise ValidationError(f"repositories[{index}] needs a non-empty name")
            response = self.llm_service.complete(
                SYSTEM_PROMPTS["project_description"],
                build_project_description_prompt(repositories),
                model=self.settings.llm_cheap_model,
                temperature=0.7,
                max_tokens=PROJECT_DESCRIPTION_MAX_TOKENS,
            )
            outcome = parse_project_descriptions(response.text, repositories)
            with get_session() as session:
                iteration_repo.mark_completed(
                    session,
                    iteration_id,
                    tokens_used=response.tokens_used,
                    processing_time_ms=_elapsed_ms(start),
                    ai_model_used=response.model,
                    changes_made={
                        "projects": [p.title for p in outcome.value],
                        "parse_status": outcome.status.value,
                    },
                )
        except Exception as exc:
            return self._fail(iteration_id, exc, start, "Project description generation")

        return Result.success(
            ProjectDescriptions(
                projects=tuple(outcome.value),
                iteration_id=iteration_id,
                tokens_used=response.tokens_used,
                ai_model=response.model,
            ),
            warnings=_degraded_warning(outcome),
        )

    # ------------------------------------------------------------------
    # Shared steps
    # ------------------------------------------------------------------

    @staticmethod
    def _start_task(user_id: int, iteration_type: IterationType, prompt: str) -> int:
        with get_session() as session:
            return iteration_repo.create_iteration(
                session, prompt=prompt, iteration_type=iteration_type, user_id=user_id
            ).id

    def _complete_document(
        self,
        sources: Sequence[NormalizedSource],
        preferences: Mapping[str, Any],
        existing: ContentDocument | None = None,
    ) -> LLMResponse:
        return self.llm_service.complete_with_fallback(
            SYSTEM_PROMPTS["portfolio_generation"],
            build_generation_prompt(sources, preferences, existing),
            temperature=0.7,
            max_tokens=GENERATION_MAX_TOKENS,
            fallback_max_tokens=FALLBACK_MAX_TOKENS,
        )

    @staticmethod
    def _fail(iteration_id: int, exc: Exception, start: float, action: str) -> Result[Any]:
        error = _as_service_error(exc)
        if isinstance(exc, (ValidationError, NotFoundError)):
            logger.warning("%s rejected: %s", action, error.message)
        else:
            logger.exception("%s failed", action)
        try:
            with get_session() as session:
                iteration_repo.mark_failed(
                    session, iteration_id, error.message, processing_time_ms=_elapsed_ms(start)
                )
        except (SQLAlchemyError, iteration_repo.IterationStateError):
            logger.exception("Could not record failure on iteration %s", iteration_id)
        return Result.failure(error)
