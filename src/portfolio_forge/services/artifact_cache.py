"""Serve rendered portfolios through the write-through artifact cache.

The cached ``generated_html/css/js`` columns are filled only by
:meth:`PortfolioRenderService.render` and :meth:`PortfolioRenderService.regenerate`,
always as a unit and only for the content/template pair that produced
them. Content and template writes clear them (see
:mod:`portfolio_forge.data.crud.portfolio_repo`), so a cached triple is
never older than the document it is served for.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from portfolio_forge.data.crud import portfolio_repo
from portfolio_forge.data.db import get_session
from portfolio_forge.data.models import Portfolio
from portfolio_forge.errors import (
    ExternalServiceError,
    NotFoundError,
    PortfolioForgeError,
    Result,
    ValidationError,
)
from portfolio_forge.services.content_schema import ContentDocument, coerce_document
from portfolio_forge.services.renderer import RenderedArtifact, TemplateRenderer

logger = logging.getLogger(__name__)

__all__ = ["PortfolioRenderService", "record_view"]


def _cached(portfolio: Portfolio) -> RenderedArtifact | None:
    if portfolio.generated_html is None or portfolio.generated_css is None:
        return None
    return RenderedArtifact(
        html=portfolio.generated_html,
        css=portfolio.generated_css,
        js=portfolio.generated_js or "",
    )


def _database_error() -> ExternalServiceError:
    logger.exception("Portfolio storage failed while rendering")
    return ExternalServiceError("Database operation failed", service="database")


def record_view(portfolio_id: int) -> None:
    """Increment a portfolio's view counter; failures are logged and dropped.

    Scheduled as a background task after a public page has been served.
    """
    try:
        with get_session() as session:
            portfolio_repo.increment_view_count(session, portfolio_id)
    except SQLAlchemyError:
        logger.exception("Failed to record view for portfolio %s", portfolio_id)


class PortfolioRenderService:
    """Render stored and unsaved documents.

    Args:
        renderer: Pure template renderer.
    """

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def render(self, portfolio_id: int, user_id: int | None = None) -> Result[RenderedArtifact]:
        """Return the cached artifact, rendering and caching it on a miss."""
        try:
            with get_session() as session:
                portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user_id)
                if portfolio is None:
                    raise NotFoundError(f"Portfolio {portfolio_id} not found")
                artifact = self._render_cached(session, portfolio)
        except PortfolioForgeError as e:
            return Result.failure(e)
        except SQLAlchemyError:
            return Result.failure(_database_error())
        return Result.success(artifact)

    def render_transient(
        self, content: ContentDocument | Mapping[str, Any], template_id: str
    ) -> Result[RenderedArtifact]:
        """Render unsaved content for live preview; nothing is persisted."""
        try:
            if isinstance(content, ContentDocument):
                document = content
            elif isinstance(content, Mapping):
                document, issues = coerce_document(content)
                if issues:
                    raise ValidationError("; ".join(issues))
            else:
                raise ValidationError("content must be an object")
            artifact = self.renderer.render(document, template_id)
        except PortfolioForgeError as e:
            return Result.failure(e)
        return Result.success(artifact)

    def regenerate(
        self,
        portfolio_id: int,
        template_id: str | None = None,
        user_id: int | None = None,
    ) -> Result[RenderedArtifact]:
        """Re-render bypassing the cache, optionally switching template.

        The template id is validated before anything is written; the new id
        and the new artifact are committed together.
        """
        try:
            with get_session() as session:
                portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user_id)
                if portfolio is None:
                    raise NotFoundError(f"Portfolio {portfolio_id} not found")
                target = template_id or portfolio.template_id
                document = portfolio_repo.get_content(portfolio)
                artifact = self.renderer.render(document, target)
                portfolio_repo.update_template(session, portfolio, target)
                portfolio_repo.store_artifacts(
                    session,
                    portfolio.id,
                    content=portfolio.content,
                    template_id=target,
                    **artifact.to_dict(),
                )
        except PortfolioForgeError as e:
            return Result.failure(e)
        except SQLAlchemyError:
            return Result.failure(_database_error())
        logger.info("Regenerated portfolio %s with template %s", portfolio_id, target)
        return Result.success(artifact)

    def replace_content(
        self,
        portfolio_id: int,
        content: Mapping[str, Any],
        user_id: int | None = None,
    ) -> Result[ContentDocument]:
        """Manually replace a portfolio's document (defaults filled)."""
        try:
            document, issues = coerce_document(content)
            if issues:
                raise ValidationError("; ".join(issues))
            with get_session() as session:
                portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user_id)
                if portfolio is None:
                    raise NotFoundError(f"Portfolio {portfolio_id} not found")
                portfolio_repo.update_content(session, portfolio, document)
        except PortfolioForgeError as e:
            return Result.failure(e)
        except SQLAlchemyError:
            return Result.failure(_database_error())
        return Result.success(document)

    def metadata(self, portfolio_id: int, user_id: int | None = None) -> Result[dict[str, Any]]:
        try:
            with get_session() as session:
                portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user_id)
                if portfolio is None:
                    raise NotFoundError(f"Portfolio {portfolio_id} not found")
                document = portfolio_repo.get_content(portfolio)
                title, slug = portfolio.title, portfolio.slug
        except PortfolioForgeError as e:
            return Result.failure(e)
        except SQLAlchemyError:
            return Result.failure(_database_error())
        return Result.success(self.renderer.preview_metadata(document, title=title, slug=slug))

    def render_public(self, slug: str) -> Result[tuple[int, RenderedArtifact]]:
        """Render a published portfolio by slug; the caller records the view."""
        try:
            with get_session() as session:
                portfolio = portfolio_repo.get_public_portfolio(session, slug)
                if portfolio is None:
                    raise NotFoundError(f"No published portfolio at {slug!r}")
                artifact = self._render_cached(session, portfolio)
                portfolio_id = portfolio.id
        except PortfolioForgeError as e:
            return Result.failure(e)
        except SQLAlchemyError:
            return Result.failure(_database_error())
        return Result.success((portfolio_id, artifact))

    def _render_cached(self, session: Session, portfolio: Portfolio) -> RenderedArtifact:
        artifact = _cached(portfolio)
        if artifact is not None:
            return artifact
        content = portfolio.content
        template_id = portfolio.template_id
        artifact = self.renderer.render(portfolio_repo.get_content(portfolio), template_id)
        portfolio_repo.store_artifacts(
            session, portfolio.id, content=content, template_id=template_id, **artifact.to_dict()
        )
        return artifact
