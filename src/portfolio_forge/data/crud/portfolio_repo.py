"""Persistence helpers for users and portfolios.

This is the only module that (de)serialises the ``content`` column. Every
content or template change clears the cached artifact in the same flush,
and cached artifacts are only stored against the exact content/template
pair they were rendered from.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from portfolio_forge.data.models import Portfolio, PortfolioStatus, User
from portfolio_forge.services.content_schema import ContentDocument, dump_content, load_content

logger = logging.getLogger(__name__)

__all__ = [
    "archive_portfolio",
    "create_portfolio",
    "delete_portfolio",
    "duplicate_portfolio",
    "generate_slug",
    "get_content",
    "get_or_create_user",
    "get_portfolio",
    "get_public_portfolio",
    "get_user_by_username",
    "increment_view_count",
    "list_portfolios",
    "publish_portfolio",
    "slug_exists",
    "slugify",
    "store_artifacts",
    "unpublish_portfolio",
    "update_content",
    "update_template",
]

_NON_SLUG_CHARS = re.compile(r"[^a-zA-Z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_SLUG_MAX_LENGTH = 50


def get_user_by_username(session: Session, username: str) -> User | None:
    return session.query(User).filter(User.username == username).first()


def get_or_create_user(session: Session, username: str) -> User:
    """Return the user named *username*, creating the row on first use."""
    user = get_user_by_username(session, username)
    if user is None:
        user = User(username=username)
        session.add(user)
        session.flush()
        logger.info("Created user %s", username)
    return user


def slugify(title: str) -> str:
    """Lower-case, drop non-alphanumerics, hyphenate whitespace, cap at 50 chars."""
    slug = _NON_SLUG_CHARS.sub("", title.lower())
    slug = _WHITESPACE.sub("-", slug)
    return slug[:_SLUG_MAX_LENGTH]


def slug_exists(session: Session, user_id: int, slug: str) -> bool:
    stmt = select(Portfolio.id).where(Portfolio.user_id == user_id, Portfolio.slug == slug)
    return session.execute(stmt).first() is not None


def generate_slug(session: Session, user_id: int, title: str) -> str:
    """Return the first free slug in the ``base``, ``base-1``, ``base-2`` … sequence."""
    base = slugify(title) or "portfolio"
    slug = base
    counter = 1
    while slug_exists(session, user_id, slug):
        slug = f"{base}-{counter}"
        counter += 1
    return slug


def create_portfolio(
    session: Session,
    *,
    user_id: int,
    title: str,
    content: ContentDocument,
    template_id: str,
    meta_description: str | None = None,
) -> Portfolio:
    """Persist a new draft portfolio with a freshly generated slug."""
    portfolio = Portfolio(
        user_id=user_id,
        title=title,
        slug=generate_slug(session, user_id, title),
        status=PortfolioStatus.DRAFT.value,
        template_id=template_id,
        content=dump_content(content),
        meta_title=title,
        meta_description=meta_description,
    )
    session.add(portfolio)
    session.flush()
    return portfolio


def duplicate_portfolio(
    session: Session, portfolio: Portfolio, title: str | None = None
) -> Portfolio:
    """Copy *portfolio* into a new draft owned by the same user.

    The copy gets its own slug and starts private, unviewed and unrendered.
    """
    copy_title = (title or "").strip() or f"{portfolio.title} (Copy)"
    duplicate = Portfolio(
        user_id=portfolio.user_id,
        title=copy_title,
        slug=generate_slug(session, portfolio.user_id, copy_title),
        status=PortfolioStatus.DRAFT.value,
        template_id=portfolio.template_id,
        content=portfolio.content,
        meta_title=copy_title,
        meta_description=portfolio.meta_description,
    )
    session.add(duplicate)
    session.flush()
    logger.info("Duplicated portfolio %s as %s", portfolio.id, duplicate.id)
    return duplicate


def get_portfolio(
    session: Session, portfolio_id: int, user_id: int | None = None
) -> Portfolio | None:
    """Return a portfolio by id, optionally scoped to its owner."""
    query = session.query(Portfolio).filter(Portfolio.id == portfolio_id)
    if user_id is not None:
        query = query.filter(Portfolio.user_id == user_id)
    return query.first()


def get_public_portfolio(session: Session, slug: str) -> Portfolio | None:
    """Return the oldest published, public portfolio with *slug*."""
    return (
        session.query(Portfolio)
        .filter(
            Portfolio.slug == slug,
            Portfolio.status == PortfolioStatus.PUBLISHED.value,
            Portfolio.is_public.is_(True),
        )
        .order_by(Portfolio.id)
        .first()
    )


def list_portfolios(session: Session, user_id: int) -> list[Portfolio]:
    return (
        session.query(Portfolio)
        .filter(Portfolio.user_id == user_id)
        .order_by(Portfolio.updated_at.desc(), Portfolio.id.desc())
        .all()
    )


def get_content(portfolio: Portfolio) -> ContentDocument:
    """Decode the stored content document, filling defaults."""
    return load_content(portfolio.content)


def _clear_artifacts(portfolio: Portfolio) -> None:
    portfolio.generated_html = None
    portfolio.generated_css = None
    portfolio.generated_js = None


def update_content(session: Session, portfolio: Portfolio, content: ContentDocument) -> None:
    """Replace the content document and invalidate the cached artifact."""
    portfolio.content = dump_content(content)
    _clear_artifacts(portfolio)
    session.flush()


def update_template(session: Session, portfolio: Portfolio, template_id: str) -> None:
    """Switch templates and invalidate the cached artifact."""
    if portfolio.template_id != template_id:
        portfolio.template_id = template_id
        _clear_artifacts(portfolio)
        session.flush()


def store_artifacts(
    session: Session,
    portfolio_id: int,
    *,
    content: str,
    template_id: str,
    html: str,
    css: str,
    js: str,
) -> bool:
    """Cache a rendered artifact if the portfolio still holds the rendered inputs.

    *content* is the serialised document the artifact was rendered from. The
    write is skipped (and ``False`` returned) when the content or template
    changed in the meantime.
    """
    stmt = (
        update(Portfolio)
        .where(
            Portfolio.id == portfolio_id,
            Portfolio.content == content,
            Portfolio.template_id == template_id,
        )
        .values(
            generated_html=html,
            generated_css=css,
            generated_js=js,
            updated_at=Portfolio.updated_at,
        )
        .execution_options(synchronize_session=False)
    )
    stored = session.execute(stmt).rowcount == 1
    if not stored:
        logger.info("Portfolio %s changed while rendering; artifact not cached", portfolio_id)
    return stored


def publish_portfolio(session: Session, portfolio: Portfolio) -> None:
    portfolio.status = PortfolioStatus.PUBLISHED.value
    portfolio.is_public = True
    portfolio.published_at = datetime.now(UTC)
    session.flush()


def unpublish_portfolio(session: Session, portfolio: Portfolio) -> None:
    portfolio.status = PortfolioStatus.DRAFT.value
    portfolio.is_public = False
    session.flush()


def archive_portfolio(session: Session, portfolio: Portfolio) -> None:
    portfolio.status = PortfolioStatus.ARCHIVED.value
    portfolio.is_public = False
    session.flush()


def delete_portfolio(session: Session, portfolio: Portfolio) -> None:
    """Delete a portfolio; its iterations are removed by cascade."""
    session.delete(portfolio)
    session.flush()


def increment_view_count(session: Session, portfolio_id: int) -> None:
    stmt = (
        update(Portfolio)
        .where(Portfolio.id == portfolio_id)
        .values(view_count=Portfolio.view_count + 1, updated_at=Portfolio.updated_at)
        .execution_options(synchronize_session=False)
    )
    session.execute(stmt)
