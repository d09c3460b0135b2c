"""ORM model for a generated portfolio.

``content`` holds the JSON-serialised content document. It is only ever
decoded/encoded by :mod:`portfolio_forge.data.crud.portfolio_repo`; the rest
of the code base works with :class:`~portfolio_forge.services.content_schema.ContentDocument`.

``generated_html``/``generated_css``/``generated_js`` form the cached
rendered artifact. They are written together and cleared together.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio_forge.data.db import Base

if TYPE_CHECKING:
    from portfolio_forge.data.models.portfolio_iteration import PortfolioIteration
    from portfolio_forge.data.models.user import User


class PortfolioStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


class Portfolio(Base):
    """Aggregate root for one user's generated portfolio."""

    __tablename__ = "portfolios"
    __table_args__ = (UniqueConstraint("user_id", "slug", name="uq_portfolios_user_slug"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=PortfolioStatus.DRAFT.value, index=True
    )
    template_id: Mapped[str] = mapped_column(String(64), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="{}")

    generated_html: Mapped[str | None] = mapped_column(Text, nullable=True)
    generated_css: Mapped[str | None] = mapped_column(Text, nullable=True)
    generated_js: Mapped[str | None] = mapped_column(Text, nullable=True)

    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    meta_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
    )

    user: Mapped[User] = relationship("User", back_populates="portfolios")
    iterations: Mapped[list[PortfolioIteration]] = relationship(
        "PortfolioIteration",
        back_populates="portfolio",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
