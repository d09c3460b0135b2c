"""ORM model for the append-only log of generation/enhancement attempts.

A row is created ``pending`` at the start of every orchestrator run and
moved exactly once to ``completed`` or ``failed``. ``portfolio_id`` stays
NULL until a generation has produced its portfolio, and for standalone
tasks (bio, project descriptions) that never touch one. ``user_id`` records
who spent the tokens.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from portfolio_forge.data.db import Base

if TYPE_CHECKING:
    from portfolio_forge.data.models.portfolio import Portfolio


class IterationType(StrEnum):
    GENERATE = "generate"
    ENHANCE = "enhance"
    FIX = "fix"
    CUSTOM = "custom"
    BIO = "bio"
    PROJECTS = "projects"


class IterationStatus(StrEnum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PortfolioIteration(Base):
    """One generation or enhancement attempt.

    Attributes:
        portfolio_id: Owning portfolio (NULL while a generation is in flight).
        user_id: User who started the attempt.
        prompt: Prompt or source summary that drove the attempt.
        iteration_type: One of :class:`IterationType`.
        status: One of :class:`IterationStatus`.
        previous_content: JSON snapshot of the content before the attempt.
        changes_made: JSON summary of what the attempt changed.
        ai_model_used: Model that produced the accepted output.
        tokens_used: Tokens reported by the model.
        processing_time_ms: Wall-clock duration of the attempt.
        error_message: Failure reason for ``failed`` attempts.
    """

    __tablename__ = "portfolio_iterations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    portfolio_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("portfolios.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    iteration_type: Mapped[str] = mapped_column(
        String(16), nullable=False, default=IterationType.ENHANCE.value
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=IterationStatus.PENDING.value, index=True
    )
    previous_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    changes_made: Mapped[str | None] = mapped_column(Text, nullable=True)
    ai_model_used: Mapped[str | None] = mapped_column(String(64), nullable=True)
    tokens_used: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processing_time_ms: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
        index=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    portfolio: Mapped[Portfolio | None] = relationship("Portfolio", back_populates="iterations")
