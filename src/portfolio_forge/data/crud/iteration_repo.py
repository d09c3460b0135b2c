"""Append-only bookkeeping for generation and enhancement attempts.

Iterations move from ``pending`` to ``completed`` or ``failed`` exactly
once. The terminal update is a conditional ``UPDATE ... WHERE status =
'pending'`` so two writers can never both terminate the same row.
"""

from __future__ import annotations

import json
from collections import Counter
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from portfolio_forge.data.models import (
    IterationStatus,
    IterationType,
    Portfolio,
    PortfolioIteration,
)

__all__ = [
    "IterationStateError",
    "create_iteration",
    "iteration_stats",
    "list_iterations",
    "mark_completed",
    "mark_failed",
    "usage_summary",
]


class IterationStateError(RuntimeError):
    """Raised when an iteration is asked to leave a terminal state."""


def create_iteration(
    session: Session,
    *,
    prompt: str,
    iteration_type: IterationType,
    portfolio_id: int | None = None,
    user_id: int | None = None,
    previous_content: str | None = None,
) -> PortfolioIteration:
    iteration = PortfolioIteration(
        portfolio_id=portfolio_id,
        user_id=user_id,
        prompt=prompt,
        iteration_type=iteration_type.value,
        status=IterationStatus.PENDING.value,
        previous_content=previous_content,
    )
    session.add(iteration)
    session.flush()
    return iteration


def _terminate(session: Session, iteration_id: int, values: dict[str, Any]) -> None:
    stmt = (
        update(PortfolioIteration)
        .where(
            PortfolioIteration.id == iteration_id,
            PortfolioIteration.status == IterationStatus.PENDING.value,
        )
        .values(completed_at=datetime.now(UTC), **values)
        .execution_options(synchronize_session=False)
    )
    if session.execute(stmt).rowcount != 1:
        current = session.get(PortfolioIteration, iteration_id)
        state = current.status if current is not None else "missing"
        msg = f"Iteration {iteration_id} is {state}; only pending iterations can be terminated"
        raise IterationStateError(msg)


def mark_completed(
    session: Session,
    iteration_id: int,
    *,
    portfolio_id: int | None = None,
    tokens_used: int = 0,
    processing_time_ms: int = 0,
    ai_model_used: str | None = None,
    changes_made: dict[str, Any] | None = None,
) -> None:
    """Move a pending iteration to ``completed`` with its usage metrics."""
    values: dict[str, Any] = {
        "status": IterationStatus.COMPLETED.value,
        "tokens_used": tokens_used,
        "processing_time_ms": processing_time_ms,
        "ai_model_used": ai_model_used,
        "changes_made": json.dumps(changes_made, sort_keys=True) if changes_made else None,
    }
    if portfolio_id is not None:
        values["portfolio_id"] = portfolio_id
    _terminate(session, iteration_id, values)


def mark_failed(
    session: Session,
    iteration_id: int,
    error_message: str,
    *,
    processing_time_ms: int = 0,
) -> None:
    """Move a pending iteration to ``failed``."""
    _terminate(
        session,
        iteration_id,
        {
            "status": IterationStatus.FAILED.value,
            "error_message": error_message,
            "processing_time_ms": processing_time_ms,
        },
    )


def list_iterations(
    session: Session, portfolio_id: int, limit: int = 20
) -> list[PortfolioIteration]:
    """Return the latest iterations for a portfolio, newest first."""
    return (
        session.query(PortfolioIteration)
        .filter(PortfolioIteration.portfolio_id == portfolio_id)
        .order_by(PortfolioIteration.created_at.desc(), PortfolioIteration.id.desc())
        .limit(limit)
        .all()
    )


def iteration_stats(session: Session, portfolio_id: int) -> dict[str, Any]:
    """Summarise attempt counts, token usage and timing for a portfolio."""
    iterations = (
        session.query(PortfolioIteration)
        .filter(PortfolioIteration.portfolio_id == portfolio_id)
        .all()
    )
    statuses = Counter(it.status for it in iterations)
    completed = [it for it in iterations if it.status == IterationStatus.COMPLETED.value]
    average_ms = (
        round(sum(it.processing_time_ms for it in completed) / len(completed))
        if completed
        else 0
    )
    return {
        "total_iterations": len(iterations),
        "completed_iterations": statuses[IterationStatus.COMPLETED.value],
        "failed_iterations": statuses[IterationStatus.FAILED.value],
        "pending_iterations": statuses[IterationStatus.PENDING.value],
        "total_tokens_used": sum(it.tokens_used for it in iterations),
        "average_processing_time_ms": average_ms,
        "iteration_types": dict(Counter(it.iteration_type for it in iterations)),
    }


def _month_start(now: datetime) -> datetime:
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands timestamps back without tzinfo.
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


def usage_summary(session: Session, user_id: int, now: datetime | None = None) -> dict[str, Any]:
    """Summarise a user's model usage across all portfolios and standalone tasks.

    An attempt counts for the user when they started it or when it belongs
    to one of their portfolios.
    """
    owned = select(Portfolio.id).where(Portfolio.user_id == user_id)
    iterations = (
        session.query(PortfolioIteration)
        .filter(
            or_(
                PortfolioIteration.user_id == user_id,
                PortfolioIteration.portfolio_id.in_(owned),
            )
        )
        .all()
    )
    month_start = _month_start(_as_utc(now or datetime.now(UTC)))
    monthly = [it for it in iterations if _as_utc(it.created_at) >= month_start]
    statuses = Counter(it.status for it in iterations)
    return {
        "total_iterations": len(iterations),
        "successful_iterations": statuses[IterationStatus.COMPLETED.value],
        "failed_iterations": statuses[IterationStatus.FAILED.value],
        "pending_iterations": statuses[IterationStatus.PENDING.value],
        "total_tokens_used": sum(it.tokens_used for it in iterations),
        "monthly_iterations": len(monthly),
        "monthly_tokens_used": sum(it.tokens_used for it in monthly),
        "iteration_types": dict(Counter(it.iteration_type for it in iterations)),
    }
