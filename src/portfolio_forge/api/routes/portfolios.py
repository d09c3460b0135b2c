"""Portfolio management routes for the API."""

from __future__ import annotations

import json
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from portfolio_forge.api.dependencies import CurrentUser, get_render_service, raise_for_error
from portfolio_forge.api.schemas.portfolios import (
    ContentUpdateRequest,
    DuplicateRequest,
    IterationResponse,
    IterationStatsResponse,
    PortfolioDetailResponse,
    PortfolioResponse,
)
from portfolio_forge.data.crud import iteration_repo, portfolio_repo
from portfolio_forge.data.db import get_session
from portfolio_forge.data.models import Portfolio, PortfolioIteration
from portfolio_forge.services.artifact_cache import PortfolioRenderService

router = APIRouter(prefix="/portfolios", tags=["portfolios"])


def _not_found(portfolio_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Portfolio {portfolio_id} not found.",
    )


def _detail(portfolio: Portfolio) -> PortfolioDetailResponse:
    base = PortfolioResponse.model_validate(portfolio).model_dump()
    return PortfolioDetailResponse(
        **base,
        content=portfolio_repo.get_content(portfolio).to_dict(),
        has_rendered_artifact=portfolio.generated_html is not None,
    )


def _decode(raw: str | None) -> dict | None:
    if not raw:
        return None
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return decoded if isinstance(decoded, dict) else None


def _iteration(iteration: PortfolioIteration) -> IterationResponse:
    return IterationResponse(
        id=iteration.id,
        portfolio_id=iteration.portfolio_id,
        prompt=iteration.prompt,
        iteration_type=iteration.iteration_type,
        status=iteration.status,
        previous_content=_decode(iteration.previous_content),
        changes_made=_decode(iteration.changes_made),
        ai_model_used=iteration.ai_model_used,
        tokens_used=iteration.tokens_used,
        processing_time_ms=iteration.processing_time_ms,
        error_message=iteration.error_message,
        created_at=iteration.created_at,
        completed_at=iteration.completed_at,
    )


@router.get("", response_model=list[PortfolioResponse], summary="List my portfolios")
def list_portfolios(user: CurrentUser) -> list[PortfolioResponse]:
    with get_session() as session:
        return [
            PortfolioResponse.model_validate(p)
            for p in portfolio_repo.list_portfolios(session, user.id)
        ]


@router.get("/{portfolio_id}", response_model=PortfolioDetailResponse, summary="Get a portfolio")
def get_portfolio(portfolio_id: int, user: CurrentUser) -> PortfolioDetailResponse:
    with get_session() as session:
        portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user.id)
        if portfolio is None:
            raise _not_found(portfolio_id)
        return _detail(portfolio)


@router.put(
    "/{portfolio_id}/content",
    response_model=PortfolioDetailResponse,
    summary="Replace portfolio content",
    description="Replace the content document. Missing sections are filled with empty defaults.",
)
def update_content(
    portfolio_id: int,
    request: ContentUpdateRequest,
    user: CurrentUser,
    service: Annotated[PortfolioRenderService, Depends(get_render_service)],
) -> PortfolioDetailResponse:
    result = service.replace_content(portfolio_id, request.content, user_id=user.id)
    if not result.ok:
        raise_for_error(result.error)
    return get_portfolio(portfolio_id, user)


@router.delete(
    "/{portfolio_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a portfolio",
    description="Delete a portfolio together with its iteration history.",
)
def delete_portfolio(portfolio_id: int, user: CurrentUser) -> Response:
    with get_session() as session:
        portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user.id)
        if portfolio is None:
            raise _not_found(portfolio_id)
        portfolio_repo.delete_portfolio(session, portfolio)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{portfolio_id}/publish", response_model=PortfolioResponse, summary="Publish")
def publish_portfolio(portfolio_id: int, user: CurrentUser) -> PortfolioResponse:
    with get_session() as session:
        portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user.id)
        if portfolio is None:
            raise _not_found(portfolio_id)
        portfolio_repo.publish_portfolio(session, portfolio)
        return PortfolioResponse.model_validate(portfolio)


@router.post("/{portfolio_id}/unpublish", response_model=PortfolioResponse, summary="Unpublish")
def unpublish_portfolio(portfolio_id: int, user: CurrentUser) -> PortfolioResponse:
    with get_session() as session:
        portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user.id)
        if portfolio is None:
            raise _not_found(portfolio_id)
        portfolio_repo.unpublish_portfolio(session, portfolio)
        return PortfolioResponse.model_validate(portfolio)


@router.post("/{portfolio_id}/archive", response_model=PortfolioResponse, summary="Archive")
def archive_portfolio(portfolio_id: int, user: CurrentUser) -> PortfolioResponse:
    with get_session() as session:
        portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user.id)
        if portfolio is None:
            raise _not_found(portfolio_id)
        portfolio_repo.archive_portfolio(session, portfolio)
        return PortfolioResponse.model_validate(portfolio)


@router.post(
    "/{portfolio_id}/duplicate",
    response_model=PortfolioResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate a portfolio",
    description="Copy the content and template into a new private draft.",
)
def duplicate_portfolio(
    portfolio_id: int, user: CurrentUser, request: DuplicateRequest | None = None
) -> PortfolioResponse:
    with get_session() as session:
        portfolio = portfolio_repo.get_portfolio(session, portfolio_id, user.id)
        if portfolio is None:
            raise _not_found(portfolio_id)
        duplicate = portfolio_repo.duplicate_portfolio(
            session, portfolio, request.title if request else None
        )
        return PortfolioResponse.model_validate(duplicate)


@router.get(
    "/{portfolio_id}/iterations",
    response_model=list[IterationResponse],
    summary="Iteration history",
    description=(
        "Latest generation/enhancement attempts, newest first. previous_content holds the "
        "document as it was before each attempt; it is never restored automatically."
    ),
)
def list_iterations(
    portfolio_id: int,
    user: CurrentUser,
    limit: int = Query(20, ge=1, le=100),
) -> list[IterationResponse]:
    with get_session() as session:
        if portfolio_repo.get_portfolio(session, portfolio_id, user.id) is None:
            raise _not_found(portfolio_id)
        iterations = iteration_repo.list_iterations(session, portfolio_id, limit)
        return [_iteration(it) for it in iterations]


@router.get(
    "/{portfolio_id}/iterations/stats",
    response_model=IterationStatsResponse,
    summary="Iteration statistics",
)
def get_iteration_stats(portfolio_id: int, user: CurrentUser) -> IterationStatsResponse:
    with get_session() as session:
        if portfolio_repo.get_portfolio(session, portfolio_id, user.id) is None:
            raise _not_found(portfolio_id)
        return IterationStatsResponse.model_validate(
            iteration_repo.iteration_stats(session, portfolio_id)
        )
