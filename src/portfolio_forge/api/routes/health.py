"""Liveness endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from portfolio_forge import __version__

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check() -> dict[str, str]:
    """Report that the portfolio service is up and which version is running."""
    return {"status": "healthy", "service": "portfolio-forge", "version": __version__}
