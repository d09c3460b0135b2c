"""Shared Pydantic schemas for API responses."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from portfolio_forge.errors import ServiceError


class WarningResponse(BaseModel):
    """Non-fatal condition attached to a successful response."""

    kind: str = Field(description="Error kind, e.g. parse_degraded")
    message: str


def warnings_from(errors: Iterable[ServiceError]) -> list[WarningResponse]:
    return [WarningResponse(kind=e.kind.value, message=e.message) for e in errors]
