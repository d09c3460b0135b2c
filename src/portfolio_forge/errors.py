"""Error taxonomy and the tagged result returned across the core boundary.

Services raise the exceptions below internally. The public entry points
(generation, enhancement, rendering) catch them and hand a :class:`Result`
to the HTTP layer, which maps :class:`ErrorKind` onto status codes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Generic, TypeVar

__all__ = [
    "ErrorKind",
    "ExternalServiceError",
    "NotFoundError",
    "PortfolioForgeError",
    "RenderError",
    "Result",
    "ServiceError",
    "TemplateNotFoundError",
    "ValidationError",
]

T = TypeVar("T")


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    EXTERNAL_SERVICE = "external_service"
    PARSE_DEGRADED = "parse_degraded"
    RENDER = "render"
    TEMPLATE_NOT_FOUND = "template_not_found"


class PortfolioForgeError(Exception):
    """Base class for errors raised inside the generation/render core."""

    kind: ErrorKind = ErrorKind.VALIDATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_service_error(self) -> ServiceError:
        return ServiceError(kind=self.kind, message=self.message)


class ValidationError(PortfolioForgeError):
    """Malformed caller input, rejected before any external call."""

    kind = ErrorKind.VALIDATION


class NotFoundError(PortfolioForgeError):
    """A referenced portfolio or user does not exist."""

    kind = ErrorKind.NOT_FOUND


class ExternalServiceError(PortfolioForgeError):
    """A collaborator (model, GitHub, extractor) failed after retries.

    Attributes:
        service: Identity of the failing collaborator, e.g. ``"llm"``.
    """

    kind = ErrorKind.EXTERNAL_SERVICE

    def __init__(self, message: str, *, service: str) -> None:
        super().__init__(message)
        self.service = service

    def to_service_error(self) -> ServiceError:
        return ServiceError(kind=self.kind, message=self.message, service=self.service)


class RenderError(PortfolioForgeError):
    """A template failed while being filled."""

    kind = ErrorKind.RENDER


class TemplateNotFoundError(RenderError):
    """No template is registered under the requested id."""

    kind = ErrorKind.TEMPLATE_NOT_FOUND

    def __init__(self, template_id: str, available: list[str] | None = None) -> None:
        message = f"Template {template_id!r} not found"
        if available:
            message += f". Available: {', '.join(available)}"
        super().__init__(message)
        self.template_id = template_id


@dataclass(frozen=True)
class ServiceError:
    """Distinguishable error kind plus a human-readable message."""

    kind: ErrorKind
    message: str
    service: str | None = None


@dataclass(frozen=True)
class Result(Generic[T]):
    """Tagged success/failure value.

    ``warnings`` carries non-fatal conditions (e.g. a degraded model parse)
    on an otherwise successful result.
    """

    value: T | None = None
    error: ServiceError | None = None
    warnings: tuple[ServiceError, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T, warnings: list[ServiceError] | None = None) -> Result[T]:
        return cls(value=value, warnings=tuple(warnings or ()))

    @classmethod
    def failure(cls, error: ServiceError | PortfolioForgeError) -> Result[T]:
        if isinstance(error, PortfolioForgeError):
            error = error.to_service_error()
        return cls(error=error)
