"""Abstract base class for pluggable portfolio templates.

A template supplies a Jinja2 body fragment plus static CSS and JS. Bodies
are compiled once, against the shared environment built by
:func:`build_environment`, when the registry is constructed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date, datetime
from types import MappingProxyType
from typing import Any

from jinja2 import Environment, Template

__all__ = ["PortfolioTemplate", "build_environment", "date_range", "ensure_http", "format_date"]

_MONTH_NAMES = [
    "",
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]


def ensure_http(url: str | None) -> str:
    """Prefix bare hosts with ``https://``."""
    if not url:
        return ""
    if url.startswith(("http://", "https://", "mailto:")):
        return url
    return f"https://{url}"


def _parse_date(value: str) -> date | None:
    for fmt in ("%Y-%m-%d", "%Y-%m", "%Y"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def format_date(value: str | None, fmt: str | None = None) -> str:
    """Format ISO-ish dates (``YYYY``, ``YYYY-MM``, ``YYYY-MM-DD``).

    ``fmt`` is ``"year"`` or ``"month-year"``; anything unparseable is
    returned as written so free-form dates like ``"Present"`` survive.
    """
    if not value:
        return ""
    parsed = _parse_date(value.strip())
    if parsed is None:
        return value
    if fmt == "year":
        return str(parsed.year)
    if fmt == "month-year" and len(value.strip()) > 4:
        return f"{_MONTH_NAMES[parsed.month]} {parsed.year}"
    return value.strip()


def date_range(start: str | None, end: str | None, current: bool = False) -> str:
    """Return ``"March 2020 - Present"`` style ranges."""
    start_str = format_date(start, "month-year")
    end_str = "Present" if current else format_date(end, "month-year")
    if start_str and end_str:
        return f"{start_str} - {end_str}"
    return start_str or end_str


def build_environment() -> Environment:
    """Return the Jinja2 environment every template body is compiled in."""
    env = Environment(autoescape=True, trim_blocks=True, lstrip_blocks=True)
    env.filters["ensure_http"] = ensure_http
    env.filters["format_date"] = format_date
    env.globals["date_range"] = date_range
    return env


class PortfolioTemplate(ABC):
    """Interface that every portfolio template must implement."""

    description: str = ""
    features: tuple[str, ...] = ()
    is_premium: bool = False
    stylesheets: tuple[str, ...] = ()

    @property
    @abstractmethod
    def template_id(self) -> str:
        """Stable id used in URLs and persisted on portfolios."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable template name shown in the UI."""

    @property
    @abstractmethod
    def body(self) -> str:
        """Jinja2 source for the ``<body>`` fragment."""

    @property
    @abstractmethod
    def css(self) -> str:
        """Static stylesheet."""

    @property
    def js(self) -> str:
        """Static script; empty by default."""
        return ""

    @property
    def config(self) -> MappingProxyType[str, Any]:
        """Default colour scheme and the toggles a user may customise."""
        return MappingProxyType({})

    def compile(self, env: Environment) -> Template:
        return env.from_string(self.body)

    def summary(self) -> dict[str, Any]:
        return {
            "id": self.template_id,
            "name": self.name,
            "description": self.description,
            "features": list(self.features),
            "is_premium": self.is_premium,
        }
