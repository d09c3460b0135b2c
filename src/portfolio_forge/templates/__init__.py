"""Template registry for portfolio rendering."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from types import MappingProxyType
from typing import Any

from jinja2 import Environment, Template

from portfolio_forge.errors import TemplateNotFoundError
from portfolio_forge.templates.base import PortfolioTemplate, build_environment
from portfolio_forge.templates.creative import CreativeTemplate
from portfolio_forge.templates.minimal import MinimalTemplate
from portfolio_forge.templates.modern_dev import ModernDevTemplate

__all__ = [
    "PortfolioTemplate",
    "TemplateRegistry",
    "build_default_registry",
]


class TemplateRegistry:
    """Read-only set of templates, compiled once at construction.

    Instances are built at startup and handed to whoever renders; nothing
    can be added or replaced afterwards.
    """

    def __init__(
        self,
        templates: Iterable[PortfolioTemplate],
        env: Environment | None = None,
    ) -> None:
        self.env = env or build_environment()
        by_id: dict[str, PortfolioTemplate] = {}
        compiled: dict[str, Template] = {}
        for template in templates:
            if template.template_id in by_id:
                raise ValueError(f"Duplicate template id {template.template_id!r}")
            by_id[template.template_id] = template
            compiled[template.template_id] = template.compile(self.env)
        self._templates = MappingProxyType(by_id)
        self._compiled = MappingProxyType(compiled)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._templates))

    def __len__(self) -> int:
        return len(self._templates)

    def get(self, template_id: str) -> PortfolioTemplate:
        """Return the template registered under *template_id*.

        Raises:
            TemplateNotFoundError: If no template with that id exists.
        """
        try:
            return self._templates[template_id]
        except KeyError:
            raise TemplateNotFoundError(template_id, sorted(self._templates)) from None

    def compiled(self, template_id: str) -> Template:
        self.get(template_id)
        return self._compiled[template_id]

    def list_templates(self) -> list[dict[str, Any]]:
        """Return ``{id, name, description, features, is_premium}`` for every template."""
        return [self._templates[template_id].summary() for template_id in self]


def build_default_registry() -> TemplateRegistry:
    """Build the registry of bundled templates."""
    return TemplateRegistry([ModernDevTemplate(), MinimalTemplate(), CreativeTemplate()])
