"""Render content documents into self-contained HTML pages.

:class:`TemplateRenderer` is a pure function of ``(document, template_id)``:
no clock, no network, no persistence. The same inputs always produce
byte-identical output, which the artifact cache relies on.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jinja2 import TemplateError

from portfolio_forge.errors import RenderError
from portfolio_forge.services.content_schema import ContentDocument
from portfolio_forge.templates import TemplateRegistry

logger = logging.getLogger(__name__)

__all__ = ["RenderedArtifact", "TemplateRenderer", "page_description", "page_title"]

_DEFAULT_DESCRIPTION = "Professional Portfolio"

_DOCUMENT = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{{ title }}</title>
<meta name="description" content="{{ description }}">
<meta name="author" content="{{ author }}">
<meta property="og:title" content="{{ title }}">
<meta property="og:description" content="{{ description }}">
<meta property="og:type" content="website">
{% if image %}
<meta property="og:image" content="{{ image }}">
{% endif %}
{% for href in stylesheets %}
<link rel="stylesheet" href="{{ href }}">
{% endfor %}
<style>
{{ css | safe }}
</style>
</head>
<body>
{{ body | safe }}
{% if js %}
<script>
{{ js | safe }}
</script>
{% endif %}
</body>
</html>
"""


@dataclass(frozen=True)
class RenderedArtifact:
    """The cached triple: a complete HTML page plus its CSS and JS."""

    html: str
    css: str
    js: str

    def to_dict(self) -> dict[str, str]:
        return {"html": self.html, "css": self.css, "js": self.js}


def page_title(document: ContentDocument, fallback: str = "Portfolio") -> str:
    name = document.hero.name.strip()
    return f"{name} - Portfolio" if name else fallback


def page_description(document: ContentDocument) -> str:
    return document.hero.bio.strip() or document.about.description.strip() or _DEFAULT_DESCRIPTION


class TemplateRenderer:
    """Fill registered templates with content documents.

    Args:
        registry: Immutable template registry built at startup.
    """

    def __init__(self, registry: TemplateRegistry) -> None:
        self.registry = registry
        self._document = registry.env.from_string(_DOCUMENT)

    def template_data(self, document: ContentDocument, template_id: str) -> dict[str, Any]:
        """Return the full template context: every section plus presence flags."""
        template = self.registry.get(template_id)
        data = document.to_dict()
        data.update(
            template_config=dict(template.config),
            has_projects=bool(document.projects),
            has_experience=bool(document.experience),
            has_education=bool(document.education),
        )
        return data

    def render(self, document: ContentDocument, template_id: str) -> RenderedArtifact:
        """Render *document* through *template_id*.

        Raises:
            TemplateNotFoundError: *template_id* is not registered.
            RenderError: The template raised while being filled.
        """
        template = self.registry.get(template_id)
        data = self.template_data(document, template_id)
        try:
            body = self.registry.compiled(template_id).render(data)
            html = self._document.render(
                title=page_title(document),
                description=page_description(document),
                author=document.hero.name,
                image=document.hero.image,
                stylesheets=template.stylesheets,
                css=template.css,
                js=template.js,
                body=body,
            )
        except (TemplateError, TypeError, ValueError) as e:
            logger.exception("Template %s failed to render", template_id)
            raise RenderError(f"Template {template_id!r} failed to render: {e}") from e
        return RenderedArtifact(html=html, css=template.css, js=template.js)

    def customize_css(self, template_id: str, customizations: Mapping[str, Any]) -> str:
        """Build override CSS from ``colors``, ``fonts`` and ``custom_css``.

        Raises:
            TemplateNotFoundError: *template_id* is not registered.
        """
        self.registry.get(template_id)
        parts: list[str] = []

        colors = customizations.get("colors") or {}
        if colors:
            lines = [f"  --{key}: {value};" for key, value in colors.items()]
            parts.append(":root {\n" + "\n".join(lines) + "\n}\n")

        fonts = customizations.get("fonts") or {}
        if fonts.get("primary"):
            parts.append(f"body {{ font-family: '{fonts['primary']}', sans-serif; }}\n")
        if fonts.get("heading"):
            parts.append(
                f"h1, h2, h3, h4, h5, h6 {{ font-family: '{fonts['heading']}', sans-serif; }}\n"
            )

        if customizations.get("custom_css"):
            parts.append(str(customizations["custom_css"]))

        return "\n".join(parts)

    @staticmethod
    def preview_metadata(document: ContentDocument, *, title: str, slug: str) -> dict[str, Any]:
        """Sharing/SEO metadata for a stored portfolio."""
        keywords = [*document.about.skills, *(p.title for p in document.projects if p.title)]
        return {
            "title": page_title(document, fallback=title),
            "description": page_description(document),
            "image": document.hero.image or None,
            "url": f"/api/preview/public/{slug}",
            "author": document.hero.name,
            "keywords": keywords[:10],
            "type": "website",
            "portfolio_data": {
                "projects_count": len(document.projects),
                "skills_count": len(document.about.skills),
                "experience_count": len(document.experience),
                "has_contact": bool(document.contact.email),
            },
        }
