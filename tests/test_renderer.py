from __future__ import annotations

import pytest

from portfolio_forge.errors import RenderError, TemplateNotFoundError
from portfolio_forge.services.content_schema import ContentDocument, coerce_document
from portfolio_forge.services.renderer import (
    TemplateRenderer,
    page_description,
    page_title,
)
from portfolio_forge.services.response_parser import parse_document
from portfolio_forge.templates import PortfolioTemplate, TemplateRegistry, build_default_registry

TEMPLATE_IDS = ["creative", "minimal", "modern-dev"]


@pytest.fixture
def renderer() -> TemplateRenderer:
    return TemplateRenderer(build_default_registry())


@pytest.fixture
def document(document_json: str) -> ContentDocument:
    return parse_document(document_json).value


@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_render_is_deterministic(
    renderer: TemplateRenderer, document: ContentDocument, template_id: str
) -> None:
    first = renderer.render(document, template_id)
    second = renderer.render(document, template_id)

    assert first == second
    assert first.html.startswith("<!DOCTYPE html>")
    assert "<title>Ada Lovelace - Portfolio</title>" in first.html
    assert first.css in first.html


@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_empty_sections_are_omitted(renderer: TemplateRenderer, template_id: str) -> None:
    document, _ = coerce_document({"hero": {"name": "Ada"}})

    html = renderer.render(document, template_id).html

    assert 'id="projects"' not in html
    assert 'id="experience"' not in html
    assert 'id="education"' not in html
    assert 'href="#projects"' not in html


@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_present_sections_are_rendered(
    renderer: TemplateRenderer, document: ContentDocument, template_id: str
) -> None:
    html = renderer.render(document, template_id).html

    assert 'id="projects"' in html
    assert 'id="experience"' in html
    assert "Engine" in html


@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_content_is_escaped(renderer: TemplateRenderer, template_id: str) -> None:
    document, _ = coerce_document({"hero": {"name": "<script>alert(1)</script>"}})

    html = renderer.render(document, template_id).html

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html


def test_minimal_renders_links_and_dates(
    renderer: TemplateRenderer, document: ContentDocument
) -> None:
    artifact = renderer.render(document, "minimal")

    assert 'href="https://github.com/ada/engine"' in artifact.html
    assert "January 1842 - Present" in artifact.html
    assert artifact.js == ""
    assert "<script>" not in artifact.html


def test_modern_dev_ships_script(renderer: TemplateRenderer, document: ContentDocument) -> None:
    artifact = renderer.render(document, "modern-dev")

    assert artifact.js
    assert artifact.js in artifact.html


def test_unknown_template(renderer: TemplateRenderer, document: ContentDocument) -> None:
    with pytest.raises(TemplateNotFoundError):
        renderer.render(document, "glitter")


def test_template_failure_becomes_render_error(document: ContentDocument) -> None:
    class Broken(PortfolioTemplate):
        template_id = "broken"
        name = "Broken"
        body = "{{ hero.name.upper(1, 2, 3) }}"
        css = ""

    renderer = TemplateRenderer(TemplateRegistry([Broken()]))

    with pytest.raises(RenderError, match="broken"):
        renderer.render(document, "broken")


def test_template_data_flags(renderer: TemplateRenderer) -> None:
    document, _ = coerce_document({"projects": [{"title": "A"}]})

    data = renderer.template_data(document, "modern-dev")

    assert data["has_projects"] is True
    assert data["has_experience"] is False
    assert data["template_config"]["colors"]["primary"] == "#6366f1"
    assert data["contact"]["email"] == ""


def test_page_title_and_description() -> None:
    named, _ = coerce_document({"hero": {"name": "Ada"}, "about": {"description": "About me"}})
    anonymous, _ = coerce_document({})

    assert page_title(named) == "Ada - Portfolio"
    assert page_title(anonymous) == "Portfolio"
    assert page_description(named) == "About me"
    assert page_description(anonymous) == "Professional Portfolio"


def test_customize_css(renderer: TemplateRenderer) -> None:
    css = renderer.customize_css(
        "minimal",
        {
            "colors": {"primary": "#ff0000"},
            "fonts": {"primary": "Inter", "heading": "Lora"},
            "custom_css": ".hero { padding: 0; }",
        },
    )

    assert ":root {\n  --primary: #ff0000;\n}" in css
    assert "body { font-family: 'Inter', sans-serif; }" in css
    assert "h1, h2, h3, h4, h5, h6 { font-family: 'Lora', sans-serif; }" in css
    assert css.endswith(".hero { padding: 0; }")
    assert renderer.customize_css("minimal", {}) == ""


def test_customize_css_unknown_template(renderer: TemplateRenderer) -> None:
    with pytest.raises(TemplateNotFoundError):
        renderer.customize_css("glitter", {"colors": {"primary": "#000"}})


def test_preview_metadata(document: ContentDocument) -> None:
    metadata = TemplateRenderer.preview_metadata(document, title="Ada - Engineer", slug="ada")

    assert metadata["title"] == "Ada Lovelace - Portfolio"
    assert metadata["description"] == "Builds analytical engines"
    assert metadata["author"] == "Ada Lovelace"
    assert metadata["image"] is None
    assert metadata["keywords"] == ["Python", "Math", "Engine"]
    assert metadata["portfolio_data"] == {
        "projects_count": 1,
        "skills_count": 2,
        "experience_count": 1,
        "has_contact": True,
    }
