"""Tests for portfolio templates, the registry and shared Jinja helpers."""

import pytest

from portfolio_forge.errors import TemplateNotFoundError
from portfolio_forge.templates import TemplateRegistry, build_default_registry
from portfolio_forge.templates.base import (
    PortfolioTemplate,
    build_environment,
    date_range,
    ensure_http,
    format_date,
)
from portfolio_forge.templates.minimal import MinimalTemplate

# ======================================================================
# Base helpers
# ======================================================================


class TestEnsureHttp:
    def test_bare_host_gets_https(self):
        assert ensure_http("github.com/ada") == "https://github.com/ada"

    def test_existing_scheme_kept(self):
        assert ensure_http("http://example.com") == "http://example.com"
        assert ensure_http("mailto:ada@example.com") == "mailto:ada@example.com"

    def test_empty(self):
        assert ensure_http(None) == ""
        assert ensure_http("") == ""


class TestFormatDate:
    def test_year(self):
        assert format_date("2021-06-15", "year") == "2021"

    def test_month_year(self):
        assert format_date("2021-06", "month-year") == "June 2021"

    def test_bare_year_stays_year(self):
        assert format_date("2021", "month-year") == "2021"

    def test_free_form_passthrough(self):
        assert format_date("Summer 2019", "month-year") == "Summer 2019"

    def test_empty(self):
        assert format_date(None) == ""


class TestDateRange:
    def test_current_role(self):
        assert date_range("2020-03", None, current=True) == "March 2020 - Present"

    def test_closed_range(self):
        assert date_range("2018-01", "2019-12") == "January 2018 - December 2019"

    def test_only_start(self):
        assert date_range("2018", "") == "2018"


def test_environment_registers_helpers():
    env = build_environment()

    assert env.autoescape is True
    assert "ensure_http" in env.filters
    assert "date_range" in env.globals


# ======================================================================
# Registry
# ======================================================================


class TestRegistry:
    def test_default_templates(self):
        registry = build_default_registry()

        assert list(registry) == ["creative", "minimal", "modern-dev"]
        assert len(registry) == 3
        assert "minimal" in registry
        assert "glitter" not in registry

    def test_unknown_template_lists_available(self):
        registry = build_default_registry()

        with pytest.raises(TemplateNotFoundError, match="Available: creative, minimal, modern-dev"):
            registry.get("glitter")

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate template id 'minimal'"):
            TemplateRegistry([MinimalTemplate(), MinimalTemplate()])

    def test_list_templates(self):
        summaries = {t["id"]: t for t in build_default_registry().list_templates()}

        assert summaries["creative"]["is_premium"] is True
        assert summaries["minimal"]["is_premium"] is False
        assert "no-javascript" in summaries["minimal"]["features"]
        assert set(summaries["modern-dev"]) == {
            "id",
            "name",
            "description",
            "features",
            "is_premium",
        }

    def test_custom_template_can_be_registered(self):
        class Plain(PortfolioTemplate):
            template_id = "plain"
            name = "Plain"
            body = "<h1>{{ hero.name }}</h1>"
            css = "h1 { margin: 0; }"

        registry = TemplateRegistry([Plain()])

        assert registry.compiled("plain").render(hero={"name": "Ada"}) == "<h1>Ada</h1>"
        assert registry.get("plain").js == ""


# ======================================================================
# Bundled templates
# ======================================================================


@pytest.mark.parametrize("template_id", ["creative", "minimal", "modern-dev"])
class TestBundledTemplates:
    def test_has_css_and_name(self, template_id):
        template = build_default_registry().get(template_id)

        assert template.name
        assert template.css.strip()
        assert template.template_id == template_id

    def test_config_is_read_only(self, template_id):
        template = build_default_registry().get(template_id)

        with pytest.raises(TypeError):
            template.config["colors"] = {}
