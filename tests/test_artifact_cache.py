from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from portfolio_forge.data.crud import portfolio_repo
from portfolio_forge.data.db import get_session
from portfolio_forge.errors import ErrorKind
from portfolio_forge.services.artifact_cache import PortfolioRenderService, record_view
from portfolio_forge.services.content_schema import coerce_document
from portfolio_forge.services.renderer import TemplateRenderer
from portfolio_forge.templates import build_default_registry


@pytest.fixture
def service() -> PortfolioRenderService:
    return PortfolioRenderService(TemplateRenderer(build_default_registry()))


@pytest.fixture
def portfolio_id(user_id: int) -> int:
    document, _ = coerce_document(
        {
            "hero": {"name": "Grace Hopper", "title": "Admiral"},
            "about": {"description": "Compiler pioneer"},
            "projects": [{"title": "COBOL"}],
        }
    )
    with get_session() as session:
        portfolio = portfolio_repo.create_portfolio(
            session,
            user_id=user_id,
            title="Grace Hopper - Admiral",
            content=document,
            template_id="modern-dev",
        )
        return portfolio.id


def _stored(portfolio_id: int):
    with get_session() as session:
        return portfolio_repo.get_portfolio(session, portfolio_id)


def test_render_fills_cache_and_serves_it(
    service: PortfolioRenderService, portfolio_id: int
) -> None:
    first = service.render(portfolio_id)

    assert first.ok
    assert "Grace Hopper" in first.value.html
    assert _stored(portfolio_id).generated_html == first.value.html

    with get_session() as session:
        portfolio = portfolio_repo.get_portfolio(session, portfolio_id)
        portfolio.generated_html = "<p>cached</p>"

    assert service.render(portfolio_id).value.html == "<p>cached</p>"


def test_render_unknown_portfolio(service: PortfolioRenderService) -> None:
    result = service.render(404)

    assert result.error.kind is ErrorKind.NOT_FOUND


def test_render_is_scoped_to_owner(service: PortfolioRenderService, portfolio_id: int) -> None:
    with get_session() as session:
        other = portfolio_repo.get_or_create_user(session, "mallory").id

    assert service.render(portfolio_id, user_id=other).error.kind is ErrorKind.NOT_FOUND


def test_replace_content_invalidates_cache(
    service: PortfolioRenderService, portfolio_id: int
) -> None:
    service.render(portfolio_id)

    result = service.replace_content(portfolio_id, {"hero": {"name": "Amazing Grace"}})

    assert result.ok
    stored = _stored(portfolio_id)
    assert stored.generated_html is None
    assert portfolio_repo.get_content(stored).about.description == ""
    assert "Amazing Grace" in service.render(portfolio_id).value.html


def test_replace_content_rejects_unusable_sections(
    service: PortfolioRenderService, portfolio_id: int
) -> None:
    result = service.replace_content(portfolio_id, {"hero": "Grace"})

    assert result.error.kind is ErrorKind.VALIDATION
    assert portfolio_repo.get_content(_stored(portfolio_id)).hero.name == "Grace Hopper"


def test_regenerate_switches_template(
    service: PortfolioRenderService, portfolio_id: int
) -> None:
    cached = service.render(portfolio_id).value

    result = service.regenerate(portfolio_id, "minimal")

    assert result.ok
    stored = _stored(portfolio_id)
    assert stored.template_id == "minimal"
    assert stored.generated_html == result.value.html
    assert result.value.html != cached.html
    assert result.value.js == ""


def test_regenerate_unknown_template_changes_nothing(
    service: PortfolioRenderService, portfolio_id: int
) -> None:
    cached = service.render(portfolio_id).value

    result = service.regenerate(portfolio_id, "glitter")

    assert result.error.kind is ErrorKind.TEMPLATE_NOT_FOUND
    stored = _stored(portfolio_id)
    assert stored.template_id == "modern-dev"
    assert stored.generated_html == cached.html


def test_render_transient_does_not_persist(
    service: PortfolioRenderService, portfolio_id: int
) -> None:
    result = service.render_transient({"hero": {"name": "Preview Only"}}, "creative")

    assert result.ok
    assert "Preview Only" in result.value.html
    assert _stored(portfolio_id).generated_html is None


def test_render_transient_validates_input(service: PortfolioRenderService) -> None:
    assert service.render_transient({"about": 3}, "minimal").error.kind is ErrorKind.VALIDATION
    unknown = service.render_transient({}, "glitter")
    assert unknown.error.kind is ErrorKind.TEMPLATE_NOT_FOUND


def test_metadata(service: PortfolioRenderService, portfolio_id: int) -> None:
    result = service.metadata(portfolio_id)

    assert result.ok
    metadata = result.value
    assert metadata["title"] == "Grace Hopper - Portfolio"
    assert metadata["description"] == "Compiler pioneer"
    assert metadata["url"].endswith("/grace-hopper-admiral")
    assert metadata["portfolio_data"]["projects_count"] == 1
    assert metadata["keywords"] == ["COBOL"]


def test_public_render_requires_publication(
    service: PortfolioRenderService, portfolio_id: int
) -> None:
    assert service.render_public("grace-hopper-admiral").error.kind is ErrorKind.NOT_FOUND

    with get_session() as session:
        portfolio = portfolio_repo.get_portfolio(session, portfolio_id)
        portfolio_repo.publish_portfolio(session, portfolio)

    result = service.render_public("grace-hopper-admiral")
    assert result.ok
    found_id, artifact = result.value
    assert found_id == portfolio_id
    assert "Grace Hopper" in artifact.html


def test_record_view_increments_counter(portfolio_id: int) -> None:
    record_view(portfolio_id)
    record_view(portfolio_id)

    assert _stored(portfolio_id).view_count == 2


def _broken_lookup(*_args, **_kwargs):
    raise OperationalError("SELECT", {}, Exception("database is locked"))


@pytest.mark.parametrize(
    "call",
    [
        lambda service, pid: service.render(pid),
        lambda service, pid: service.regenerate(pid),
        lambda service, pid: service.replace_content(pid, {"hero": {"name": "Grace"}}),
        lambda service, pid: service.metadata(pid),
    ],
    ids=["render", "regenerate", "replace_content", "metadata"],
)
def test_database_errors_become_failures(
    service: PortfolioRenderService, portfolio_id: int, monkeypatch: pytest.MonkeyPatch, call
) -> None:
    monkeypatch.setattr(portfolio_repo, "get_portfolio", _broken_lookup)

    result = call(service, portfolio_id)

    assert not result.ok
    assert result.error.kind is ErrorKind.EXTERNAL_SERVICE
    assert result.error.service == "database"


def test_public_render_database_error_is_a_failure(
    service: PortfolioRenderService, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(portfolio_repo, "get_public_portfolio", _broken_lookup)

    result = service.render_public("grace-hopper-admiral")

    assert result.error.kind is ErrorKind.EXTERNAL_SERVICE
    assert result.error.service == "database"
