from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

import pytest
from fastapi.testclient import TestClient

from portfolio_forge.api.dependencies import get_generator
from portfolio_forge.api.main import app
from portfolio_forge.config import Settings
from portfolio_forge.services.generator import PortfolioGenerator
from portfolio_forge.services.llm_providers import LLMError
from portfolio_forge.services.llm_service import LLMService
from portfolio_forge.templates import build_default_registry

if TYPE_CHECKING:
    from conftest import FakeProvider

HEADERS = {"X-Username": "ada"}
PROMPT_SOURCES = [{"type": "prompt", "description": "Mathematician who writes programs"}]


@pytest.fixture
def client(llm_service: LLMService, settings: Settings) -> Iterator[TestClient]:
    generator = PortfolioGenerator(llm_service, build_default_registry(), settings=settings)
    app.dependency_overrides[get_generator] = lambda: generator
    with TestClient(app) as test_client:
        assert test_client.post("/api/users", json={"username": "ada"}).status_code == 201
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def portfolio(client: TestClient, provider: FakeProvider, document_json: str) -> dict:
    provider.queue(document_json)
    response = client.post(
        "/api/ai/generate",
        json={"sources": PROMPT_SOURCES, "preferences": {"template_id": "minimal"}},
        headers=HEADERS,
    )
    assert response.status_code == 201, response.text
    return response.json()["portfolio"]


def test_health_check(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["service"] == "portfolio-forge"


def test_register_and_me(client: TestClient) -> None:
    duplicate = client.post("/api/users", json={"username": "ada"})
    me = client.get("/api/users/me", headers=HEADERS)

    assert duplicate.status_code == 409
    assert me.status_code == 200
    assert me.json()["username"] == "ada"


def test_authentication_required(client: TestClient) -> None:
    assert client.get("/api/portfolios").status_code == 401
    assert client.get("/api/portfolios", headers={"X-Username": "nobody"}).status_code == 401


def test_generate_returns_summary(
    client: TestClient, provider: FakeProvider, document_json: str
) -> None:
    provider.queue(document_json)

    response = client.post("/api/ai/generate", json={"sources": PROMPT_SOURCES}, headers=HEADERS)

    assert response.status_code == 201
    body = response.json()
    assert body["portfolio"]["slug"] == "ada-lovelace-engineer"
    assert body["portfolio"]["status"] == "draft"
    assert body["metadata"]["sources_processed"] == 1
    assert body["metadata"]["ai_model"] == "primary-model"
    assert body["warnings"] == []


def test_generate_errors_map_to_status_codes(client: TestClient) -> None:
    unknown_template = client.post(
        "/api/ai/generate",
        json={"sources": PROMPT_SOURCES, "preferences": {"template_id": "glitter"}},
        headers=HEADERS,
    )
    bad_source = client.post(
        "/api/ai/generate", json={"sources": [{"type": "github"}]}, headers=HEADERS
    )
    no_sources = client.post("/api/ai/generate", json={"sources": []}, headers=HEADERS)

    assert unknown_template.status_code == 404
    assert unknown_template.json()["detail"]["kind"] == "template_not_found"
    assert bad_source.status_code == 400
    assert bad_source.json()["detail"]["kind"] == "validation"
    assert no_sources.status_code == 422


def test_generate_model_failure_is_bad_gateway(
    client: TestClient, provider: FakeProvider
) -> None:
    provider.queue(LLMError("quota exceeded"))

    response = client.post("/api/ai/generate", json={"sources": PROMPT_SOURCES}, headers=HEADERS)

    assert response.status_code == 502
    assert response.json()["detail"]["service"] == "llm"


def test_generate_prose_reply_is_created_with_warning(
    client: TestClient, provider: FakeProvider
) -> None:
    provider.queue("no json here")

    response = client.post("/api/ai/generate", json={"sources": PROMPT_SOURCES}, headers=HEADERS)

    assert response.status_code == 201
    body = response.json()
    assert body["portfolio"]["title"] == "Portfolio's Portfolio"
    assert [w["kind"] for w in body["warnings"]] == ["parse_degraded"]


def test_generate_without_model_configuration(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with TestClient(app) as test_client:
        test_client.post("/api/users", json={"username": "ada"})
        response = test_client.post(
            "/api/ai/generate", json={"sources": PROMPT_SOURCES}, headers=HEADERS
        )

    assert response.status_code == 503


def test_portfolio_listing_and_detail(client: TestClient, portfolio: dict) -> None:
    listing = client.get("/api/portfolios", headers=HEADERS)
    detail = client.get(f"/api/portfolios/{portfolio['id']}", headers=HEADERS)

    assert [p["id"] for p in listing.json()] == [portfolio["id"]]
    assert detail.status_code == 200
    assert detail.json()["content"]["contact"]["email"] == "ada@example.com"
    assert detail.json()["has_rendered_artifact"] is False


def test_portfolios_are_scoped_to_owner(client: TestClient, portfolio: dict) -> None:
    client.post("/api/users", json={"username": "grace"})
    other = {"X-Username": "grace"}

    assert client.get("/api/portfolios", headers=other).json() == []
    assert client.get(f"/api/portfolios/{portfolio['id']}", headers=other).status_code == 404
    assert client.get(f"/api/preview/{portfolio['id']}", headers=other).status_code == 404


def test_enhance_and_iteration_history(
    client: TestClient, provider: FakeProvider, portfolio: dict
) -> None:
    provider.queue('{"about": {"description": "Pioneer of computing"}}')

    enhanced = client.post(
        f"/api/ai/enhance/{portfolio['id']}",
        json={"prompt": "Make it punchier", "section": "about"},
        headers=HEADERS,
    )
    history = client.get(f"/api/portfolios/{portfolio['id']}/iterations", headers=HEADERS)
    stats = client.get(f"/api/portfolios/{portfolio['id']}/iterations/stats", headers=HEADERS)

    assert enhanced.status_code == 200
    assert enhanced.json()["changed_sections"] == ["about"]
    entries = history.json()
    assert [e["iteration_type"] for e in entries] == ["enhance", "generate"]
    assert entries[0]["previous_content"]["about"]["description"] == (
        "Mathematician and programmer"
    )
    assert entries[0]["changes_made"]["section"] == "about"
    assert stats.json()["completed_iterations"] == 2
    assert stats.json()["total_tokens_used"] == 84


def test_enhance_errors(client: TestClient, portfolio: dict) -> None:
    missing = client.post("/api/ai/enhance/999", json={"prompt": "Hi"}, headers=HEADERS)
    bad_section = client.post(
        f"/api/ai/enhance/{portfolio['id']}",
        json={"prompt": "Hi", "section": "footer"},
        headers=HEADERS,
    )

    assert missing.status_code == 404
    assert missing.json()["detail"]["kind"] == "not_found"
    assert bad_section.status_code == 400


def test_preview_caches_and_content_update_invalidates(
    client: TestClient, portfolio: dict
) -> None:
    url = f"/api/portfolios/{portfolio['id']}"

    rendered = client.get(f"/api/preview/{portfolio['id']}", headers=HEADERS)
    assert rendered.status_code == 200
    assert "Ada Lovelace" in rendered.json()["html"]
    assert client.get(url, headers=HEADERS).json()["has_rendered_artifact"] is True

    updated = client.put(
        f"{url}/content", json={"content": {"hero": {"name": "Countess Ada"}}}, headers=HEADERS
    )
    assert updated.status_code == 200
    assert updated.json()["has_rendered_artifact"] is False
    assert updated.json()["content"]["contact"]["email"] == ""

    page = client.get(f"/api/preview/{portfolio['id']}/html", headers=HEADERS)
    assert page.headers["content-type"].startswith("text/html")
    assert "Countess Ada" in page.text


def test_regenerate_and_metadata(client: TestClient, portfolio: dict) -> None:
    switched = client.post(
        f"/api/preview/{portfolio['id']}/regenerate",
        json={"template_id": "creative"},
        headers=HEADERS,
    )
    unknown = client.post(
        f"/api/preview/{portfolio['id']}/regenerate",
        json={"template_id": "glitter"},
        headers=HEADERS,
    )
    detail = client.get(f"/api/portfolios/{portfolio['id']}", headers=HEADERS).json()
    metadata = client.get(f"/api/preview/{portfolio['id']}/metadata", headers=HEADERS)

    assert switched.status_code == 200
    assert switched.json()["js"]
    assert unknown.status_code == 404
    assert detail["template_id"] == "creative"
    assert metadata.json()["title"] == "Ada Lovelace - Portfolio"
    assert metadata.json()["portfolio_data"]["projects_count"] == 1


def test_render_unsaved_content(client: TestClient) -> None:
    response = client.post(
        "/api/preview/render",
        json={"content": {"hero": {"name": "Draft Ada"}}, "template_id": "modern-dev"},
        headers=HEADERS,
    )
    invalid = client.post(
        "/api/preview/render",
        json={"content": {"hero": "Ada"}, "template_id": "modern-dev"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert "Draft Ada" in response.json()["html"]
    assert invalid.status_code == 400


def test_publish_public_view_and_unpublish(client: TestClient, portfolio: dict) -> None:
    base = f"/api/portfolios/{portfolio['id']}"
    public_url = f"/api/preview/public/{portfolio['slug']}"

    assert client.get(public_url).status_code == 404

    published = client.post(f"{base}/publish", headers=HEADERS)
    assert published.json()["status"] == "published"
    assert published.json()["is_public"] is True

    page = client.get(public_url)
    assert page.status_code == 200
    assert "Ada Lovelace" in page.text
    assert client.get(base, headers=HEADERS).json()["view_count"] == 1

    assert client.post(f"{base}/unpublish", headers=HEADERS).json()["status"] == "draft"
    assert client.get(public_url).status_code == 404

    assert client.post(f"{base}/archive", headers=HEADERS).json()["status"] == "archived"


def test_delete_portfolio(client: TestClient, portfolio: dict) -> None:
    url = f"/api/portfolios/{portfolio['id']}"

    assert client.delete(url, headers=HEADERS).status_code == 204
    assert client.get(url, headers=HEADERS).status_code == 404
    assert client.delete(url, headers=HEADERS).status_code == 404


def test_templates_endpoints(client: TestClient) -> None:
    listing = client.get("/api/templates")
    single = client.get("/api/templates/minimal")
    missing = client.get("/api/templates/glitter")
    customized = client.post(
        "/api/templates/minimal/customize",
        json={"colors": {"accent": "#ff0000"}, "fonts": {"primary": "Inter"}},
    )

    assert [t["id"] for t in listing.json()] == ["creative", "minimal", "modern-dev"]
    assert single.json()["name"]
    assert missing.status_code == 404
    assert "--accent: #ff0000;" in customized.json()["css"]
    assert client.post("/api/templates/glitter/customize", json={}).status_code == 404


def test_suggestions_and_recommendations(client: TestClient) -> None:
    suggestions = client.get("/api/ai/suggestions", headers=HEADERS)
    recommendations = client.post(
        "/api/ai/recommendations",
        json={"sources": [{"type": "prompt", "description": "UX designer"}]},
        headers=HEADERS,
    )

    assert [s["type"] for s in suggestions.json()["sources"]] == [
        "github",
        "resume",
        "prompt",
        "linkedin",
    ]
    assert recommendations.json()[0]["id"] == "creative"


def test_resume_upload(client: TestClient) -> None:
    ok = client.post(
        "/api/ai/resume",
        files={"file": ("cv.txt", b"Ada Lovelace\nAnalyst", "text/plain")},
        headers=HEADERS,
    )
    unsupported = client.post(
        "/api/ai/resume",
        files={"file": ("cv.rtf", b"{\\rtf1 Ada}", "application/rtf")},
        headers=HEADERS,
    )

    assert ok.status_code == 200
    assert ok.json()["source"] == {"type": "resume", "text": "Ada Lovelace\nAnalyst"}
    assert ok.json()["characters"] == 20
    assert unsupported.status_code == 400


def test_generate_bio(client: TestClient, provider: FakeProvider) -> None:
    provider.queue("Ada Lovelace turns mathematics into programs.")

    response = client.post(
        "/api/ai/generate-bio",
        json={"user_data": {"name": "Ada Lovelace", "skills": ["Math"]}, "style": "casual"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["bio"] == "Ada Lovelace turns mathematics into programs."
    assert body["style"] == "casual"
    assert body["ai_model"] == "cheap-model"

    empty = client.post("/api/ai/generate-bio", json={"user_data": {}}, headers=HEADERS)
    blank = client.post("/api/ai/generate-bio", json={"user_data": {"name": ""}}, headers=HEADERS)
    assert empty.status_code == 422
    assert blank.status_code == 400


def test_generate_projects(client: TestClient, provider: FakeProvider) -> None:
    provider.queue('[{"title": "engine", "description": "Runs programs on cards"}]')

    response = client.post(
        "/api/ai/generate-projects",
        json={
            "repositories": [
                {
                    "name": "engine",
                    "language": "Python",
                    "html_url": "https://github.com/ada/engine",
                }
            ]
        },
        headers=HEADERS,
    )

    assert response.status_code == 200
    body = response.json()
    [project] = body["projects"]
    assert project["title"] == "engine"
    assert project["description"] == "Runs programs on cards"
    assert project["tech_stack"] == ["Python"]
    assert project["github_url"] == "https://github.com/ada/engine"
    assert body["warnings"] == []

    none = client.post("/api/ai/generate-projects", json={"repositories": []}, headers=HEADERS)
    assert none.status_code == 422


def test_usage_summary(client: TestClient, provider: FakeProvider, portfolio: dict) -> None:
    provider.queue("A short bio.")
    client.post("/api/ai/generate-bio", json={"user_data": {"name": "Ada"}}, headers=HEADERS)

    response = client.get("/api/ai/usage", headers=HEADERS)

    assert response.status_code == 200
    usage = response.json()
    assert usage["total_iterations"] == 2
    assert usage["successful_iterations"] == 2
    assert usage["total_tokens_used"] == 84
    assert usage["monthly_iterations"] == 2
    assert usage["iteration_types"] == {"generate": 1, "bio": 1}


def test_duplicate_portfolio(client: TestClient, portfolio: dict) -> None:
    copy = client.post(f"/api/portfolios/{portfolio['id']}/duplicate", headers=HEADERS)
    named = client.post(
        f"/api/portfolios/{portfolio['id']}/duplicate", json={"title": "Ada v2"}, headers=HEADERS
    )
    missing = client.post("/api/portfolios/999/duplicate", headers=HEADERS)

    assert copy.status_code == 201
    assert copy.json()["title"] == "Ada Lovelace - Engineer (Copy)"
    assert copy.json()["slug"] == "ada-lovelace-engineer-copy"
    assert copy.json()["status"] == "draft"
    assert named.json()["title"] == "Ada v2"
    assert missing.status_code == 404

    original = client.get(f"/api/portfolios/{portfolio['id']}", headers=HEADERS).json()
    detail = client.get(f"/api/portfolios/{copy.json()['id']}", headers=HEADERS).json()
    assert detail["content"] == original["content"]
    assert len(client.get("/api/portfolios", headers=HEADERS).json()) == 3
