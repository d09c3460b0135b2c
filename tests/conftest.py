from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from portfolio_forge.config import Settings
from portfolio_forge.data.crud import portfolio_repo
from portfolio_forge.data.db import get_session, init_db, reset_engine
from portfolio_forge.services.llm_providers import LLMProvider, LLMResponse
from portfolio_forge.services.llm_service import LLMService

DOCUMENT_JSON = """{
  "hero": {"name": "Ada Lovelace", "title": "Engineer", "bio": "Builds analytical engines"},
  "about": {"description": "Mathematician and programmer", "skills": ["Python", "Math"]},
  "projects": [{"title": "Engine", "description": "Analytical engine notes",
                "tech_stack": ["Brass"], "github_url": "github.com/ada/engine"}],
  "experience": [{"company": "Babbage Ltd", "title": "Analyst", "start_date": "1842-01",
                  "current": true, "description": "Wrote the first program"}],
  "education": [],
  "contact": {"email": "ada@example.com", "location": "London"}
}"""


class FakeProvider(LLMProvider):
    """Provider that replays queued replies (or raises queued exceptions)."""

    def __init__(self, *replies: str | Exception) -> None:
        self.replies: list[str | Exception] = list(replies)
        self.calls: list[dict] = []

    def queue(self, *replies: str | Exception) -> None:
        self.replies.extend(replies)

    def send_prompt(
        self,
        prompt: str,
        config: dict,
        *,
        model: str | None = None,
        timeout: float | None = None,
    ) -> LLMResponse:
        self.calls.append({"prompt": prompt, "config": config, "model": model, "timeout": timeout})
        if not self.replies:
            raise AssertionError("FakeProvider ran out of replies")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(text=reply, tokens_used=42, model=model)


@pytest.fixture(autouse=True)
def db(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Iterator[None]:
    """Use a temporary SQLite DB for every test."""
    db_path = tmp_path / "test.db"
    monkeypatch.setenv("DB_URL", f"sqlite:///{db_path.as_posix()}")
    reset_engine()
    init_db()
    yield
    reset_engine()


@pytest.fixture
def document_json() -> str:
    return DOCUMENT_JSON


@pytest.fixture
def settings() -> Settings:
    return Settings(
        llm_model="primary-model",
        llm_fallback_model="fallback-model",
        llm_cheap_model="cheap-model",
        llm_timeout_seconds=5.0,
        github_api_url="https://api.github.test",
        github_token=None,
        default_template_id="minimal",
    )


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def llm_service(provider: FakeProvider, settings: Settings) -> LLMService:
    return LLMService(provider=provider, settings=settings)


@pytest.fixture
def user_id() -> int:
    with get_session() as session:
        return portfolio_repo.get_or_create_user(session, "ada").id
