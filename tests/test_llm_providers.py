from __future__ import annotations

from types import SimpleNamespace

import httpx
import pytest
from google.genai import errors as genai_errors

from portfolio_forge.services.llm_providers import (
    GeminiProvider,
    LLMError,
    LLMOverloadedError,
    LLMProvider,
    LLMResponse,
    LLMTimeoutError,
)


class MockLLMProvider(LLMProvider):
    """Mock provider for testing abstract base class."""

    def send_prompt(self, prompt, config, *, model=None, timeout=None) -> LLMResponse:
        return LLMResponse(text=f"Mock response to: {prompt}")


class _FakeModels:
    def __init__(self, outcome: object) -> None:
        self.outcome = outcome
        self.calls: list[dict] = []

    def generate_content(self, *, model: str, contents: str, config: dict) -> object:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture
def gemini(monkeypatch: pytest.MonkeyPatch):
    """Build a GeminiProvider whose client is replaced by a fake."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")

    class _FakeClient:
        def __init__(self, api_key: str) -> None:
            self.api_key = api_key
            self.models = _FakeModels(None)

    import google.genai as _genai

    monkeypatch.setattr(_genai, "Client", _FakeClient, raising=True)

    def _build(outcome: object) -> GeminiProvider:
        provider = GeminiProvider(model="gemini-test")
        provider.client.models = _FakeModels(outcome)
        return provider

    return _build


def test_generate_llm_config_with_all_parameters() -> None:
    """Test config generation with all parameters set."""
    provider = MockLLMProvider()
    config = provider.generate_llm_config(temperature=0.5, max_tokens=100, seed=42)

    assert config == {"temperature": 0.5, "max_tokens": 100, "seed": 42}


def test_generate_llm_config_with_no_parameters() -> None:
    """Test config generation with all parameters as None."""
    provider = MockLLMProvider()
    config = provider.generate_llm_config(temperature=None, max_tokens=None, seed=None)

    assert config == {}


def test_gemini_requires_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that a missing key is reported as an LLMError."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    with pytest.raises(LLMError, match="Missing GEMINI_API_KEY"):
        GeminiProvider()


def test_gemini_config_renames_max_tokens(gemini) -> None:
    """Test that max_tokens maps to Gemini's max_output_tokens."""
    provider = gemini(None)

    config = provider.generate_llm_config(temperature=0.2, max_tokens=256, seed=None)

    assert config == {"temperature": 0.2, "max_output_tokens": 256}


def test_gemini_send_prompt_returns_text_and_tokens(gemini) -> None:
    reply = SimpleNamespace(text="  hello  ", usage_metadata=SimpleNamespace(total_token_count=17))
    provider = gemini(reply)

    response = provider.send_prompt("prompt", {"temperature": 0.1}, model="override", timeout=2)

    assert response == LLMResponse(text="hello", tokens_used=17, model="override")
    call = provider.client.models.calls[0]
    assert call["model"] == "override"
    assert call["config"]["http_options"] == {"timeout": 2000}


def test_gemini_send_prompt_defaults_model_and_tokens(gemini) -> None:
    provider = gemini(SimpleNamespace(text=None, usage_metadata=None))

    response = provider.send_prompt("prompt", {})

    assert response == LLMResponse(text="", tokens_used=0, model="gemini-test")
    assert "http_options" not in provider.client.models.calls[0]["config"]


@pytest.mark.parametrize("code", [429, 503])
def test_gemini_overload_is_distinguished(gemini, code: int) -> None:
    error = genai_errors.APIError(code, {"error": {"message": "busy", "status": "UNAVAILABLE"}})
    provider = gemini(error)

    with pytest.raises(LLMOverloadedError):
        provider.send_prompt("prompt", {})


def test_gemini_other_api_errors_are_not_overloads(gemini) -> None:
    error = genai_errors.APIError(400, {"error": {"message": "bad", "status": "INVALID"}})
    provider = gemini(error)

    with pytest.raises(LLMError) as excinfo:
        provider.send_prompt("prompt", {})
    assert not isinstance(excinfo.value, LLMOverloadedError)


def test_gemini_timeout_is_reported(gemini) -> None:
    provider = gemini(httpx.ReadTimeout("timed out"))

    with pytest.raises(LLMTimeoutError):
        provider.send_prompt("prompt", {}, timeout=1)
