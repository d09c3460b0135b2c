from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

import pytest

from portfolio_forge.config import Settings
from portfolio_forge.services.llm_providers import (
    GeminiProvider,
    LLMError,
    LLMOverloadedError,
    LLMTimeoutError,
)
from portfolio_forge.services.llm_service import LLMService

if TYPE_CHECKING:
    from conftest import FakeProvider


def test_llm_service_initialization_with_custom_provider(
    provider: FakeProvider, settings: Settings
) -> None:
    """Test service initialization with a custom provider."""
    service = LLMService(provider=provider, settings=settings)

    assert service.provider is provider


def test_llm_service_initialization_with_default_gemini_provider(
    monkeypatch: pytest.MonkeyPatch, settings: Settings
) -> None:
    """Test that Gemini is used as default provider when none specified."""
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")

    class _FakeClient:
        def __init__(self, api_key: str) -> None:
            pass

    import google.genai as _genai

    monkeypatch.setattr(_genai, "Client", _FakeClient, raising=True)

    service = LLMService(settings=settings)
    assert isinstance(service.provider, GeminiProvider)
    assert service.provider.model == "primary-model"


def test_llm_service_initialization_with_unknown_provider(settings: Settings) -> None:
    """Test that initialization fails with unknown provider name."""
    with pytest.raises(LLMError, match="Unknown LLM provider: unknown_provider"):
        LLMService(settings=replace(settings, llm_provider="unknown_provider"))


def test_llm_service_build_prompt(llm_service: LLMService) -> None:
    """Test prompt building with system instructions and user content."""
    prompt = llm_service.build_prompt("You are a helpful assistant.", "What is Python?")

    expected = "System instruction:\nYou are a helpful assistant.\n\nUser content:\nWhat is Python?"
    assert prompt == expected


def test_complete_uses_primary_model_and_timeout(
    llm_service: LLMService, provider: FakeProvider
) -> None:
    provider.queue("reply")

    response = llm_service.complete("sys", "user", max_tokens=100)

    assert response.text == "reply"
    assert provider.calls[0]["model"] == "primary-model"
    assert provider.calls[0]["timeout"] == 5.0
    assert provider.calls[0]["config"] == {"temperature": 0.7, "max_tokens": 100}


def test_complete_with_fallback_retries_once_after_overload(
    llm_service: LLMService, provider: FakeProvider
) -> None:
    provider.queue(LLMOverloadedError("busy"), "fallback reply")

    response = llm_service.complete_with_fallback(
        "sys", "user", max_tokens=8192, fallback_max_tokens=4096
    )

    assert response.text == "fallback reply"
    assert response.model == "fallback-model"
    assert [call["model"] for call in provider.calls] == ["primary-model", "fallback-model"]
    assert provider.calls[1]["config"]["max_tokens"] == 4096


def test_complete_with_fallback_skips_fallback_on_success(
    llm_service: LLMService, provider: FakeProvider
) -> None:
    provider.queue("primary reply")

    response = llm_service.complete_with_fallback("sys", "user")

    assert response.model == "primary-model"
    assert len(provider.calls) == 1


@pytest.mark.parametrize("error", [LLMError("boom"), LLMTimeoutError("slow")])
def test_complete_with_fallback_propagates_other_errors(
    llm_service: LLMService, provider: FakeProvider, error: LLMError
) -> None:
    provider.queue(error)

    with pytest.raises(type(error)):
        llm_service.complete_with_fallback("sys", "user")
    assert len(provider.calls) == 1


def test_fallback_failure_propagates(llm_service: LLMService, provider: FakeProvider) -> None:
    provider.queue(LLMOverloadedError("busy"), LLMOverloadedError("still busy"))

    with pytest.raises(LLMOverloadedError):
        llm_service.complete_with_fallback("sys", "user")
    assert len(provider.calls) == 2
