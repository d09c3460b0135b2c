from __future__ import annotations

import logging

from portfolio_forge.config import Settings, get_settings
from portfolio_forge.services.llm_providers import (
    GeminiProvider,
    LLMError,
    LLMOverloadedError,
    LLMProvider,
    LLMResponse,
)

"""LLM service with multi-provider support and overload fallback."""

logger = logging.getLogger(__name__)


class LLMService:
    def __init__(
        self,
        provider: LLMProvider | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize LLM service with a specific provider.

        Args:
            provider: LLM provider instance
            settings: Model names and timeouts; read from the environment if omitted.
        """
        self.settings = settings or get_settings()
        self.provider = provider or LLMService._get_default_llm_provider(self.settings)

    @staticmethod
    def _get_default_llm_provider(settings: Settings) -> LLMProvider:
        """Get the configured LLM provider.

        Returns:
            An instance of the configured LLM provider.
        """
        provider_name = settings.llm_provider

        if provider_name == "gemini":
            return GeminiProvider(model=settings.llm_model)
        raise LLMError(f"Unknown LLM provider: {provider_name}.")

    def build_prompt(self, system_instructions: str, user_content: str) -> str:
        """Construct a full prompt with system and user parts.

        Args:
            system_instructions: System-level instructions
            user_content: User-provided content

        Returns:
            The complete formatted prompt.
        """
        return f"System instruction:\n{system_instructions}\n\nUser content:\n{user_content}"

    def complete(
        self,
        system_instructions: str,
        user_content: str,
        *,
        model: str | None = None,
        temperature: float | None = 0.7,
        max_tokens: int | None = None,
        seed: int | None = None,
    ) -> LLMResponse:
        """Build a prompt and send it to one model.

        Args:
            system_instructions: System-level instructions.
            user_content: User content.
            model: Model to call; defaults to the primary model.
            temperature: Controls randomness (0.0-2.0). Lower = more deterministic.
            max_tokens: Maximum response length. None = provider default.
            seed: Random seed for reproducibility (if supported by provider).

        Returns:
            The text response and token usage.
        """
        prompt = self.build_prompt(system_instructions, user_content)
        config = self.provider.generate_llm_config(temperature, max_tokens, seed)
        return self.provider.send_prompt(
            prompt,
            config,
            model=model or self.settings.llm_model,
            timeout=self.settings.llm_timeout_seconds,
        )

    def complete_with_fallback(
        self,
        system_instructions: str,
        user_content: str,
        *,
        temperature: float | None = 0.7,
        max_tokens: int | None = None,
        fallback_max_tokens: int | None = None,
    ) -> LLMResponse:
        """Call the primary model, retrying once on the fallback model after an overload.

        Any error other than :class:`LLMOverloadedError` propagates unchanged.
        """
        try:
            return self.complete(
                system_instructions,
                user_content,
                model=self.settings.llm_model,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except LLMOverloadedError:
            logger.warning(
                "Primary model %s overloaded; retrying with %s",
                self.settings.llm_model,
                self.settings.llm_fallback_model,
            )
        return self.complete(
            system_instructions,
            user_content,
            model=self.settings.llm_fallback_model,
            temperature=temperature,
            max_tokens=fallback_max_tokens or max_tokens,
        )
