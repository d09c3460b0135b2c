from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass

from dotenv import load_dotenv

"""LLM provider implementations."""

# Load environment variables for LLM API keys (GEMINI_API_KEY, LLM_MODEL, etc.)
load_dotenv()

# Status codes Gemini uses when a model is saturated.
_OVERLOAD_STATUS_CODES = frozenset({429, 503})


class LLMError(RuntimeError):
    """Raised when LLM service cannot be used or fails."""


class LLMOverloadedError(LLMError):
    """Raised when the model reports it is overloaded; eligible for fallback."""


class LLMTimeoutError(LLMError):
    """Raised when a model call exceeds its timeout."""


@dataclass(frozen=True)
class LLMResponse:
    """Text returned by a provider plus the tokens it reported."""

    text: str
    tokens_used: int = 0
    model: str | None = None


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    def generate_llm_config(
        self,
        temperature: float | None,
        max_tokens: int | None,
        seed: int | None,
    ) -> dict:
        """Generate llm configs

        Args:
            temperature: Controls randomness
            max_tokens: Maximum response length
            seed: Random seed for reproducibility

        Returns:
            Configuration dictionary with common parameters
        """
        config = {}

        if temperature is not None:
            config["temperature"] = temperature
        if max_tokens is not None:
            config["max_tokens"] = max_tokens
        if seed is not None:
            config["seed"] = seed

        return config

    @abstractmethod
    def send_prompt(
        self,
        prompt: str,
        config: dict,
        *,
        model: str | None = None,
        timeout: float | None = None,
    ) -> LLMResponse:
        """Send a prompt to the LLM and return the text response.

        Args:
            prompt: The full prompt string to send to the LLM.
            config: Configuration dictionary for the LLM request.
            model: Model override; ``None`` uses the provider default.
            timeout: Seconds before the call is abandoned.

        Returns:
            The text response from the LLM with token usage.

        Raises:
            LLMOverloadedError: The model is saturated.
            LLMTimeoutError: The call exceeded *timeout*.
            LLMError: Any other failure.
        """


class GeminiProvider(LLMProvider):
    """Gemini implementation."""

    def __init__(self, model: str | None = None) -> None:
        """Initialize Gemini provider with API key from environment.

        Note: Environment variables are loaded via load_dotenv() at module import.
        """
        from google import genai

        self.api_key = os.environ.get("GEMINI_API_KEY")
        if not self.api_key:
            raise LLMError("Missing GEMINI_API_KEY environment variable")

        self.model = model or os.environ.get("LLM_MODEL", "gemini-2.5-pro")
        self.client = genai.Client(api_key=self.api_key)

    def generate_llm_config(
        self,
        temperature: float | None,
        max_tokens: int | None,
        seed: int | None,
    ) -> dict:
        """Generate Gemini-specific configuration dictionary."""
        config = super().generate_llm_config(temperature, max_tokens, seed)

        # Map common 'max_tokens' to Gemini's 'max_output_tokens'
        if "max_tokens" in config:
            config["max_output_tokens"] = config.pop("max_tokens")

        return config

    def send_prompt(
        self,
        prompt: str,
        config: dict,
        *,
        model: str | None = None,
        timeout: float | None = None,
    ) -> LLMResponse:
        """Send prompt to Gemini and return response text.

        Args:
            prompt: The full prompt string.
            config: Configuration dictionary for the Gemini API.
            model: Model override.
            timeout: Seconds before the HTTP request is abandoned.

        Returns:
            The response text from Gemini with the reported token count.
        """
        import httpx
        from google.genai import errors as genai_errors

        request_config = dict(config)
        if timeout is not None:
            # HttpOptions.timeout is expressed in milliseconds.
            request_config["http_options"] = {"timeout": int(timeout * 1000)}

        target_model = model or self.model
        try:
            response = self.client.models.generate_content(
                model=target_model, contents=prompt, config=request_config
            )
        except genai_errors.APIError as e:
            if e.code in _OVERLOAD_STATUS_CODES:
                raise LLMOverloadedError(f"Gemini model {target_model} overloaded: {e}") from e
            raise LLMError(f"Gemini API call failed: {e}") from e
        except httpx.TimeoutException as e:
            raise LLMTimeoutError(f"Gemini call timed out after {timeout}s") from e
        except Exception as e:
            raise LLMError(f"Gemini API call failed: {e}") from e

        usage = getattr(response, "usage_metadata", None)
        tokens = getattr(usage, "total_token_count", None) or 0
        return LLMResponse(
            text=(response.text or "").strip(), tokens_used=tokens, model=target_model
        )
