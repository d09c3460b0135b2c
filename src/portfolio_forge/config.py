"""Runtime configuration loaded from environment variables.

Values are read once via :meth:`Settings.from_env`. A ``.env`` file in the
working directory is honoured through python-dotenv.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

__all__ = ["Settings", "get_settings"]

load_dotenv()

_DEFAULT_MAX_RESUME_BYTES = 10 * 1024 * 1024


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    """Immutable settings snapshot.

    Attributes:
        llm_provider: Name of the text-generation provider (``gemini``).
        llm_model: Primary model used for full generation.
        llm_fallback_model: Lower-capability model tried once after an overload.
        llm_cheap_model: Model used for section enhancement and résumé parsing.
        llm_timeout_seconds: Upper bound on a single model call.
        github_api_url: Base URL of the GitHub REST API.
        github_token: Optional token; required for the GraphQL calls.
        github_timeout_seconds: Upper bound on a single GitHub request.
        github_top_repositories: How many recent repositories feed the prompt.
        github_top_languages: How many aggregated languages feed the prompt.
        default_template_id: Template used when the caller does not pick one.
        max_resume_bytes: Upload cap for résumé files.
        db_url: SQLAlchemy URL override; ``None`` means the bundled SQLite file.
    """

    llm_provider: str = "gemini"
    llm_model: str = "gemini-2.5-pro"
    llm_fallback_model: str = "gemini-2.5-flash"
    llm_cheap_model: str = "gemini-2.5-flash"
    llm_timeout_seconds: float = 60.0
    github_api_url: str = "https://api.github.com"
    github_token: str | None = None
    github_timeout_seconds: float = 10.0
    github_top_repositories: int = 6
    github_top_languages: int = 8
    default_template_id: str = "modern-dev"
    max_resume_bytes: int = _DEFAULT_MAX_RESUME_BYTES
    db_url: str | None = None

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the current process environment."""
        return cls(
            llm_provider=os.environ.get("LLM_PROVIDER", "gemini").lower(),
            llm_model=os.environ.get("LLM_MODEL", cls.llm_model),
            llm_fallback_model=os.environ.get("LLM_FALLBACK_MODEL", cls.llm_fallback_model),
            llm_cheap_model=os.environ.get("LLM_CHEAP_MODEL", cls.llm_cheap_model),
            llm_timeout_seconds=_env_float("LLM_TIMEOUT_SECONDS", cls.llm_timeout_seconds),
            github_api_url=os.environ.get("GITHUB_API_URL", cls.github_api_url).rstrip("/"),
            github_token=os.environ.get("GITHUB_TOKEN") or None,
            github_timeout_seconds=_env_float(
                "GITHUB_TIMEOUT_SECONDS", cls.github_timeout_seconds
            ),
            github_top_repositories=_env_int(
                "GITHUB_TOP_REPOSITORIES", cls.github_top_repositories
            ),
            github_top_languages=_env_int("GITHUB_TOP_LANGUAGES", cls.github_top_languages),
            default_template_id=os.environ.get("DEFAULT_TEMPLATE_ID", cls.default_template_id),
            max_resume_bytes=_env_int("MAX_RESUME_BYTES", cls.max_resume_bytes),
            db_url=os.environ.get("DB_URL") or None,
        )


def get_settings() -> Settings:
    """Return settings for the current environment."""
    return Settings.from_env()
