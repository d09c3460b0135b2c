"""Route handlers for the API."""

from portfolio_forge.api.routes import ai, health, portfolios, preview, templates, users

__all__ = [
    "ai",
    "health",
    "portfolios",
    "preview",
    "templates",
    "users",
]
