"""FastAPI application entry point for the portfolio-forge API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portfolio_forge.api.routes import ai, health, portfolios, preview, templates, users
from portfolio_forge.config import get_settings
from portfolio_forge.services.artifact_cache import PortfolioRenderService
from portfolio_forge.services.renderer import TemplateRenderer
from portfolio_forge.templates import build_default_registry

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize resources on startup and clean up on shutdown."""
    from portfolio_forge.data.db import init_db

    init_db()
    settings = get_settings()
    registry = build_default_registry()
    renderer = TemplateRenderer(registry)
    app.state.settings = settings
    app.state.registry = registry
    app.state.renderer = renderer
    app.state.render_service = PortfolioRenderService(renderer)
    # Built on first use; needs GEMINI_API_KEY.
    app.state.generator = None
    logger.info("Loaded %d templates: %s", len(registry), ", ".join(registry))
    yield


app = FastAPI(
    title="portfolio-forge API",
    description="Generate, enhance and render developer portfolios",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(users.router, prefix="/api")
app.include_router(ai.router, prefix="/api")
app.include_router(portfolios.router, prefix="/api")
app.include_router(preview.router, prefix="/api")
app.include_router(templates.router, prefix="/api")


def main() -> None:
    """Start the development server."""
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "portfolio_forge.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
