"""portfolio-forge: generate, enhance and render developer portfolios."""

__version__ = "0.1.0"


def main() -> None:
    """Entry point for the development server."""
    from portfolio_forge.api.main import main as api_main

    api_main()
