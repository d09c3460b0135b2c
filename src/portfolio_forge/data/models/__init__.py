"""ORM models package for database tables.

This package provides SQLAlchemy ORM models representing database tables:
- User: Owner of portfolios
- Portfolio: Generated portfolio content plus its cached rendered artifact
- PortfolioIteration: Audit record of one generation or enhancement attempt

All models inherit from the shared Base declarative class defined in data.db.
"""

from portfolio_forge.data.db import Base
from portfolio_forge.data.models.portfolio import Portfolio, PortfolioStatus
from portfolio_forge.data.models.portfolio_iteration import (
    IterationStatus,
    IterationType,
    PortfolioIteration,
)
from portfolio_forge.data.models.user import User

__all__ = [
    "Base",
    "IterationStatus",
    "IterationType",
    "Portfolio",
    "PortfolioIteration",
    "PortfolioStatus",
    "User",
]
