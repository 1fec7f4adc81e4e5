"""Data sources feeding model builds."""
from __future__ import annotations

from .alphavantage import AlphaVantageClient, MarketDataError
from .base import ModelDataSource
from .database import DatabaseSource
from .static import StaticSource, seed_universe

__all__ = [
    "ModelDataSource",
    "DatabaseSource",
    "StaticSource",
    "seed_universe",
    "AlphaVantageClient",
    "MarketDataError",
]
