"""Data-access contract for model builds."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Mapping, Optional, Sequence

from ..models import AllocationTargets, Profile, Provider, Symbol


class ModelDataSource(ABC):
    """Supplies the universe, scores and targets a model build needs."""

    @abstractmethod
    def load_active_symbols(self, provider: Provider) -> list[Symbol]:
        """Return the provider's active symbols."""

    @abstractmethod
    def load_scores(self, asof: date, symbols: Sequence[Symbol]) -> Mapping[str, Optional[float]]:
        """Return ``{ticker: score}``; absent tickers are least preferred."""

    @abstractmethod
    def load_allocation_targets(self, profile: Profile) -> AllocationTargets:
        """Return bucket targets, falling back to the documented defaults."""


__all__ = ["ModelDataSource"]
