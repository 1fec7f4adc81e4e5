"""Database backed model data source."""
from __future__ import annotations

import logging
from datetime import date
from typing import Mapping, Optional, Sequence

from sqlalchemy.engine import Engine

from .. import db
from ..models import DEFAULT_TARGETS, AllocationTargets, Profile, Provider, Symbol
from .base import ModelDataSource

LOGGER = logging.getLogger(__name__)


class DatabaseSource(ModelDataSource):
    """Reads symbols, scores and targets from the application database."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def load_active_symbols(self, provider: Provider) -> list[Symbol]:
        found = db.load_active_symbols(self.engine, provider)
        LOGGER.debug("Loaded %d active symbols for %s", len(found), provider.value)
        return found

    def load_scores(self, asof: date, symbols: Sequence[Symbol]) -> Mapping[str, Optional[float]]:
        scores = db.load_scores(self.engine, asof, [s.symbol for s in symbols])
        missing = len(symbols) - sum(1 for value in scores.values() if value is not None)
        if missing:
            LOGGER.info("%d of %d symbols have no score for %s", missing, len(symbols), asof)
        return scores

    def load_allocation_targets(self, profile: Profile) -> AllocationTargets:
        targets = db.load_allocation_targets(self.engine, profile)
        if targets is None:
            LOGGER.info("No stored targets for %s; using defaults", profile.value)
            return DEFAULT_TARGETS[profile]
        return targets


__all__ = ["DatabaseSource"]
