"""In-memory model data source and the seed universe."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Mapping, Optional, Sequence

from ..funds import fund_name, is_bond_like
from ..models import DEFAULT_TARGETS, AllocationTargets, AssetClass, Profile, Provider, Symbol
from ..providers import MODEL_PROVIDER_KEYS, PROVIDER_TICKERS
from .base import ModelDataSource

MONEY_MARKET_TICKERS = frozenset({"SPAXX", "FDRXX", "VMFXX", "SWVXX", "IPLXX", "IVMXX"})


class StaticSource(ModelDataSource):
    """Serves a fixed universe, one score map and optional targets."""

    def __init__(
        self,
        symbols: Iterable[Symbol],
        scores: Mapping[str, Optional[float]] | None = None,
        targets: Mapping[Profile, AllocationTargets] | None = None,
    ) -> None:
        self.symbols = list(symbols)
        self.scores = dict(scores or {})
        self.targets = dict(targets or {})

    def load_active_symbols(self, provider: Provider) -> list[Symbol]:
        return [s for s in self.symbols if s.provider is provider and s.is_active]

    def load_scores(self, asof: date, symbols: Sequence[Symbol]) -> Mapping[str, Optional[float]]:
        wanted = {s.symbol for s in symbols}
        return {ticker: score for ticker, score in self.scores.items() if ticker in wanted}

    def load_allocation_targets(self, profile: Profile) -> AllocationTargets:
        return self.targets.get(profile, DEFAULT_TARGETS[profile])


def classify_ticker(ticker: str) -> AssetClass:
    """Best-effort asset class from the fund label table."""

    name = fund_name(ticker).lower()
    if ticker in MONEY_MARKET_TICKERS or "money market" in name:
        return AssetClass.CASH
    if is_bond_like(ticker):
        return AssetClass.BOND
    return AssetClass.EQUITY


def seed_universe(providers: Iterable[Provider] = tuple(Provider)) -> list[Symbol]:
    """Build symbol reference rows from the provider ticker lists."""

    rows: list[Symbol] = []
    for provider in providers:
        for ticker in PROVIDER_TICKERS.get(MODEL_PROVIDER_KEYS[provider], ()):
            rows.append(
                Symbol(
                    symbol=ticker,
                    provider=provider,
                    asset_class=classify_ticker(ticker),
                    style=fund_name(ticker) or None,
                )
            )
    return rows


__all__ = ["StaticSource", "classify_ticker", "seed_universe", "MONEY_MARKET_TICKERS"]
