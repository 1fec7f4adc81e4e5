"""Core and satellite candidate selection."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Sequence

from ..models import AssetClass, ScoredSymbol, Symbol
from .policy import DEFAULT_POLICY, ModelPolicy

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RoleMatcher:
    """Style keywords and canonical tickers that identify a core role."""

    asset_class: AssetClass
    keywords: tuple[str, ...]
    tickers: tuple[str, ...]
    excludes: tuple[str, ...] = ()


EQUITY_US = RoleMatcher(
    AssetClass.EQUITY,
    ("total market", "total stock", "broad market", "total us", "s&p 500"),
    ("FSKAX", "VTI", "VTSAX", "SCHB", "ITOT", "FXAIX", "VOO", "VFIAX", "IVV", "SPLG", "SPY", "SCHX"),
    excludes=("international", "intl", "ex-us", "world", "emerging"),
)
EQUITY_INTL = RoleMatcher(
    AssetClass.EQUITY,
    ("total international", "total intl", "international index", "intl index", "ex-us"),
    ("FTIHX", "FSPSX", "VXUS", "VTIAX", "IXUS", "SCHF", "VEA", "IEFA"),
)
BOND_CORE = RoleMatcher(
    AssetClass.BOND,
    ("aggregate", "total bond", "u.s. bond", "core bond"),
    ("FXNAX", "FBND", "BND", "VBTLX", "SCHZ", "AGG", "IUSB"),
)
BOND_TIPS = RoleMatcher(
    AssetClass.BOND,
    ("tips", "inflation"),
    ("FIPDX", "VTIP", "SCHP", "SPIP", "TIP"),
)
BOND_SHORT = RoleMatcher(
    AssetClass.BOND,
    ("short-term", "short term", "short duration", "ultra short", "ultra-short"),
    ("VGSH", "BSV", "VUSB", "SCHO", "FUMBX"),
)
CASH_PROXY = RoleMatcher(
    AssetClass.CASH,
    ("money market", "government money", "treasury bill", "cash"),
    ("SPAXX", "FDRXX", "VMFXX", "SWVXX", "IPLXX", "IVMXX"),
)


@dataclass(frozen=True, slots=True)
class Selection:
    """Result of core/satellite selection for one provider."""

    equity_us: Optional[ScoredSymbol] = None
    equity_intl: Optional[ScoredSymbol] = None
    bond_core: Optional[ScoredSymbol] = None
    bond_tips: Optional[ScoredSymbol] = None
    bond_short: Optional[ScoredSymbol] = None
    cash: Optional[ScoredSymbol] = None
    equity_satellites: tuple[ScoredSymbol, ...] = field(default_factory=tuple)
    bond_satellites: tuple[ScoredSymbol, ...] = field(default_factory=tuple)

    @property
    def equity_cores(self) -> tuple[ScoredSymbol, ...]:
        return tuple(c for c in (self.equity_us, self.equity_intl) if c is not None)

    @property
    def core_tickers(self) -> set[str]:
        cores = (*self.equity_cores, self.bond_core, self.cash)
        return {c.ticker for c in cores if c is not None}

    @property
    def candidate_count(self) -> int:
        tickers = self.core_tickers
        tickers.update(s.ticker for s in self.equity_satellites)
        tickers.update(s.ticker for s in self.bond_satellites)
        return len(tickers)

    @property
    def is_empty(self) -> bool:
        return self.candidate_count == 0


def score_universe(
    symbols: Iterable[Symbol],
    scores: Mapping[str, Optional[float]],
    policy: ModelPolicy = DEFAULT_POLICY,
) -> list[ScoredSymbol]:
    """Join active symbols with scores, substituting the missing-score sentinel."""

    scored: list[ScoredSymbol] = []
    for sym in symbols:
        if not sym.is_active:
            continue
        value = scores.get(sym.symbol)
        scored.append(ScoredSymbol(sym, policy.missing_score if value is None else float(value)))
    return scored


def match_role(
    universe: Sequence[ScoredSymbol],
    matcher: RoleMatcher,
    taken: set[str],
) -> Optional[ScoredSymbol]:
    """Pick the symbol for a core role: style keyword first, then the allow-list."""

    eligible = [
        s for s in universe if s.symbol.asset_class is matcher.asset_class and s.ticker not in taken
    ]
    for candidate in eligible:
        style = (candidate.symbol.style or "").lower()
        if any(word in style for word in matcher.excludes):
            continue
        if any(keyword in style for keyword in matcher.keywords):
            return candidate
    by_ticker = {s.ticker.upper(): s for s in reversed(eligible)}
    for ticker in matcher.tickers:
        if ticker in by_ticker:
            return by_ticker[ticker]
    return None


def _rank_key(item: ScoredSymbol) -> tuple[float, float]:
    expense = item.symbol.expense_ratio
    return (-item.score, float("inf") if expense is None else expense)


def rank_satellites(
    universe: Sequence[ScoredSymbol],
    asset_class: AssetClass,
    exclude: set[str],
) -> list[ScoredSymbol]:
    """Rank remaining symbols of one asset class by score, then by lower fee."""

    pool = [s for s in universe if s.symbol.asset_class is asset_class and s.ticker not in exclude]
    return sorted(pool, key=_rank_key)


def select_candidates(
    universe: Sequence[ScoredSymbol],
    policy: ModelPolicy = DEFAULT_POLICY,
) -> Selection:
    """Choose core holdings per bucket and rank the satellite candidates."""

    if not universe:
        return Selection()

    taken: set[str] = set()

    def claim(matcher: RoleMatcher) -> Optional[ScoredSymbol]:
        chosen = match_role(universe, matcher, taken)
        if chosen is not None:
            taken.add(chosen.ticker)
        return chosen

    equity_us = claim(EQUITY_US)
    equity_intl = claim(EQUITY_INTL)
    bond_core = claim(BOND_CORE)
    cash = claim(CASH_PROXY)
    bond_tips = claim(BOND_TIPS)
    bond_short = claim(BOND_SHORT)

    if equity_us is None and equity_intl is None:
        LOGGER.warning("No equity core candidate found; equity budget goes to satellites")
    if bond_core is None:
        LOGGER.warning("No bond core candidate found")

    cores = {c.ticker for c in (equity_us, equity_intl, bond_core, cash) if c is not None}
    equity_ranked = rank_satellites(universe, AssetClass.EQUITY, cores)
    preferred = [c for c in (bond_tips, bond_short) if c is not None]
    bond_ranked = preferred + rank_satellites(
        universe, AssetClass.BOND, cores | {c.ticker for c in preferred}
    )

    return Selection(
        equity_us=equity_us,
        equity_intl=equity_intl,
        bond_core=bond_core,
        bond_tips=bond_tips,
        bond_short=bond_short,
        cash=cash,
        equity_satellites=tuple(equity_ranked[: policy.max_equity_satellites]),
        bond_satellites=tuple(bond_ranked[: policy.max_bond_satellites]),
    )


__all__ = [
    "RoleMatcher",
    "Selection",
    "score_universe",
    "match_role",
    "rank_satellites",
    "select_candidates",
]
