"""Domain models for model portfolios and grading."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class Provider(str, Enum):
    """Distribution provider a model portfolio is built for."""

    FIDELITY = "Fidelity"
    VANGUARD = "Vanguard"
    SCHWAB = "Schwab"
    VOYA = "Voya"
    OTHER = "Other"


class Profile(str, Enum):
    """Investor profile used to pick allocation targets."""

    GROWTH = "Growth"
    BALANCED = "Balanced"
    CONSERVATIVE = "Conservative"


class AssetClass(str, Enum):
    EQUITY = "Equity"
    BOND = "Bond"
    CASH = "Cash"
    ALT = "Alt"


class Role(str, Enum):
    CORE = "Core"
    SATELLITE = "Satellite"


@dataclass(frozen=True, slots=True)
class Symbol:
    """A tradable fund offered by a provider."""

    symbol: str
    provider: Provider
    asset_class: AssetClass
    style: Optional[str] = None
    is_active: bool = True
    expense_ratio: Optional[float] = None


@dataclass(frozen=True, slots=True)
class ScoredSymbol:
    """A symbol joined with its score for one as-of date."""

    symbol: Symbol
    score: float

    @property
    def ticker(self) -> str:
        return self.symbol.symbol


@dataclass(frozen=True, slots=True)
class AllocationTargets:
    """Target fractions per bucket for one profile."""

    equity: float
    bond: float
    cash: float = 0.0


DEFAULT_TARGETS: dict[Profile, AllocationTargets] = {
    Profile.GROWTH: AllocationTargets(equity=0.9, bond=0.1, cash=0.0),
    Profile.BALANCED: AllocationTargets(equity=0.6, bond=0.4, cash=0.0),
    Profile.CONSERVATIVE: AllocationTargets(equity=0.35, bond=0.6, cash=0.05),
}


@dataclass(frozen=True, slots=True)
class Line:
    """One weighted position of a model portfolio."""

    symbol: str
    weight: float
    role: Role
    rank: Optional[int] = None


@dataclass(frozen=True, slots=True)
class Snapshot:
    """An immutable ranked model portfolio for a provider/profile/as-of."""

    snapshot_id: str
    asof_date: date
    provider: Provider
    profile: Profile
    notes: Optional[str]
    lines: tuple[Line, ...] = field(default_factory=tuple)
    is_approved: bool = True

    @property
    def total_weight(self) -> float:
        return sum(line.weight for line in self.lines)


@dataclass(frozen=True, slots=True)
class SymbolMetrics:
    """Price-derived metrics and composite score for one symbol and date."""

    symbol: str
    asof_date: date
    ret_1d: Optional[float] = None
    ret_21d: Optional[float] = None
    ret_63d: Optional[float] = None
    vol_21d: Optional[float] = None
    trend_margin: Optional[float] = None
    score: Optional[float] = None


@dataclass(frozen=True, slots=True)
class Holding:
    """A user-entered holding; ``weight`` is a percentage from 0 to 100."""

    symbol: str
    weight: float


__all__ = [
    "Provider",
    "Profile",
    "AssetClass",
    "Role",
    "Symbol",
    "ScoredSymbol",
    "AllocationTargets",
    "DEFAULT_TARGETS",
    "Line",
    "Snapshot",
    "SymbolMetrics",
    "Holding",
]
