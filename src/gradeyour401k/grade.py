"""Half-star grading of user-entered 401(k) holdings."""
from __future__ import annotations

import math
from collections import defaultdict
from typing import Iterable, Mapping, Union

from .funds import fund_family, is_bond_like, is_curated, normalize_symbol
from .models import Holding

MIN_GRADE = 1.0
MAX_GRADE = 5.0

# Conservative deliberately sits above Balanced; keep until product confirms.
BASE_SCORES: Mapping[str, float] = {
    "Aggressive Growth": 4.5,
    "Growth": 4.5,
    "Balanced": 3.8,
    "Conservative": 4.1,
}
BOND_THRESHOLDS: Mapping[str, float] = {
    "Aggressive Growth": 20.0,
    "Growth": 20.0,
    "Balanced": 35.0,
    "Conservative": 50.0,
}
DEFAULT_PROFILE = "Conservative"

HoldingLike = Union[Holding, Mapping[str, object]]


def _profile_key(profile: object) -> str:
    name = str(getattr(profile, "value", profile) or "").strip()
    return name if name in BASE_SCORES else DEFAULT_PROFILE


def _coerce(rows: Iterable[HoldingLike]) -> list[Holding]:
    clean: list[Holding] = []
    for row in rows or ():
        if isinstance(row, Holding):
            symbol, raw_weight = row.symbol, row.weight
        else:
            symbol, raw_weight = row.get("symbol"), row.get("weight")
        try:
            weight = float(raw_weight)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            continue
        sym = normalize_symbol(str(symbol or ""))
        if sym and math.isfinite(weight) and weight > 0:
            clean.append(Holding(sym, weight))
    return clean


def snap_half_star(value: float) -> float:
    """Clamp to ``[MIN_GRADE, MAX_GRADE]`` and round half-up to the nearest 0.5."""

    clamped = max(MIN_GRADE, min(MAX_GRADE, value))
    # Trim float noise so x.25 / x.75 boundaries round up consistently.
    return math.floor(round(clamped, 6) * 2 + 0.5) / 2


def format_grade(value: float) -> str:
    if not math.isfinite(value):
        return "—"
    return f"{snap_half_star(value):.1f}"


def compute_grade(profile: object, holdings: Iterable[HoldingLike]) -> float:
    """Score a holdings list from 1.0 to 5.0 in half-star steps.

    ``profile`` is one of Growth, Aggressive Growth, Balanced or
    Conservative; anything else is graded as Conservative. Weights are
    percentages. The score starts from a per-profile base and is adjusted
    for allocation completeness, single-position concentration, fund count,
    curated coverage, fund-family concentration and bond exposure.
    """

    key = _profile_key(profile)
    clean = _coerce(holdings)
    total = sum(h.weight for h in clean)
    score = BASE_SCORES[key]

    off = abs(100.0 - total)
    if off > 0.25:
        score -= min(0.8, off / 100.0)

    if total > 0 and max(h.weight for h in clean) / total * 100.0 > 60.0:
        score -= 0.2

    distinct = len({h.symbol for h in clean})
    if 6 <= distinct <= 8:
        score += 0.35
    else:
        score -= 0.05 * min(abs(distinct - 7), 10)

    if distinct:
        curated = len({h.symbol for h in clean if is_curated(h.symbol)})
        score += 0.5 * (curated / distinct - 0.6)

    if total > 0:
        families: dict[str, float] = defaultdict(float)
        for h in clean:
            families[fund_family(h.symbol)] += h.weight
        top_share = max(families.values()) / total * 100.0
        if 55.0 <= top_share <= 85.0:
            score += 0.25
        elif top_share > 90.0:
            score -= 0.1

    bond_pct = sum(h.weight for h in clean if is_bond_like(h.symbol))
    excess = bond_pct - BOND_THRESHOLDS[key]
    if excess > 0:
        score -= min(0.9, excess * 0.03)

    return snap_half_star(score)


__all__ = [
    "MIN_GRADE",
    "MAX_GRADE",
    "BASE_SCORES",
    "BOND_THRESHOLDS",
    "compute_grade",
    "format_grade",
    "snap_half_star",
]
