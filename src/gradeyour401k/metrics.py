"""Price-derived metrics and the composite score used to rank satellites."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable, Optional

import numpy as np
import pandas as pd

from .models import SymbolMetrics

VOL_WINDOW = 21
SMA_WINDOW = 126

SCORE_WEIGHTS = {
    "ret_63d": 0.5,
    "ret_21d": 0.3,
    "trend_margin": 0.2,
    "vol_21d": -0.5,
}


@dataclass(frozen=True, slots=True)
class Bar:
    """One daily close."""

    day: date
    close: float


def simple_return(previous: Optional[float], current: Optional[float]) -> Optional[float]:
    if previous is None or current is None:
        return None
    if not (math.isfinite(previous) and math.isfinite(current)) or previous <= 0:
        return None
    return current / previous - 1.0


def composite_score(metrics: SymbolMetrics) -> Optional[float]:
    """Weighted momentum score; ``None`` when any input is missing."""

    total = 0.0
    for name, weight in SCORE_WEIGHTS.items():
        value = getattr(metrics, name)
        if value is None:
            return None
        total += weight * value
    return total


def close_series(bars: Iterable[Bar], asof: date) -> pd.Series:
    """Closes indexed by day, ascending, truncated at ``asof``."""

    bars = list(bars)
    series = pd.Series(
        [bar.close for bar in bars],
        index=pd.DatetimeIndex([pd.Timestamp(bar.day) for bar in bars]),
        dtype="float64",
    )
    series = series[~series.index.duplicated(keep="last")].sort_index()
    return series[series.index <= pd.Timestamp(asof)].dropna()


def compute_metrics(symbol: str, bars: Iterable[Bar], asof: date) -> SymbolMetrics:
    """Compute returns, volatility and trend for ``symbol`` as of ``asof``.

    The latest bar on or before ``asof`` anchors the calculation. Without
    one, every metric is ``None`` so the symbol still participates in
    ranking as least preferred.
    """

    closes = close_series(bars, asof)
    if closes.empty:
        return SymbolMetrics(symbol=symbol, asof_date=asof)

    current = float(closes.iloc[-1])

    def trailing_return(offset: int) -> Optional[float]:
        if len(closes) <= offset:
            return None
        return simple_return(float(closes.iloc[-1 - offset]), current)

    daily = closes.pct_change().replace([np.inf, -np.inf], np.nan).tail(VOL_WINDOW).dropna()
    vol = float(daily.std()) if len(daily) >= 2 else None

    sma = float(closes.tail(SMA_WINDOW).mean())
    trend = current / sma - 1.0 if sma > 0 else None

    metrics = SymbolMetrics(
        symbol=symbol,
        asof_date=asof,
        ret_1d=trailing_return(1),
        ret_21d=trailing_return(21),
        ret_63d=trailing_return(63),
        vol_21d=vol,
        trend_margin=trend,
    )
    return replace(metrics, score=composite_score(metrics))


__all__ = ["Bar", "SCORE_WEIGHTS", "simple_return", "composite_score", "close_series", "compute_metrics"]
