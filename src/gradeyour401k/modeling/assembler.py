"""Distribute bucket targets across core and satellite lines."""
from __future__ import annotations

from typing import Sequence

from ..models import AllocationTargets, Line, Role, ScoredSymbol
from .policy import DEFAULT_POLICY, ModelPolicy
from .selector import Selection

# Budgets below this are float noise left over from subtraction.
_EPSILON = 1e-9


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def emitted_weight(lines: Sequence[Line]) -> float:
    return sum(line.weight for line in lines)


def distribute_satellites(
    bucket: float,
    candidates: Sequence[ScoredSymbol],
    existing: Sequence[Line],
    policy: ModelPolicy = DEFAULT_POLICY,
    limit: int | None = None,
) -> tuple[Line, ...]:
    """Spread ``bucket`` over ranked candidates in roughly equal slices.

    Each slice is ``bucket / n`` bounded to ``[min_line, max_line]`` and is
    consumed in rank order. Distribution stops once a slice would fall below
    ``min_slice`` or the portfolio would exceed ``max_distinct`` symbols; any
    unconsumed budget is left for later normalization.
    """

    limit = policy.max_equity_satellites if limit is None else limit
    pool = list(candidates[:limit])
    if bucket <= _EPSILON or not pool:
        return ()

    per = _clamp(bucket / len(pool), policy.min_line, policy.max_line)
    distinct = {line.symbol for line in existing}
    remaining = bucket
    emitted: list[Line] = []
    for candidate in pool:
        if candidate.ticker not in distinct and len(distinct) >= policy.max_distinct:
            break
        amount = min(per, remaining)
        if amount < policy.min_slice:
            break
        emitted.append(Line(candidate.ticker, amount, Role.SATELLITE))
        distinct.add(candidate.ticker)
        remaining -= amount
    return tuple(emitted)


def allocate_cash(
    lines: tuple[Line, ...],
    targets: AllocationTargets,
    selection: Selection,
) -> tuple[Line, ...]:
    if targets.cash <= 0 or selection.cash is None:
        return lines
    return lines + (Line(selection.cash.ticker, _clamp(targets.cash, 0.0, 1.0), Role.CORE),)


def allocate_equity(
    lines: tuple[Line, ...],
    targets: AllocationTargets,
    selection: Selection,
    policy: ModelPolicy = DEFAULT_POLICY,
) -> tuple[Line, ...]:
    """Split the equity budget into core and satellite lines."""

    budget = _clamp(targets.equity, 0.0, 1.0 - emitted_weight(lines))
    if budget <= _EPSILON:
        return lines

    cores = selection.equity_cores
    if cores:
        core_budget = budget * policy.equity_core_share
        satellite_budget = budget - core_budget
        if len(cores) == 2:
            us_weight = core_budget * policy.equity_us_share
            lines = lines + (
                Line(cores[0].ticker, us_weight, Role.CORE),
                Line(cores[1].ticker, core_budget - us_weight, Role.CORE),
            )
        else:
            lines = lines + (Line(cores[0].ticker, core_budget, Role.CORE),)
    else:
        satellite_budget = budget

    return lines + distribute_satellites(
        satellite_budget,
        selection.equity_satellites,
        lines,
        policy,
        limit=policy.max_equity_satellites,
    )


def allocate_residual_bond(
    lines: tuple[Line, ...],
    selection: Selection,
    policy: ModelPolicy = DEFAULT_POLICY,
) -> tuple[Line, ...]:
    """ResidualBondAllocation: everything not yet emitted goes to bonds.

    The bond target is never read here. Anchoring the last bucket to the
    remainder keeps the total mass at one even when the policy table's
    equity, bond and cash targets do not add up.
    """

    budget = max(0.0, 1.0 - emitted_weight(lines))
    if budget <= _EPSILON:
        return lines

    if selection.bond_core is not None:
        core_weight = budget * policy.bond_core_share
        lines = lines + (Line(selection.bond_core.ticker, core_weight, Role.CORE),)
        satellite_budget = budget - core_weight
    else:
        satellite_budget = budget

    return lines + distribute_satellites(
        satellite_budget,
        selection.bond_satellites,
        lines,
        policy,
        limit=policy.max_bond_satellites,
    )


def merge_duplicates(lines: Sequence[Line]) -> tuple[Line, ...]:
    """Collapse repeated symbols into one line, keeping the first role."""

    merged: dict[str, Line] = {}
    for line in lines:
        current = merged.get(line.symbol)
        if current is None:
            merged[line.symbol] = line
        else:
            merged[line.symbol] = Line(line.symbol, current.weight + line.weight, current.role)
    return tuple(merged.values())


def assemble(
    targets: AllocationTargets,
    selection: Selection,
    policy: ModelPolicy = DEFAULT_POLICY,
) -> tuple[Line, ...]:
    """Build the raw, un-normalized lines for one model."""

    lines: tuple[Line, ...] = ()
    lines = allocate_cash(lines, targets, selection)
    lines = allocate_equity(lines, targets, selection, policy)
    lines = allocate_residual_bond(lines, selection, policy)
    return merge_duplicates(lines)


__all__ = [
    "assemble",
    "allocate_cash",
    "allocate_equity",
    "allocate_residual_bond",
    "distribute_satellites",
    "emitted_weight",
    "merge_duplicates",
]
