"""End-to-end model build for one provider, profile and as-of date."""
from __future__ import annotations

import logging
from datetime import date
from typing import TYPE_CHECKING, Callable, Iterable, Mapping, Optional, Sequence

from ..models import AllocationTargets, Line, Profile, Provider, Snapshot, Symbol
from .assembler import assemble
from .enforcer import TargetChooser, choose_redistribution_target, enforce
from .finalizer import finalize, new_snapshot_id
from .policy import DEFAULT_POLICY, ModelPolicy
from .selector import Selection, score_universe, select_candidates

if TYPE_CHECKING:
    from ..sources.base import ModelDataSource

LOGGER = logging.getLogger(__name__)


def describe(
    asof: date,
    provider: Provider,
    profile: Profile,
    selection: Selection,
    lines: Sequence[Line],
) -> str:
    """Human readable summary stored alongside the snapshot."""

    equity = ", ".join(c.ticker for c in selection.equity_cores) or "none"
    bond = selection.bond_core.ticker if selection.bond_core else "none"
    cash = selection.cash.ticker if selection.cash else "none"
    return (
        f"{profile.value} model for {provider.value} as of {asof.isoformat()}. "
        f"Equity core: {equity}. Bond core: {bond}. Cash: {cash}. {len(lines)} lines."
    )


def build_from_universe(
    asof: date,
    provider: Provider,
    profile: Profile,
    symbols: Iterable[Symbol],
    scores: Mapping[str, Optional[float]],
    targets: AllocationTargets,
    policy: ModelPolicy = DEFAULT_POLICY,
    choose_target: TargetChooser = choose_redistribution_target,
    id_factory: Callable[[], str] = new_snapshot_id,
) -> Snapshot:
    """Build a snapshot from data the caller has already loaded.

    An empty universe, or one with nothing eligible, yields a snapshot with
    no lines and an explanatory note rather than an error.
    """

    universe = score_universe(symbols, scores, policy)
    if not universe:
        LOGGER.warning("No active symbols for %s; returning empty %s model", provider.value, profile.value)
        note = f"No active symbols for {provider.value}; {profile.value} model not built."
        return finalize(asof, provider, profile, (), note, id_factory)

    selection = select_candidates(universe, policy)
    raw = assemble(targets, selection, policy)
    if not raw:
        LOGGER.warning("No eligible funds for %s %s model", provider.value, profile.value)
        note = (
            f"No eligible core or satellite funds among {len(universe)} active symbols "
            f"for {provider.value}; {profile.value} model not built."
        )
        return finalize(asof, provider, profile, (), note, id_factory)

    lines = enforce(raw, selection, policy, choose_target)
    snapshot = finalize(
        asof, provider, profile, lines, describe(asof, provider, profile, selection, lines), id_factory
    )
    LOGGER.info(
        "Built %s/%s model as of %s with %d lines",
        provider.value,
        profile.value,
        asof.isoformat(),
        len(snapshot.lines),
    )
    return snapshot


def build_snapshot(
    asof: date,
    provider: Provider,
    profile: Profile,
    source: "ModelDataSource",
    policy: ModelPolicy = DEFAULT_POLICY,
) -> Snapshot:
    """Load inputs from ``source`` and build one snapshot.

    Data access errors propagate to the caller untouched.
    """

    symbols = source.load_active_symbols(provider)
    scores = source.load_scores(asof, symbols) if symbols else {}
    targets = source.load_allocation_targets(profile)
    return build_from_universe(asof, provider, profile, symbols, scores, targets, policy)


__all__ = ["describe", "build_from_universe", "build_snapshot"]
