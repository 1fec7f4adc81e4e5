from __future__ import annotations

import itertools

import pytest

from gradeyour401k.models import AllocationTargets, AssetClass, DEFAULT_TARGETS, Profile, Provider, Role
from gradeyour401k.modeling import DEFAULT_POLICY, ModelPolicy, build_from_universe, build_snapshot
from gradeyour401k.sources import StaticSource

from .conftest import ASOF, make_symbol


def _build(universe, scores, profile=Profile.GROWTH, policy=DEFAULT_POLICY, **kwargs):
    return build_from_universe(
        ASOF, Provider.FIDELITY, profile, universe, scores, DEFAULT_TARGETS[profile], policy, **kwargs
    )


def assert_model_invariants(snapshot, policy: ModelPolicy = DEFAULT_POLICY) -> None:
    lines = snapshot.lines
    assert policy.min_distinct <= len(lines) <= policy.max_distinct
    assert len({line.symbol for line in lines}) == len(lines)
    assert snapshot.total_weight == pytest.approx(1.0, abs=1e-4)
    assert all(line.weight > 0 for line in lines)
    assert len([line for line in lines if line.weight > policy.max_line + 1e-9]) <= 1
    assert [line.rank for line in lines] == list(range(1, len(lines) + 1))
    assert [(-line.weight, line.symbol) for line in lines] == sorted(
        (-line.weight, line.symbol) for line in lines
    )


@pytest.mark.parametrize("profile", list(Profile))
def test_every_profile_satisfies_model_invariants(profile, fidelity_universe, fidelity_scores) -> None:
    snapshot = _build(fidelity_universe, fidelity_scores, profile)

    assert_model_invariants(snapshot)
    over_cap = [line for line in snapshot.lines if line.weight > DEFAULT_POLICY.max_line + 1e-9]
    assert all(line.role is Role.CORE for line in over_cap)


def test_growth_model_layout(fidelity_universe, fidelity_scores) -> None:
    snapshot = _build(fidelity_universe, fidelity_scores)

    symbols = [line.symbol for line in snapshot.lines]
    assert symbols[:3] == ["FSKAX", "FTIHX", "FXNAX"]
    assert set(symbols[3:]) == {"FTEC", "FHLC", "FBCG", "FDMO", "FQAL"}
    assert snapshot.lines[1].weight == pytest.approx(0.15)
    assert snapshot.notes.startswith("Growth model for Fidelity as of 2026-10-19.")
    assert snapshot.notes.endswith("8 lines.")


def test_build_is_deterministic_apart_from_id(fidelity_universe, fidelity_scores) -> None:
    ids = itertools.count(1)

    first = _build(fidelity_universe, fidelity_scores, id_factory=lambda: f"id-{next(ids)}")
    second = _build(fidelity_universe, fidelity_scores, id_factory=lambda: f"id-{next(ids)}")

    assert first.snapshot_id != second.snapshot_id
    assert first.lines == second.lines
    assert first.notes == second.notes


def test_default_ids_are_unique(fidelity_universe, fidelity_scores) -> None:
    first = _build(fidelity_universe, fidelity_scores)
    second = _build(fidelity_universe, fidelity_scores)

    assert first.snapshot_id != second.snapshot_id


def test_sparse_universe_is_padded_to_minimum_count() -> None:
    universe = [
        make_symbol("FSKAX", style="Total Market Index"),
        make_symbol("FXNAX", AssetClass.BOND, "U.S. Bond Index"),
        make_symbol("E1"),
        make_symbol("E2"),
        make_symbol("E3"),
    ]

    snapshot = _build(universe, {"E1": 0.3, "E2": 0.2, "E3": 0.1}, Profile.CONSERVATIVE)

    assert_model_invariants(snapshot)
    weights = {line.symbol: line.weight for line in snapshot.lines}
    assert weights["E3"] == pytest.approx(0.0001)
    assert snapshot.lines[0].symbol == "FSKAX"


def test_looser_policy_is_honoured(fidelity_universe, fidelity_scores) -> None:
    policy = ModelPolicy(max_line=0.5, min_line=0.02)

    snapshot = _build(fidelity_universe, fidelity_scores, Profile.BALANCED, policy)

    assert_model_invariants(snapshot, policy)


@pytest.mark.parametrize(
    "universe",
    [[], [make_symbol("OLD", is_active=False)]],
    ids=["no-symbols", "inactive-only"],
)
def test_empty_universe_gives_empty_snapshot_with_note(universe) -> None:
    snapshot = _build(universe, {})

    assert snapshot.lines == ()
    assert "No active symbols for Fidelity" in snapshot.notes


def test_universe_without_eligible_funds_gives_empty_snapshot() -> None:
    snapshot = _build([make_symbol("GOLD", AssetClass.ALT)], {})

    assert snapshot.lines == ()
    assert "No eligible core or satellite funds" in snapshot.notes


def test_build_snapshot_reads_from_source(fidelity_universe, fidelity_scores) -> None:
    targets = {Profile.GROWTH: AllocationTargets(equity=0.8, bond=0.2)}
    source = StaticSource(fidelity_universe, fidelity_scores, targets)

    snapshot = build_snapshot(ASOF, Provider.FIDELITY, Profile.GROWTH, source)

    assert snapshot.provider is Provider.FIDELITY
    assert snapshot.asof_date == ASOF
    assert_model_invariants(snapshot)


def test_build_snapshot_for_provider_without_symbols(fidelity_universe) -> None:
    source = StaticSource(fidelity_universe)

    snapshot = build_snapshot(ASOF, Provider.OTHER, Profile.BALANCED, source)

    assert snapshot.lines == ()
    assert snapshot.notes


def test_unused_cash_core_pads_when_satellites_run_out() -> None:
    universe = [
        make_symbol("FSKAX", style="Total Market Index"),
        make_symbol("FTIHX", style="Total International Index"),
        make_symbol("FXNAX", AssetClass.BOND, "U.S. Bond Index"),
        make_symbol("SPAXX", AssetClass.CASH, "Government Money Market"),
        make_symbol("E1"),
    ]

    snapshot = _build(universe, {"E1": 0.5}, Profile.GROWTH)

    assert_model_invariants(snapshot)
    padded = {line.symbol: line for line in snapshot.lines}["SPAXX"]
    assert padded.weight == pytest.approx(0.0001)
    assert padded.role is Role.SATELLITE
