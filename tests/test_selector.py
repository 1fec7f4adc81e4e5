from __future__ import annotations

from gradeyour401k.models import AssetClass
from gradeyour401k.modeling.policy import ModelPolicy
from gradeyour401k.modeling.selector import (
    EQUITY_INTL,
    EQUITY_US,
    match_role,
    rank_satellites,
    score_universe,
    select_candidates,
)

from .conftest import make_symbol


def test_score_universe_skips_inactive_and_uses_sentinel() -> None:
    symbols = [
        make_symbol("AAA"),
        make_symbol("BBB", is_active=False),
        make_symbol("CCC"),
    ]

    scored = score_universe(symbols, {"AAA": 0.4})

    assert [s.ticker for s in scored] == ["AAA", "CCC"]
    assert scored[0].score == 0.4
    assert scored[1].score == -999.0


def test_select_candidates_assigns_core_roles(fidelity_universe, fidelity_scores) -> None:
    selection = select_candidates(score_universe(fidelity_universe, fidelity_scores))

    assert selection.equity_us.ticker == "FSKAX"
    assert selection.equity_intl.ticker == "FTIHX"
    assert selection.bond_core.ticker == "FXNAX"
    assert selection.cash.ticker == "SPAXX"
    assert selection.bond_tips.ticker == "FIPDX"
    assert selection.bond_short.ticker == "FUMBX"


def test_equity_satellites_ranked_by_score_and_capped(fidelity_universe, fidelity_scores) -> None:
    selection = select_candidates(score_universe(fidelity_universe, fidelity_scores))

    assert [s.ticker for s in selection.equity_satellites] == [
        "FTEC",
        "FHLC",
        "FBCG",
        "FDMO",
        "FQAL",
        "FVAL",
    ]
    assert "FSKAX" not in {s.ticker for s in selection.equity_satellites}


def test_bond_satellites_lead_with_tips_then_short(fidelity_universe, fidelity_scores) -> None:
    selection = select_candidates(score_universe(fidelity_universe, fidelity_scores))

    assert [s.ticker for s in selection.bond_satellites] == ["FIPDX", "FUMBX", "FCOR"]


def test_allow_list_used_when_style_has_no_keyword() -> None:
    universe = score_universe(
        [make_symbol("ZZZZ", style="Something"), make_symbol("VTI"), make_symbol("VXUS")],
        {},
    )

    assert match_role(universe, EQUITY_US, set()).ticker == "VTI"
    assert match_role(universe, EQUITY_INTL, {"VTI"}).ticker == "VXUS"


def test_international_total_stock_fund_is_not_a_us_core() -> None:
    universe = score_universe(
        [
            make_symbol("VXUS", style="Vanguard Total International Stock ETF"),
            make_symbol("VTI", style="Vanguard Total Stock Market ETF"),
        ],
        {},
    )

    assert match_role(universe, EQUITY_US, set()).ticker == "VTI"


def test_taken_symbols_are_not_reused() -> None:
    universe = score_universe([make_symbol("FSKAX", style="Total Market Index")], {})

    assert match_role(universe, EQUITY_US, {"FSKAX"}) is None


def test_rank_ties_break_on_lower_expense_ratio() -> None:
    universe = score_universe(
        [
            make_symbol("PRICEY", expense_ratio=0.009),
            make_symbol("UNKNOWN"),
            make_symbol("CHEAP", expense_ratio=0.001),
        ],
        {"PRICEY": 0.5, "UNKNOWN": 0.5, "CHEAP": 0.5},
    )

    ranked = rank_satellites(universe, AssetClass.EQUITY, set())

    assert [s.ticker for s in ranked] == ["CHEAP", "PRICEY", "UNKNOWN"]


def test_unscored_symbols_rank_last() -> None:
    universe = score_universe(
        [make_symbol("NOSCORE"), make_symbol("LOW"), make_symbol("HIGH")],
        {"LOW": -0.3, "HIGH": 0.2},
    )

    ranked = rank_satellites(universe, AssetClass.EQUITY, set())

    assert [s.ticker for s in ranked] == ["HIGH", "LOW", "NOSCORE"]


def test_satellite_limits_follow_policy(fidelity_universe, fidelity_scores) -> None:
    policy = ModelPolicy(max_equity_satellites=2, max_bond_satellites=1)

    selection = select_candidates(score_universe(fidelity_universe, fidelity_scores, policy), policy)

    assert len(selection.equity_satellites) == 2
    assert [s.ticker for s in selection.bond_satellites] == ["FIPDX"]


def test_empty_universe_gives_empty_selection() -> None:
    selection = select_candidates([])

    assert selection.is_empty
    assert selection.candidate_count == 0
