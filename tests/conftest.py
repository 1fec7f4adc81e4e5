from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy import create_engine

from gradeyour401k.db import ensure_schema
from gradeyour401k.models import AssetClass, Provider, Symbol

ASOF = date(2026, 10, 19)

EQUITY_SATELLITES = ["FBCG", "FDMO", "FQAL", "FVAL", "FDVV", "FTEC", "FHLC", "FNCL"]


def make_symbol(
    ticker: str,
    asset_class: AssetClass = AssetClass.EQUITY,
    style: str | None = None,
    expense_ratio: float | None = None,
    provider: Provider = Provider.FIDELITY,
    is_active: bool = True,
) -> Symbol:
    return Symbol(
        symbol=ticker,
        provider=provider,
        asset_class=asset_class,
        style=style,
        is_active=is_active,
        expense_ratio=expense_ratio,
    )


@pytest.fixture
def fidelity_universe() -> list[Symbol]:
    cores = [
        make_symbol("FSKAX", style="Total Market Index", expense_ratio=0.00015),
        make_symbol("FTIHX", style="Total International Index", expense_ratio=0.0006),
        make_symbol("FXNAX", AssetClass.BOND, "U.S. Bond Index", 0.00025),
        make_symbol("FIPDX", AssetClass.BOND, "Inflation-Protected Bond Index", 0.0005),
        make_symbol("FUMBX", AssetClass.BOND, "Short-Term Treasury Bond Index", 0.0003),
        make_symbol("FCOR", AssetClass.BOND, "Corporate Bond ETF", 0.0036),
        make_symbol("SPAXX", AssetClass.CASH, "Government Money Market", 0.0042),
    ]
    satellites = [make_symbol(t, expense_ratio=0.002 + i * 0.0001) for i, t in enumerate(EQUITY_SATELLITES)]
    return cores + satellites


@pytest.fixture
def fidelity_scores() -> dict[str, float]:
    # Higher score first: FTEC, FHLC, FBCG, FDMO, FQAL, FVAL, FDVV, FNCL
    return {
        "FTEC": 0.9,
        "FHLC": 0.8,
        "FBCG": 0.7,
        "FDMO": 0.6,
        "FQAL": 0.5,
        "FVAL": 0.4,
        "FDVV": 0.3,
        "FNCL": 0.2,
        "FCOR": 0.1,
    }


@pytest.fixture
def engine(tmp_path):
    eng = create_engine(
        f"sqlite:///{tmp_path / 'gy4k.db'}",
        future=True,
        connect_args={"check_same_thread": False},
    )
    ensure_schema(eng)
    yield eng
    eng.dispose()
