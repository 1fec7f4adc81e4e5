"""Static fund reference data used for labels and grading."""
from __future__ import annotations

import re

# Tickers listed here count as "curated" when grading. Unknown tickers fall
# back to the bare symbol for display.
FUND_LABELS: dict[str, str] = {
    # Common
    "FSKAX": "Fidelity® Total Market Index",
    "FXNAX": "Fidelity® U.S. Bond Index",
    # Fidelity
    "FFGCX": "Fidelity® Global Commodity Stock",
    "FSELX": "Fidelity® Select Semiconductors",
    "FSPHX": "Fidelity® Select Health Care",
    "FBIOX": "Fidelity® Select Biotechnology",
    "FSDAX": "Fidelity® Select Materials",
    "FSPTX": "Fidelity® Select Technology",
    "FSAVX": "Fidelity® Select Automotive",
    "FPHAX": "Fidelity® Select Pharmaceuticals",
    "FEMKX": "Fidelity® Emerging Markets",
    "FCOM": "Fidelity® MSCI Communication Services ETF",
    "FNARX": "Fidelity® Select Natural Resources",
    "FSUTX": "Fidelity® Select Utilities",
    "FXAIX": "Fidelity® 500 Index",
    "FTIHX": "Fidelity® Total International Index",
    "FDIS": "Fidelity® MSCI Consumer Discretionary ETF",
    "FSPCX": "Fidelity® Select Insurance",
    "FIDU": "Fidelity® MSCI Industrials ETF",
    "FSENX": "Fidelity® Select Energy",
    "FMAT": "Fidelity® MSCI Materials ETF",
    "FSTA": "Fidelity® MSCI Consumer Staples ETF",
    "FTEC": "Fidelity® MSCI Information Technology ETF",
    "FUTY": "Fidelity® MSCI Utilities ETF",
    "FHLC": "Fidelity® MSCI Health Care ETF",
    "FENY": "Fidelity® MSCI Energy ETF",
    "FNCL": "Fidelity® MSCI Financials ETF",
    "FREL": "Fidelity® MSCI Real Estate ETF",
    "FBND": "Fidelity® Total Bond ETF",
    "FCOR": "Fidelity® Corporate Bond ETF",
    "FVAL": "Fidelity® Value Factor ETF",
    "FQAL": "Fidelity® Quality Factor ETF",
    "FDMO": "Fidelity® Momentum Factor ETF",
    "FDRR": "Fidelity® Dividend for Rising Rates ETF",
    "FDLO": "Fidelity® Low Volatility Factor ETF",
    "FIDI": "Fidelity® Intl High Dividend ETF",
    "FIVA": "Fidelity® Intl Value Factor ETF",
    "FLRG": "Fidelity® U.S. Multifactor ETF",
    "FBCG": "Fidelity® Blue Chip Growth ETF",
    "FBCV": "Fidelity® Blue Chip Value ETF",
    "FDVV": "Fidelity® High Dividend ETF",
    "FDCPX": "Fidelity® Select Tech Hardware Portfolio",
    "SPAXX": "Fidelity® Government Money Market Fund",
    # Vanguard
    "VOO": "Vanguard S&P 500 ETF",
    "VFIAX": "Vanguard 500 Index Fund Admiral",
    "VTI": "Vanguard Total Stock Market ETF",
    "VTSAX": "Vanguard Total Stock Market Index Admiral",
    "VXUS": "Vanguard Total International Stock ETF",
    "VTIAX": "Vanguard Total Intl Stock Index Admiral",
    "VWO": "Vanguard FTSE Emerging Markets ETF",
    "BND": "Vanguard Total Bond Market ETF",
    "VTIP": "Vanguard Short-Term Inflation-Protected Securities ETF",
    "VGSH": "Vanguard Short-Term Treasury ETF",
    "VNQ": "Vanguard Real Estate ETF",
    "VIG": "Vanguard Dividend Appreciation ETF",
    "VYM": "Vanguard High Dividend Yield ETF",
    "VPU": "Vanguard Utilities ETF",
    "VDE": "Vanguard Energy ETF",
    "VGT": "Vanguard Information Technology ETF",
    # Schwab
    "SCHB": "Schwab U.S. Broad Market ETF",
    "SCHX": "Schwab U.S. Large-Cap ETF",
    "SCHG": "Schwab U.S. Large-Cap Growth ETF",
    "SCHV": "Schwab U.S. Large-Cap Value ETF",
    "SCHF": "Schwab International Equity ETF",
    "SCHZ": "Schwab U.S. Aggregate Bond ETF",
    "SCHP": "Schwab U.S. TIPS ETF",
    "SCHO": "Schwab Short-Term U.S. Treasury ETF",
    "SCHD": "Schwab U.S. Dividend Equity ETF",
    # State Street / SPDR
    "SPY": "SPDR S&P 500 ETF Trust",
    "SPLG": "SPDR Portfolio S&P 500 ETF",
    "SPMD": "SPDR Portfolio Mid Cap ETF",
    "SPSM": "SPDR Portfolio Small Cap ETF",
    "XLK": "Technology Select Sector SPDR",
    "XLF": "Financial Select Sector SPDR",
    "XLV": "Health Care Select Sector SPDR",
    "XLU": "Utilities Select Sector SPDR",
    "XLY": "Consumer Discretionary Select Sector SPDR",
    # iShares / BlackRock
    "IVV": "iShares Core S&P 500 ETF",
    "ITOT": "iShares Core S&P Total U.S. Stock Market ETF",
    "AGG": "iShares Core U.S. Aggregate Bond ETF",
    "IXUS": "iShares Core MSCI Total International Stock ETF",
    # Invesco
    "QQQ": "Invesco QQQ Trust",
    "QQQM": "Invesco NASDAQ-100 ETF",
    "SPLV": "Invesco S&P 500 Low Volatility ETF",
}

BOND_PATTERN = re.compile(
    r"\b(bond|treasury|fixed income|aggregate|corporate|muni|municipal|income|tips|inflation-protected)\b"
)


def normalize_symbol(raw: str | None) -> str:
    """Uppercase and strip all whitespace from a ticker."""

    return re.sub(r"\s+", "", (raw or "").upper())


def fund_name(symbol: str) -> str:
    """Descriptive name for a ticker, or an empty string when unknown."""

    return FUND_LABELS.get(normalize_symbol(symbol), "")


def label_for(symbol: str) -> str:
    """Return ``"TICKER — Name"`` when known, else just the ticker."""

    sym = normalize_symbol(symbol)
    name = FUND_LABELS.get(sym)
    return f"{sym} — {name}" if name else sym


def is_curated(symbol: str) -> bool:
    return normalize_symbol(symbol) in FUND_LABELS


def is_bond_like(symbol: str) -> bool:
    return bool(BOND_PATTERN.search(fund_name(symbol).lower()))


def fund_family(symbol: str) -> str:
    """First word of the display label, which is the ticker itself."""

    words = label_for(symbol).split()
    return words[0] if words else ""


__all__ = [
    "FUND_LABELS",
    "normalize_symbol",
    "fund_name",
    "label_for",
    "is_curated",
    "is_bond_like",
    "fund_family",
]
