"""Plan provider metadata and symbol validation."""
from __future__ import annotations

from typing import Literal, Mapping

from .funds import normalize_symbol
from .models import Provider

SymbolStatus = Literal["inList", "custom", "invalid"]

PROVIDER_DISPLAY: Mapping[str, str] = {
    "fidelity": "Fidelity",
    "vanguard": "Vanguard",
    "schwab": "Charles Schwab",
    "invesco": "Invesco",
    "blackrock": "BlackRock / iShares",
    "statestreet": "State Street / SPDR",
    "voya": "Voya",
    "other": "Other provider",
}

PROVIDER_TICKERS: Mapping[str, tuple[str, ...]] = {
    "fidelity": (
        "FFGCX", "FSELX", "FSPHX", "FBIOX", "FSDAX", "FSPTX", "FSAVX", "FPHAX", "FEMKX", "FCOM",
        "FNARX", "FSLG", "FSUTX", "FIDSX", "FBANK", "FXAIX", "FDIS", "FSPCX", "FIDU", "FSENX",
        "FMAT", "FSTA", "FTEC", "FUTY", "FDLSX", "FHLC", "FENY", "FNCL", "FREL", "FBND", "FCOR",
        "FVAL", "FQAL", "FDMO", "FDRR", "FDLO", "FIDI", "FIVA", "FLRG", "FBCG", "FBCV", "FDVV",
        "FSKAX", "FXNAX", "FTIHX", "SPAXX",
    ),
    "vanguard": (
        "VOO", "VFIAX", "VTI", "VTSAX", "VXF", "VXUS", "VTIAX", "VWO", "BND", "VBTLX", "VGSH",
        "VGIT", "VTIP", "VNQ", "VPU", "VDE", "VHT", "VGT", "VFH", "VCR", "VDC", "VIS", "VAW",
        "VOX", "VTV", "VUG", "VB", "VBR", "VO", "VOE", "VOT", "VBK", "VEA", "BSV", "BIV", "BLV",
        "BNDX", "VGLT", "VNQI", "VIG", "VYM", "VTEB", "VT", "VUSB", "VIGI", "VYMI",
    ),
    "schwab": (
        "SCHB", "SCHX", "SCHG", "SCHV", "SCHA", "SCHM", "SCHF", "SCHE", "SCHC", "SCHZ", "SCHP",
        "SCHO", "SCHR", "SCHQ", "SCHI", "SCHJ", "SCHD", "SCHH", "SCCR", "SMBS", "SCUS",
    ),
    "statestreet": (
        "SPY", "SPLG", "SPMD", "SPSM", "SPYG", "SPYV", "XLK", "XLF", "XLV", "XLE", "XLC", "XLY",
        "XLRE", "XLI", "XLB", "XLU", "XBI", "SPHD", "SPIP", "SPHY", "STOT", "TOTL", "OBND",
        "SRLN", "PRIV", "MDY", "DIA",
    ),
    "blackrock": (
        "IVV", "ITOT", "IEMG", "IEFA", "IEUR", "IJH", "IJR", "AGG", "IUSB", "IUSG", "IUSV", "ILTB",
        "IMTB", "IXUS", "IWB", "IVE", "IVW", "IWD", "DVY", "DIVB", "USRT", "IAGG", "IYC", "IYK",
        "IYE", "IXJ",
    ),
    "invesco": (
        "QQQ", "QQQM", "SPHQ", "SPMO", "RSP", "XLG", "PBUS", "SPLV", "BKLN", "RWL", "PRF", "PSCT",
        "SPHD", "XMMO", "XMVM", "XMHQ", "SPHB", "PSR", "CSD",
    ),
    "voya": (
        "IIFIX", "IOSIX", "IIGZX", "IPIRX", "IPLXX", "IVMXX", "IIVGX", "IPIMX", "IPLIX", "IPMIX",
        "IPSIX", "ISDIX", "IDXGX", "ISEIX", "IDXLX", "ISJIX", "ISKIX", "IBRIX", "IPIIX", "IEOHX",
        "IPEIX", "ILBPX", "IIMOX", "IRMIX", "IRGMX", "IVCSX", "IVSOX", "ISZIX", "ISNGX", "ISQIX",
        "ISNLX", "ISRIX", "ISNQX", "IISNX", "VISPX", "VIQIX", "VSICX", "VSIPX", "VSQIX", "VSSIX",
        "IAVIX", "ISGJX", "ICGIX", "ISWIX", "IAGIX", "INGIX", "IRGIX", "IVRIX",
    ),
    "other": (),
}

# Model-building providers map onto the finer grained plan provider keys.
MODEL_PROVIDER_KEYS: Mapping[Provider, str] = {
    Provider.FIDELITY: "fidelity",
    Provider.VANGUARD: "vanguard",
    Provider.SCHWAB: "schwab",
    Provider.VOYA: "voya",
    Provider.OTHER: "other",
}


def normalize_provider_key(value: str) -> str:
    """Map free text such as ``"iShares by BlackRock"`` onto a provider key."""

    text = (value or "").lower().strip()
    if "fidelity" in text:
        return "fidelity"
    if "vanguard" in text:
        return "vanguard"
    if "schwab" in text:
        return "schwab"
    if "invesco" in text:
        return "invesco"
    if "blackrock" in text or "ishares" in text:
        return "blackrock"
    if "state" in text or "spdr" in text:
        return "statestreet"
    if "voya" in text:
        return "voya"
    return "other"


def validate_symbol(provider_key: str, symbol: str) -> SymbolStatus:
    """Classify a ticker against a provider's menu.

    Tickers offered by a different provider are still accepted as
    ``"custom"``.
    """

    sym = normalize_symbol(symbol)
    if not sym:
        return "invalid"
    if sym in PROVIDER_TICKERS.get(provider_key, ()):
        return "inList"
    if any(sym in tickers for tickers in PROVIDER_TICKERS.values()):
        return "custom"
    return "invalid"


__all__ = [
    "SymbolStatus",
    "PROVIDER_DISPLAY",
    "PROVIDER_TICKERS",
    "MODEL_PROVIDER_KEYS",
    "normalize_provider_key",
    "validate_symbol",
]
