"""Tunable constants for model construction."""
from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Mapping


@dataclass(frozen=True, slots=True)
class ModelPolicy:
    """Caps, split ratios and counts used by every model build."""

    max_line: float = 0.15
    min_line: float = 0.05
    min_distinct: int = 5
    max_distinct: int = 10
    equity_core_share: float = 0.70
    equity_us_share: float = 0.70
    bond_core_share: float = 0.70
    max_equity_satellites: int = 6
    max_bond_satellites: int = 4
    satellite_slice_floor: float = 0.75
    pad_weight: float = 0.0001
    missing_score: float = -999.0
    weight_digits: int = 4

    @property
    def min_slice(self) -> float:
        """Smallest satellite slice the assembler will emit."""

        return self.min_line * self.satellite_slice_floor

    def with_overrides(self, overrides: Mapping[str, str]) -> "ModelPolicy":
        """Return a copy with string overrides cast to each field's type."""

        known = {f.name: f for f in fields(self)}
        changes: dict[str, float | int] = {}
        for name, raw in overrides.items():
            if name not in known:
                raise ValueError(f"Unknown policy field: {name}")
            current = getattr(self, name)
            changes[name] = int(raw) if isinstance(current, int) else float(raw)
        return replace(self, **changes)


DEFAULT_POLICY = ModelPolicy()


__all__ = ["ModelPolicy", "DEFAULT_POLICY"]
