"""Model portfolio construction."""
from __future__ import annotations

from .builder import build_from_universe, build_snapshot
from .enforcer import choose_redistribution_target
from .policy import DEFAULT_POLICY, ModelPolicy
from .selector import Selection, select_candidates

__all__ = [
    "build_from_universe",
    "build_snapshot",
    "choose_redistribution_target",
    "DEFAULT_POLICY",
    "ModelPolicy",
    "Selection",
    "select_candidates",
]
