"""Order finished lines and package them into a snapshot."""
from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import date
from typing import Callable, Optional, Sequence

from ..models import Line, Profile, Provider, Snapshot


def rank_lines(lines: Sequence[Line]) -> tuple[Line, ...]:
    """Sort by weight descending then symbol ascending and assign 1-based ranks."""

    ordered = sorted(lines, key=lambda line: (-line.weight, line.symbol))
    return tuple(replace(line, rank=position) for position, line in enumerate(ordered, start=1))


def new_snapshot_id() -> str:
    return str(uuid.uuid4())


def finalize(
    asof: date,
    provider: Provider,
    profile: Profile,
    lines: Sequence[Line],
    notes: Optional[str],
    id_factory: Callable[[], str] = new_snapshot_id,
) -> Snapshot:
    return Snapshot(
        snapshot_id=id_factory(),
        asof_date=asof,
        provider=provider,
        profile=profile,
        notes=notes,
        lines=rank_lines(lines),
    )


__all__ = ["rank_lines", "new_snapshot_id", "finalize"]
