"""Cap, floor, distinct-count and normalization passes over model lines."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Sequence

from ..models import Line, Role
from .policy import DEFAULT_POLICY, ModelPolicy
from .selector import Selection

LOGGER = logging.getLogger(__name__)

TargetChooser = Callable[[Sequence[Line]], Optional[int]]


def _heaviest_index(lines: Sequence[Line]) -> int:
    return min(range(len(lines)), key=lambda i: (-lines[i].weight, lines[i].symbol))


def choose_redistribution_target(lines: Sequence[Line]) -> Optional[int]:
    """Index of the line that absorbs clipped or dropped weight.

    The first core line wins; without one the heaviest line is used.
    """

    if not lines:
        return None
    for index, line in enumerate(lines):
        if line.role is Role.CORE:
            return index
    return _heaviest_index(lines)


def normalize(
    lines: Sequence[Line],
    policy: ModelPolicy = DEFAULT_POLICY,
    choose_target: TargetChooser = choose_redistribution_target,
) -> tuple[Line, ...]:
    """Rescale weights to sum to one, rounded to ``policy.weight_digits``.

    The rounding residual goes to the redistribution target so capped lines
    stay at the cap.
    """

    total = sum(line.weight for line in lines)
    if not lines or total <= 0:
        return tuple(lines)

    digits = policy.weight_digits
    scaled = [replace(line, weight=round(line.weight / total, digits)) for line in lines]
    residual = round(1.0 - sum(line.weight for line in scaled), digits)
    if residual:
        index = choose_target(scaled)
        if index is None:
            index = _heaviest_index(scaled)
        scaled[index] = replace(scaled[index], weight=round(scaled[index].weight + residual, digits))
    return tuple(scaled)


def _pad_pool(selection: Selection) -> list[str]:
    ordered = [
        *selection.equity_satellites,
        *selection.bond_satellites,
        *selection.equity_cores,
        selection.bond_core,
        selection.cash,
    ]
    return [candidate.ticker for candidate in ordered if candidate is not None]


def enforce_distinct_count(
    lines: Sequence[Line],
    selection: Selection,
    policy: ModelPolicy = DEFAULT_POLICY,
) -> tuple[Line, ...]:
    """Pad short portfolios with unused candidates and trim long ones.

    Padding lines carry ``policy.pad_weight``. Trimming keeps the heaviest
    ``max_distinct`` lines in their original order and discards the rest.
    """

    lines = tuple(lines)
    if len(lines) < policy.min_distinct:
        used = {line.symbol for line in lines}
        padding: list[Line] = []
        for ticker in _pad_pool(selection):
            if len(lines) + len(padding) >= policy.min_distinct:
                break
            if ticker in used:
                continue
            used.add(ticker)
            padding.append(Line(ticker, policy.pad_weight, Role.SATELLITE))
        if padding:
            LOGGER.debug("Padded model with %d satellite lines", len(padding))
        return lines + tuple(padding)

    if len(lines) > policy.max_distinct:
        ranked = sorted(range(len(lines)), key=lambda i: (-lines[i].weight, lines[i].symbol))
        keep = sorted(ranked[: policy.max_distinct])
        LOGGER.debug("Trimmed model from %d to %d lines", len(lines), len(keep))
        return tuple(lines[i] for i in keep)

    return lines


def apply_cap(
    lines: Sequence[Line],
    policy: ModelPolicy = DEFAULT_POLICY,
    choose_target: TargetChooser = choose_redistribution_target,
) -> tuple[Line, ...]:
    """Clip lines above ``max_line`` and hand the excess to one recipient."""

    capped: list[Line] = []
    excess = 0.0
    for line in lines:
        if line.weight > policy.max_line:
            excess += line.weight - policy.max_line
            capped.append(replace(line, weight=policy.max_line))
        else:
            capped.append(line)

    if excess <= 0:
        return tuple(lines)
    target = choose_target(capped)
    if target is None:
        return tuple(lines)
    capped[target] = replace(capped[target], weight=capped[target].weight + excess)
    return tuple(capped)


def apply_floor(
    lines: Sequence[Line],
    policy: ModelPolicy = DEFAULT_POLICY,
    choose_target: TargetChooser = choose_redistribution_target,
) -> tuple[Line, ...]:
    """Drop lines below ``min_line`` in one pass, folding their weight into one recipient.

    Lines are dropped lightest first and never below ``min_distinct`` lines.
    """

    order = sorted(range(len(lines)), key=lambda i: (lines[i].weight, lines[i].symbol))
    removed: set[int] = set()
    remaining = len(lines)
    for index in order:
        if lines[index].weight >= policy.min_line or remaining <= policy.min_distinct:
            break
        removed.add(index)
        remaining -= 1

    if not removed:
        return tuple(lines)

    kept = [line for i, line in enumerate(lines) if i not in removed]
    dropped = sum(lines[i].weight for i in removed)
    target = choose_target(kept)
    if target is None:
        return tuple(lines)
    kept[target] = replace(kept[target], weight=kept[target].weight + dropped)
    return tuple(kept)


def enforce(
    lines: Sequence[Line],
    selection: Selection,
    policy: ModelPolicy = DEFAULT_POLICY,
    choose_target: TargetChooser = choose_redistribution_target,
) -> tuple[Line, ...]:
    """Run distinct-count, cap and floor passes, normalizing after each."""

    staged = normalize(enforce_distinct_count(lines, selection, policy), policy, choose_target)
    staged = normalize(apply_cap(staged, policy, choose_target), policy, choose_target)
    return normalize(apply_floor(staged, policy, choose_target), policy, choose_target)


__all__ = [
    "TargetChooser",
    "choose_redistribution_target",
    "normalize",
    "enforce_distinct_count",
    "apply_cap",
    "apply_floor",
    "enforce",
]
