"""
Coverage Math.

Pure functions over Coverage mappings: weighted progress, which dimensions
to ask about next, and merging partial updates. Nothing here mutates its
inputs or does I/O.
"""

import math
from typing import Mapping

from .models import Coverage, CoverageEntry, CoverageEntryUpdate


def calculate_progress(coverage: Mapping[str, CoverageEntry]) -> int:
    """
    Weighted mean of scores, rounded to the nearest integer.

    Returns 0 when the total weight is 0.
    """
    total_weight = 0.0
    weighted_score = 0.0
    for entry in coverage.values():
        total_weight += entry.weight
        weighted_score += entry.weight * entry.score

    if total_weight <= 0:
        return 0
    # Half-up rounding; builtin round() is banker's rounding
    return max(0, min(100, math.floor(weighted_score / total_weight + 0.5)))


def update_coverage(
    base: Mapping[str, CoverageEntry],
    updates: Mapping[str, CoverageEntryUpdate | CoverageEntry | dict],
) -> Coverage:
    """
    Shallow-merge partial updates into a copy of base.

    Fields missing from an update are preserved. Dimensions that are not
    already in base are ignored.
    """
    merged = dict(base)
    for dimension, update in updates.items():
        if dimension not in merged or update is None:
            continue
        merged[dimension] = merged[dimension].model_copy(update=_set_fields(update))
    return merged


def _set_fields(update: CoverageEntryUpdate | CoverageEntry | dict) -> dict:
    if isinstance(update, CoverageEntryUpdate):
        fields = update.model_dump(exclude_unset=True)
    elif isinstance(update, CoverageEntry):
        fields = update.model_dump()
    else:
        fields = CoverageEntryUpdate.model_validate(update).model_dump(exclude_unset=True)
    # An explicit null means "not provided"
    return {k: v for k, v in fields.items() if v is not None}


def priority_score(entry: CoverageEntry) -> float:
    """How urgently a dimension needs asking about."""
    return entry.weight * (100 - entry.score)


def priority_dimensions(coverage: Mapping[str, CoverageEntry], limit: int = 3) -> list[str]:
    """Dimensions sorted by weight * remaining score, most urgent first."""
    ranked = sorted(coverage.items(), key=lambda item: priority_score(item[1]), reverse=True)
    return [dimension for dimension, _ in ranked[:limit]]


def strongest_dimensions(coverage: Mapping[str, CoverageEntry], limit: int = 3) -> list[str]:
    ranked = sorted(coverage.items(), key=lambda item: item[1].score, reverse=True)
    return [dimension for dimension, _ in ranked[:limit]]


def weakest_dimensions(coverage: Mapping[str, CoverageEntry], limit: int = 3) -> list[str]:
    ranked = sorted(coverage.items(), key=lambda item: item[1].score)
    return [dimension for dimension, _ in ranked[:limit]]


def next_focus_dimension(
    coverage: Mapping[str, CoverageEntry],
    below_score: float = 70,
) -> str | None:
    """Highest-weight dimension still under below_score, if any."""
    candidates = [(d, e) for d, e in coverage.items() if e.score < below_score]
    if not candidates:
        return None
    return max(candidates, key=lambda item: item[1].weight)[0]


# =============================================================================
# Slot Grid
# =============================================================================

# Fixed 8-wide grid; each dimension owns a block of slots
SLOT_MAPPING: dict[str, list[int]] = {
    "role": [0, 1, 8, 9],
    "responsibilities": [2, 3, 10, 11],
    "workflows": [4, 5, 12, 13],
    "tools": [6, 7, 14, 15],
    "inputs_outputs": [16, 17, 24, 25],
    "pain_points": [18, 19, 26, 27],
    "metrics_kpis": [20, 21, 28, 29],
    "compliance": [22, 23, 30, 31],
    "collaboration": [32, 33, 40, 41, 48, 49],
    "ai_readiness": [34, 35, 42, 43, 50, 51],
}


def fill_count(score: float, slot_count: int) -> int:
    """Number of slots to fill for a score: floor(slot_count * score / 100)."""
    return math.floor(slot_count * score / 100)


def filled_slots(coverage: Mapping[str, CoverageEntry]) -> set[int]:
    """Slot indices that are filled for the given coverage."""
    filled: set[int] = set()
    for dimension, entry in coverage.items():
        slots = SLOT_MAPPING.get(dimension, [])
        filled.update(slots[: fill_count(entry.score, len(slots))])
    return filled
