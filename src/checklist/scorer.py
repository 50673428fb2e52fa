"""Checklist coverage scoring — weighted release-readiness percentages."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable

from src.models.checklist import (
    STATUS_MULTIPLIERS,
    TESTED_STATUSES,
    CategoryScore,
    ChecklistItem,
    ChecklistScore,
    Priority,
    Status,
)

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _scorable(items: Iterable[ChecklistItem]) -> list[ChecklistItem]:
    return [item for item in items if item.status != Status.NOT_APPLICABLE]


def weighted_score(items: Iterable[ChecklistItem]) -> int:
    """Priority-weighted pass percentage (0-100) over scorable items.

    PASS earns the full priority weight, PARTIAL half of it, anything else
    nothing. N/A items are ignored entirely.
    """
    max_score = 0
    actual_score = 0.0
    for item in _scorable(items):
        max_score += item.weight
        actual_score += item.weight * STATUS_MULTIPLIERS[item.status]
    if max_score == 0:
        return 0
    return _round_half_up(actual_score * 100 / max_score)


def calculate_score(items: Iterable[ChecklistItem]) -> ChecklistScore:
    """Score a checklist. Never raises; empty input yields an all-zero score."""
    scorable = _scorable(items)
    required = [item for item in scorable if item.priority == Priority.P0]

    # Group by category, keeping first-seen order
    by_category: dict[str, list[ChecklistItem]] = {}
    for item in scorable:
        by_category.setdefault(item.category, []).append(item)

    categories = {
        name: CategoryScore(
            name=name,
            total=len(cat_items),
            tested=sum(1 for i in cat_items if i.status in TESTED_STATUSES),
            passing=sum(1 for i in cat_items if i.status == Status.PASS),
            score=weighted_score(cat_items),
        )
        for name, cat_items in by_category.items()
    }

    score = ChecklistScore(
        total_items=len(scorable),
        required_items=len(required),
        tested_items=sum(1 for i in scorable if i.status in TESTED_STATUSES),
        passing_items=sum(1 for i in scorable if i.status == Status.PASS),
        failing_items=sum(1 for i in scorable if i.status == Status.FAIL),
        # "Missing" counts tests not yet written
        missing_items=sum(1 for i in scorable if i.status == Status.TODO),
        overall_score=weighted_score(scorable),
        required_score=weighted_score(required),
        categories=categories,
    )
    logger.debug(
        "Checklist score: overall=%d%% required=%d%% (%d items, %d categories)",
        score.overall_score, score.required_score, score.total_items, len(categories),
    )
    return score


def get_blocking_items(items: Iterable[ChecklistItem]) -> list[ChecklistItem]:
    """Required (P0) items keeping the required score below 100."""
    return [
        item for item in items
        if item.required and item.status not in (Status.PASS, Status.NOT_APPLICABLE)
    ]


def get_category_gaps(items: Iterable[ChecklistItem]) -> dict[str, list[ChecklistItem]]:
    """Map each category to its unfinished items; complete categories are omitted."""
    gaps: dict[str, list[ChecklistItem]] = {}
    for item in items:
        if item.status in (Status.PASS, Status.NOT_APPLICABLE):
            continue
        gaps.setdefault(item.category, []).append(item)
    return gaps


def validate_test_run(items: Iterable[ChecklistItem]) -> bool:
    """True when every required item passes."""
    return calculate_score(items).required_score == 100
