"""Human-readable summaries of checklist scores and visual diffs."""

from __future__ import annotations

from collections.abc import Sequence

from src.checklist.scorer import get_blocking_items
from src.models.checklist import ChecklistItem, ChecklistScore, Status
from src.models.visual_diff import VisualDiff

PROGRESS_BAR_WIDTH = 50
MAX_LISTED = 5


def _progress_bar(percent: int) -> str:
    filled = round(percent / 100 * PROGRESS_BAR_WIDTH)
    return "[" + "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled) + f"] {percent}%"


def format_checklist_summary(score: ChecklistScore, items: Sequence[ChecklistItem]) -> str:
    """Render a checklist score as plain text for the console."""
    blocking = get_blocking_items(items)
    lines = [
        "Checklist Score",
        f"  Overall: {score.passing_items}/{score.total_items} passing ({score.overall_score}%)",
        f"  Required (P0): {score.required_items - len(blocking)}/{score.required_items} "
        f"({score.required_score}%)",
    ]
    if score.required_score < 100:
        lines.append(f"  {len(blocking)} critical item(s) blocking release")

    lines.append("  " + _progress_bar(score.overall_score))
    lines.append(f"  Passing: {score.passing_items}")
    lines.append(f"  Failing: {score.failing_items}")
    lines.append(f"  Missing: {score.missing_items}")

    lowest = sorted(score.categories.values(), key=lambda c: c.score)[:MAX_LISTED]
    if lowest:
        lines.append("  Lowest coverage categories:")
        for cat in lowest:
            lines.append(f"    {cat.name or '(uncategorized)':<24} {cat.score}%")

    if blocking:
        lines.append(f"  Blocking items ({len(blocking)}):")
        for item in blocking[:MAX_LISTED]:
            lines.append(f"    {item.id:<12} {item.status.value:<8} {item.category}")
        if len(blocking) > MAX_LISTED:
            lines.append(f"    ... and {len(blocking) - MAX_LISTED} more")

    return "\n".join(lines)


def format_visual_summary(diffs: Sequence[VisualDiff]) -> str:
    new = sum(1 for d in diffs if not d.baseline_exists)
    failed = sum(1 for d in diffs if d.comparison_failed)
    significant = [d for d in diffs if d.has_significant_change]
    lines = [
        "Visual Regression",
        f"  Compared: {len(diffs) - new}",
        f"  No baseline: {new}",
        f"  Significant changes: {len(significant)}",
    ]
    if failed:
        lines.append(f"  Comparison failures: {failed}")
    for d in significant:
        lines.append(f"    {d.filename}: {d.diff_percentage:.2f}%")
    return "\n".join(lines)


def count_by_status(items: Sequence[ChecklistItem]) -> dict[str, int]:
    counts = {status.value: 0 for status in Status}
    for item in items:
        counts[item.status.value] += 1
    return counts
