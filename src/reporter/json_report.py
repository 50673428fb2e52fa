"""JSON report output."""

from __future__ import annotations

import json
import time
from collections.abc import Sequence
from pathlib import Path

from src.models.checklist import ChecklistItem, ChecklistScore
from src.models.visual_diff import VisualDiff


def generate_json_report(
    diffs: Sequence[VisualDiff],
    score: ChecklistScore | None,
    output_path: Path,
    blocking: Sequence[ChecklistItem] = (),
) -> None:
    """Write a machine-readable JSON report."""
    report = {
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "visual_diffs": [d.model_dump() for d in diffs],
        "significant_changes": [d.filename for d in diffs if d.has_significant_change],
        "checklist": score.model_dump() if score else None,
        "blocking_items": [item.model_dump(mode="json") for item in blocking],
    }

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        json.dump(report, f, indent=2, default=str)
