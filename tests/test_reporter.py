"""Tests for text summaries and the JSON report."""

import json
from pathlib import Path

from src.checklist.scorer import calculate_score, get_blocking_items
from src.models.visual_diff import VisualDiff
from src.reporter.json_report import generate_json_report
from src.reporter.summary import count_by_status, format_checklist_summary, format_visual_summary


def _diffs() -> list[VisualDiff]:
    return [
        VisualDiff(filename="new.png"),
        VisualDiff(filename="same.png", baseline_exists=True),
        VisualDiff(
            filename="changed.png", baseline_exists=True, diff_percentage=12.5,
            has_significant_change=True, diff_image_path="/run/diffs/diff_changed.png",
        ),
        VisualDiff.failed("broken.png", baseline_exists=True),
    ]


class TestChecklistSummary:

    def test_includes_scores_and_counts(self, mixed_items):
        text = format_checklist_summary(calculate_score(mixed_items), mixed_items)
        assert "Overall: 2/6 passing (63%)" in text
        assert "Required (P0): 1/2 (75%)" in text
        assert "1 critical item(s) blocking release" in text
        assert "Failing: 1" in text
        assert "Missing: 1" in text

    def test_lists_lowest_categories_first(self, mixed_items):
        text = format_checklist_summary(calculate_score(mixed_items), mixed_items)
        assert text.index("Search") < text.index("Home") < text.index("Auth")

    def test_lists_blocking_items(self, mixed_items):
        text = format_checklist_summary(calculate_score(mixed_items), mixed_items)
        assert "AUTH-002" in text
        assert "PARTIAL" in text

    def test_truncates_long_blocking_list(self, item_factory):
        items = [item_factory("P0", "FAIL", item_id=f"P0-{i:03d}") for i in range(8)]
        text = format_checklist_summary(calculate_score(items), items)
        assert "Blocking items (8)" in text
        assert "... and 3 more" in text
        assert "P0-007" not in text

    def test_no_blocking_section_when_release_ready(self, item_factory):
        items = [item_factory("P0", "PASS"), item_factory("P1", "FAIL")]
        text = format_checklist_summary(calculate_score(items), items)
        assert "blocking" not in text.lower()

    def test_empty_checklist(self):
        text = format_checklist_summary(calculate_score([]), [])
        assert "Overall: 0/0 passing (0%)" in text

    def test_count_by_status_includes_na(self, item_factory):
        counts = count_by_status([item_factory("P1", "N/A"), item_factory("P1", "PASS")])
        assert counts["N/A"] == 1
        assert counts["PASS"] == 1
        assert counts["FAIL"] == 0


class TestVisualSummary:

    def test_counts(self):
        text = format_visual_summary(_diffs())
        assert "Compared: 3" in text
        assert "No baseline: 1" in text
        assert "Significant changes: 1" in text
        assert "Comparison failures: 1" in text
        assert "changed.png: 12.50%" in text

    def test_no_failure_line_when_clean(self):
        text = format_visual_summary([VisualDiff(filename="a.png", baseline_exists=True)])
        assert "Comparison failures" not in text


class TestGenerateJsonReport:

    def test_writes_both_subsystems(self, tmp_path: Path, mixed_items):
        path = tmp_path / "reports" / "report.json"
        score = calculate_score(mixed_items)
        generate_json_report(_diffs(), score, path, blocking=get_blocking_items(mixed_items))

        data = json.loads(path.read_text())
        assert [d["filename"] for d in data["visual_diffs"]] == ["new.png", "same.png", "changed.png", "broken.png"]
        assert data["significant_changes"] == ["changed.png"]
        assert data["visual_diffs"][3]["diff_percentage"] == -1
        assert data["checklist"]["overall_score"] == 63
        assert data["checklist"]["categories"]["Search"]["score"] == 38
        assert data["blocking_items"][0]["id"] == "AUTH-002"
        assert data["blocking_items"][0]["priority"] == "P0"

    def test_without_checklist(self, tmp_path: Path):
        path = tmp_path / "report.json"
        generate_json_report([], None, path)
        data = json.loads(path.read_text())
        assert data["checklist"] is None
        assert data["visual_diffs"] == []
        assert data["blocking_items"] == []
