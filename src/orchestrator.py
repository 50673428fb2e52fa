"""Verification orchestrator — coordinates visual comparison, checklist scoring and reporting."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from pathlib import Path

from src.checklist.loader import load_checklist
from src.checklist.scorer import calculate_score, get_blocking_items
from src.models.checklist import ChecklistItem, ChecklistScore
from src.models.config import VerifierConfig
from src.models.visual_diff import VisualDiff
from src.reporter.json_report import generate_json_report
from src.visual.coordinator import VisualRegressionCoordinator

logger = logging.getLogger(__name__)


class Orchestrator:
    """Runs one verification pass with its own coordinator and result accumulator."""

    def __init__(self, config: VerifierConfig):
        self.config = config
        self.coordinator = VisualRegressionCoordinator(config.visual)

    def compare_screenshots(self, screenshot_paths: Sequence[str | Path], output_dir: str | Path) -> list[VisualDiff]:
        """Compare screenshots against their baselines, all in parallel."""
        start = time.time()
        logger.info("Comparing %d screenshots against %s", len(screenshot_paths), self.coordinator.baselines_dir)
        diffs = asyncio.run(self.coordinator.compare_all(screenshot_paths, output_dir))
        significant = self.coordinator.get_significant_changes()
        if significant:
            logger.warning("Visual changes detected: %d screenshots differ from baseline", len(significant))
        logger.info("Visual comparison complete in %.1fs", time.time() - start)
        return diffs

    def promote(self, screenshot_paths: Sequence[str | Path]) -> list[Path]:
        return self.coordinator.promote_all(screenshot_paths)

    def load_checklist(self, path: str | Path | None = None) -> list[ChecklistItem]:
        checklist_path = path or self.config.checklist_path
        if not checklist_path:
            raise FileNotFoundError("No checklist configured. Pass a path or set checklist_path.")
        return load_checklist(checklist_path)

    def score_checklist(self, items: Sequence[ChecklistItem]) -> ChecklistScore:
        score = calculate_score(items)
        logger.info(
            "Checklist: %d%% overall, %d%% required", score.overall_score, score.required_score,
        )
        return score

    def write_report(
        self,
        diffs: Sequence[VisualDiff],
        items: Sequence[ChecklistItem] | None = None,
        output_dir: Path | None = None,
    ) -> Path:
        """Write the JSON report for this pass and return its path."""
        out_dir = output_dir or Path(self.config.report_output_dir)
        score = self.score_checklist(items) if items is not None else None
        blocking = get_blocking_items(items) if items is not None else []
        path = out_dir / f"report_{time.strftime('%Y%m%d_%H%M%S')}.json"
        generate_json_report(diffs, score, path, blocking=blocking)
        logger.info("JSON report: %s", path)
        return path
