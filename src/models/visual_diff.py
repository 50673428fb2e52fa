"""Visual regression data structures shared by the coordinator and its worker."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, model_validator

COMPARISON_FAILED = -1.0


class DiffJob(BaseModel):
    """Request message sent to a diff worker."""
    model_config = ConfigDict(frozen=True)

    baseline_path: str
    screenshot_path: str
    output_dir: str
    threshold: float  # percent


class VisualDiff(BaseModel):
    """Result of comparing one screenshot against its baseline.

    ``diff_percentage`` is -1 when the comparison could not be performed;
    that value means "unknown", never "identical".
    """
    model_config = ConfigDict(frozen=True)

    filename: str
    baseline_exists: bool = False
    diff_percentage: float = 0.0
    has_significant_change: bool = False
    diff_image_path: Optional[str] = None

    @model_validator(mode="after")
    def check_consistency(self) -> "VisualDiff":
        if not self.baseline_exists and (self.diff_percentage != 0 or self.has_significant_change):
            raise ValueError("a diff without a baseline must report 0% and no change")
        if self.diff_image_path and (not self.has_significant_change or self.comparison_failed):
            raise ValueError("diff_image_path is only set for successful significant comparisons")
        return self

    @property
    def comparison_failed(self) -> bool:
        return self.diff_percentage == COMPARISON_FAILED

    @classmethod
    def failed(cls, filename: str, baseline_exists: bool) -> "VisualDiff":
        """Sentinel result for a comparison that could not be performed."""
        # Without a baseline there was nothing to compare, so no sentinel applies.
        if not baseline_exists:
            return cls(filename=filename)
        return cls(
            filename=filename,
            baseline_exists=True,
            diff_percentage=COMPARISON_FAILED,
            has_significant_change=False,
        )
