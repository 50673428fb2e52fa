"""Configuration models for the UI verification core."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _resolve_env(v):
    if isinstance(v, str) and v.startswith("env:"):
        env_var = v[4:]
        resolved = os.environ.get(env_var)
        if resolved is None:
            raise ValueError(f"Environment variable '{env_var}' not set")
        return resolved
    return v


class VisualRegressionSettings(BaseModel):
    """Per-run settings for the visual regression coordinator."""

    baselines_dir: str = "baselines"
    diff_threshold: float = 5.0  # percent of pixels allowed to differ
    comparison_timeout_seconds: Optional[float] = 120.0  # None waits forever

    @field_validator("baselines_dir", mode="before")
    @classmethod
    def resolve_env_dir(cls, v: str) -> str:
        return _resolve_env(v)

    @field_validator("diff_threshold")
    @classmethod
    def check_threshold(cls, v: float) -> float:
        if not 0 <= v <= 100:
            raise ValueError(f"diff_threshold must be between 0 and 100, got {v}")
        return v

    @field_validator("comparison_timeout_seconds")
    @classmethod
    def check_timeout(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v <= 0:
            raise ValueError("comparison_timeout_seconds must be positive")
        return v


class VerifierConfig(BaseModel):
    # Visual regression
    visual: VisualRegressionSettings = Field(default_factory=VisualRegressionSettings)

    # Checklist
    checklist_path: Optional[str] = None

    # Reporting
    report_output_dir: str = "./qa-reports"

    @field_validator("checklist_path", "report_output_dir", mode="before")
    @classmethod
    def resolve_env_paths(cls, v):
        return _resolve_env(v)

    @classmethod
    def load(cls, path: str | Path) -> "VerifierConfig":
        """Load config from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            data = json.load(f)
        return cls(**data)

    def save(self, path: str | Path) -> None:
        """Save config to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.model_dump(), f, indent=2)
