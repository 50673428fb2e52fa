"""Pytest configuration and shared fixtures."""

import json
from pathlib import Path

import pytest
from PIL import Image

from src.models.checklist import ChecklistItem, Priority, Status
from src.models.config import VerifierConfig, VisualRegressionSettings


# ============================================================================
# Image Fixtures
# ============================================================================


def write_png(path: Path, width: int, height: int, color: tuple[int, int, int]) -> Path:
    """Write a solid-color opaque PNG and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGBA", (width, height), color + (255,)).save(path)
    return path


@pytest.fixture
def baselines_dir(tmp_path: Path) -> Path:
    return tmp_path / "baselines"


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "run"
    path.mkdir()
    return path


@pytest.fixture
def make_png():
    """Factory fixture for solid-color PNGs."""
    return write_png


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def visual_settings(baselines_dir: Path) -> VisualRegressionSettings:
    return VisualRegressionSettings(
        baselines_dir=str(baselines_dir),
        diff_threshold=5.0,
        comparison_timeout_seconds=60.0,
    )


@pytest.fixture
def verifier_config(visual_settings: VisualRegressionSettings, tmp_path: Path) -> VerifierConfig:
    return VerifierConfig(
        visual=visual_settings,
        report_output_dir=str(tmp_path / "reports"),
    )


@pytest.fixture
def temp_config_file(tmp_path: Path, verifier_config: VerifierConfig) -> Path:
    path = tmp_path / "ui-verify.json"
    verifier_config.save(path)
    return path


# ============================================================================
# Checklist Fixtures
# ============================================================================


def make_item(
    priority: str,
    status: str,
    category: str = "General",
    item_id: str | None = None,
) -> ChecklistItem:
    return ChecklistItem(
        id=item_id or f"{category[:4].upper()}-{priority}{status.replace('/', '')}",
        name=f"{priority} {status} check",
        category=category,
        priority=Priority(priority),
        status=Status(status),
    )


@pytest.fixture
def item_factory():
    """Factory fixture: item_factory("P0", "PASS", category="Auth")."""
    return make_item


@pytest.fixture
def mixed_items() -> list[ChecklistItem]:
    """The six-item checklist whose overall score is 63."""
    return [
        make_item("P0", "PASS", "Auth", "AUTH-001"),
        make_item("P0", "PARTIAL", "Auth", "AUTH-002"),
        make_item("P1", "PASS", "Home", "HOME-001"),
        make_item("P1", "FAIL", "Home", "HOME-002"),
        make_item("P2", "PARTIAL", "Search", "SRCH-001"),
        make_item("P3", "TODO", "Search", "SRCH-002"),
    ]


@pytest.fixture
def checklist_file(tmp_path: Path, mixed_items: list[ChecklistItem]) -> Path:
    path = tmp_path / "checklist.json"
    with open(path, "w") as f:
        json.dump([item.model_dump(mode="json") for item in mixed_items], f, indent=2)
    return path
