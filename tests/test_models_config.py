"""Tests for configuration models."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from src.models.config import VerifierConfig, VisualRegressionSettings


class TestVisualRegressionSettings:
    """Tests for VisualRegressionSettings model."""

    def test_default_values(self):
        settings = VisualRegressionSettings()
        assert settings.baselines_dir == "baselines"
        assert settings.diff_threshold == 5.0
        assert settings.comparison_timeout_seconds == 120.0

    @pytest.mark.parametrize("threshold", [-0.1, 100.5])
    def test_threshold_out_of_range(self, threshold):
        with pytest.raises(ValidationError):
            VisualRegressionSettings(diff_threshold=threshold)

    @pytest.mark.parametrize("threshold", [0, 100])
    def test_threshold_bounds_accepted(self, threshold):
        assert VisualRegressionSettings(diff_threshold=threshold).diff_threshold == threshold

    def test_timeout_can_be_disabled(self):
        assert VisualRegressionSettings(comparison_timeout_seconds=None).comparison_timeout_seconds is None

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            VisualRegressionSettings(comparison_timeout_seconds=0)

    def test_env_baselines_dir(self, monkeypatch):
        monkeypatch.setenv("UI_BASELINES", "/srv/baselines")
        settings = VisualRegressionSettings(baselines_dir="env:UI_BASELINES")
        assert settings.baselines_dir == "/srv/baselines"

    def test_env_baselines_dir_missing(self, monkeypatch):
        monkeypatch.delenv("UI_BASELINES_UNSET", raising=False)
        with pytest.raises(ValidationError, match="UI_BASELINES_UNSET"):
            VisualRegressionSettings(baselines_dir="env:UI_BASELINES_UNSET")


class TestVerifierConfig:
    """Tests for VerifierConfig load/save."""

    def test_defaults(self):
        config = VerifierConfig()
        assert config.visual == VisualRegressionSettings()
        assert config.checklist_path is None
        assert config.report_output_dir == "./qa-reports"

    def test_load_from_file(self, temp_config_file: Path, baselines_dir: Path):
        config = VerifierConfig.load(temp_config_file)
        assert config.visual.baselines_dir == str(baselines_dir)
        assert config.visual.comparison_timeout_seconds == 60.0

    def test_load_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            VerifierConfig.load(tmp_path / "missing.json")

    def test_load_invalid_threshold(self, tmp_path: Path):
        path = tmp_path / "cfg.json"
        path.write_text(json.dumps({"visual": {"diff_threshold": 250}}))
        with pytest.raises(ValidationError):
            VerifierConfig.load(path)

    def test_save_creates_parent_dirs(self, tmp_path: Path):
        path = tmp_path / "deep" / "nested" / "cfg.json"
        VerifierConfig(checklist_path="checklist.json").save(path)
        data = json.loads(path.read_text())
        assert data["checklist_path"] == "checklist.json"
        assert data["visual"]["diff_threshold"] == 5.0

    def test_env_checklist_path(self, monkeypatch):
        monkeypatch.setenv("UI_CHECKLIST", "/tmp/list.json")
        assert VerifierConfig(checklist_path="env:UI_CHECKLIST").checklist_path == "/tmp/list.json"
