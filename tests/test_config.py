"""
Tests for run configuration.

Configuration must be rejected before any file is read.
"""

import json

import pytest

from attendance import config as config_module
from attendance.config import (
    AggregationConfig,
    InvalidColumnSpecification,
    InvalidConfiguration,
    DEFAULT_SETTINGS,
    load_settings,
)


class TestAggregationConfig:
    """Tests for AggregationConfig validation."""

    def test_from_labels(self):
        """Test building config from column letters."""
        cfg = AggregationConfig.from_labels(1, "E", "B", "H", " approved ")
        assert cfg.primary_key_column == 4
        assert cfg.name_column == 1
        assert cfg.status_column == 7
        assert cfg.condition == "approved"
        assert cfg.normalized_condition == "approved"

    def test_invalid_column_label_fails(self):
        """Test that an unparseable column label is rejected."""
        with pytest.raises(InvalidColumnSpecification, match="name_column"):
            AggregationConfig.from_labels(1, "E", "", "H", "approved")

    def test_negative_index_fails(self):
        with pytest.raises(InvalidColumnSpecification):
            AggregationConfig(1, -1, 1, 2, "approved")

    def test_column_error_is_configuration_error(self):
        """Test that column errors can be caught as configuration errors."""
        with pytest.raises(InvalidConfiguration):
            AggregationConfig.from_labels(1, "1", "B", "H", "approved")

    def test_zero_header_row_fails(self):
        with pytest.raises(InvalidConfiguration, match="header_row"):
            AggregationConfig(0, 0, 1, 2, "approved")

    def test_empty_condition_fails(self):
        with pytest.raises(InvalidConfiguration, match="condition"):
            AggregationConfig(1, 0, 1, 2, "   ")

    def test_normalized_condition_is_casefolded(self):
        cfg = AggregationConfig(1, 0, 1, 2, "Approved")
        assert cfg.normalized_condition == "approved"

    def test_config_is_frozen(self):
        cfg = AggregationConfig(1, 0, 1, 2, "approved")
        with pytest.raises(Exception):
            cfg.header_row = 2


class TestLoadSettings:
    """Tests for defaults loading."""

    def test_missing_rules_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.setattr(config_module, "rules_path", lambda: tmp_path / "missing.json")
        settings = load_settings()
        for k, v in DEFAULT_SETTINGS.items():
            assert settings[k] == v
        assert settings["output_files"]["master"] == "master_counts.csv"

    def test_rules_file_overrides(self, tmp_path, monkeypatch):
        p = tmp_path / "rules.json"
        p.write_text(json.dumps({
            "defaults": {"condition": "attended", "unknown_key": 1},
            "output_files": {"summary": "totals.csv"},
        }), encoding="utf-8")
        monkeypatch.setattr(config_module, "rules_path", lambda: p)

        settings = load_settings()
        assert settings["condition"] == "attended"
        assert "unknown_key" not in settings
        assert settings["output_files"]["summary"] == "totals.csv"
        assert settings["output_files"]["master"] == "master_counts.csv"

    def test_broken_rules_file_uses_defaults(self, tmp_path, monkeypatch):
        p = tmp_path / "rules.json"
        p.write_text("[1, 2", encoding="utf-8")
        monkeypatch.setattr(config_module, "rules_path", lambda: p)
        assert load_settings()["primary_key_column"] == "E"

    def test_bundled_rules_file(self):
        """Test that the shipped data/rules.json matches the built-in defaults."""
        settings = load_settings()
        assert settings["header_row"] == 1
        assert settings["primary_key_column"] == "E"
        assert settings["name_column"] == "B"
        assert settings["status_column"] == "H"
        assert settings["condition"] == "approved"
