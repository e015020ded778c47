"""Tests for notegrid configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from notegrid.config import DEFAULT_CONFIG, load_config


class TestLoadConfig:
    def test_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_overrides(self, tmp_path: Path) -> None:
        (tmp_path / "notegrid.yaml").write_text(
            yaml.dump({"default_rows": 10, "default_cols": 4, "extra": "kept"})
        )
        config = load_config(tmp_path)
        assert config["default_rows"] == 10
        assert config["default_cols"] == 4
        assert config["extra"] == "kept"

    def test_sizes_clamped_to_one(self, tmp_path: Path) -> None:
        (tmp_path / "notegrid.yaml").write_text(yaml.dump({"default_rows": 0}))
        assert load_config(tmp_path)["default_rows"] == 1

    def test_relative_log_dir(self, tmp_path: Path) -> None:
        (tmp_path / "notegrid.yaml").write_text(yaml.dump({"log_dir": "logs"}))
        assert load_config(tmp_path)["log_dir"] == tmp_path / "logs"

    def test_empty_file(self, tmp_path: Path) -> None:
        (tmp_path / "notegrid.yaml").write_text("")
        assert load_config(tmp_path) == DEFAULT_CONFIG

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        (tmp_path / "notegrid.yaml").write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="mapping"):
            load_config(tmp_path)
