"""Configuration for notegrid hosts and the CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

CONFIG_FILE = "notegrid.yaml"

DEFAULT_CONFIG = {
    "default_rows": 3,
    "default_cols": 3,
    "log_dir": None,  # no event log unless configured
    "logging_fsync": False,
}


def load_config(project_dir: Path) -> dict[str, Any]:
    """Load configuration from ``notegrid.yaml``, with defaults.

    Args:
        project_dir: Directory that may contain ``notegrid.yaml``.

    Returns:
        Merged configuration dict.  Unknown keys are kept.
    """
    config = dict(DEFAULT_CONFIG)
    config_path = project_dir / CONFIG_FILE
    if config_path.exists():
        user_config = yaml.safe_load(config_path.read_text()) or {}
        if not isinstance(user_config, dict):
            raise ValueError(f"{config_path} must contain a mapping")
        config.update(user_config)

    for key in ("default_rows", "default_cols"):
        config[key] = max(1, int(config[key]))

    log_dir = config.get("log_dir")
    if log_dir is not None:
        path = Path(log_dir)
        config["log_dir"] = path if path.is_absolute() else project_dir / path

    return config
