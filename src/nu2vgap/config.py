"""
Converter Configuration

Loads configuration from a YAML file, then applies environment variable
overrides. Command line options are applied last by the CLI.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)


# Default configuration file locations (checked in order)
CONFIG_SEARCH_PATHS = [
    Path.home() / ".nu2vgap" / "config.yaml",
    Path(__file__).parent / "config.yaml",
]


DEFAULT_CONFIG = {
    # Game directory holding the pristine spec files of the host
    "root_dir": "/usr/share/planets",
    # Where converted files are written
    "output_dir": ".",
    # Delete player<race>.trn after writing a new result
    "remove_stale_turn": True,
}


class ConverterConfig:
    """Configuration for a conversion run."""

    def __init__(self, config_path: Optional[Path] = None):
        self._config: Dict[str, Any] = dict(DEFAULT_CONFIG)
        self._config_path: Optional[Path] = None

        self._load_config(config_path)
        self._apply_env_overrides()

    def _load_config(self, explicit_path: Optional[Path] = None) -> None:
        """Load configuration from YAML file."""
        search_paths = [Path(explicit_path)] if explicit_path else CONFIG_SEARCH_PATHS

        for config_path in search_paths:
            if config_path.exists():
                try:
                    with open(config_path, "r", encoding="utf-8") as f:
                        user_config = yaml.safe_load(f) or {}
                    if not isinstance(user_config, dict):
                        raise ValueError("top level is not a mapping")
                    self._config.update(user_config)
                    self._config_path = config_path
                    return
                except (OSError, ValueError, yaml.YAMLError) as e:
                    logger.warning("Failed to load config from %s: %s", config_path, e)

    def _apply_env_overrides(self) -> None:
        env_mappings = {
            "NU2VGAP_ROOT": "root_dir",
            "NU2VGAP_OUTPUT": "output_dir",
        }

        for env_var, config_key in env_mappings.items():
            if env_var in os.environ:
                self._config[config_key] = os.environ[env_var]

    def override(self, **values: Any) -> "ConverterConfig":
        """Apply explicit overrides; None values are ignored."""
        for key, value in values.items():
            if value is not None:
                self._config[key] = value
        return self

    @property
    def config_path(self) -> Optional[Path]:
        """Path to loaded config file, or None if using defaults."""
        return self._config_path

    @property
    def root_dir(self) -> Path:
        return Path(self._config["root_dir"]).expanduser()

    @property
    def output_dir(self) -> Path:
        return Path(self._config["output_dir"]).expanduser()

    @property
    def remove_stale_turn(self) -> bool:
        return bool(self._config.get("remove_stale_turn", True))

    def to_dict(self) -> Dict[str, Any]:
        """Export current configuration as dict."""
        return {
            "root_dir": str(self.root_dir),
            "output_dir": str(self.output_dir),
            "remove_stale_turn": self.remove_stale_turn,
            "config_file": str(self._config_path) if self._config_path else None,
        }
