"""Configuration loader for YAML files."""

import os
import yaml
from pathlib import Path
from typing import Any, Dict

from .config_schema import AppConfig

API_KEY_ENV = "NOTION_API_KEY"


class ConfigLoader:
    """Load and validate configuration from YAML files."""

    @staticmethod
    def load_config(path: str = "config.yaml") -> AppConfig:
        """
        Load configuration from YAML file.

        A missing ``notion.api_key`` is taken from the NOTION_API_KEY
        environment variable.

        Args:
            path: Path to configuration file

        Returns:
            Validated AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)

        if not config_dict:
            raise ValueError("Configuration file is empty")

        return ConfigLoader.from_dict(config_dict)

    @staticmethod
    def from_dict(config: Dict[str, Any]) -> AppConfig:
        """
        Build a validated AppConfig from a configuration dictionary.

        Args:
            config: Configuration dictionary

        Returns:
            Validated AppConfig instance
        """
        config = dict(config)
        notion = dict(config.get("notion") or {})
        if not notion.get("api_key") and os.environ.get(API_KEY_ENV):
            notion["api_key"] = os.environ[API_KEY_ENV]
        config["notion"] = notion

        app_config = AppConfig(**config)
        app_config.validate()
        return app_config


def load_config(path: str = "config.yaml") -> AppConfig:
    """
    Convenience function to load configuration.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance
    """
    return ConfigLoader.load_config(path)
