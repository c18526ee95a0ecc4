"""Configuration loading utilities."""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "RUUVIBRIDGE_CONFIG"
DEFAULT_CONFIG_NAME = "listener.yaml"


def get_config_path(
    config_name: Optional[str] = None,
    config_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """Get path to a configuration file.

    Args:
        config_name: Name of config file (without path). If None, uses
            RUUVIBRIDGE_CONFIG when set, else listener.yaml.
        config_dir: Directory containing config files. If None, uses
            the 'config' directory at the repo root.

    Returns:
        Path to the configuration file.
    """
    if config_name is None and config_dir is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)

    if config_dir is None:
        # Default to repo_root/config/
        package_dir = Path(__file__).parent.parent.parent
        config_dir = package_dir / "config"

    return Path(config_dir) / (config_name or DEFAULT_CONFIG_NAME)


def load_yaml_config(
    config_path: Optional[Union[str, Path]] = None,
    load_env: bool = True,
    required: bool = False,
) -> dict:
    """Load YAML configuration file.

    Args:
        config_path: Path to config file. If None, uses get_config_path().
        load_env: Whether to load .env file first.
        required: Raise when the file is missing instead of returning {}.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist and is required.
        yaml.YAMLError: If config file is invalid YAML.
    """
    if load_env:
        load_dotenv()

    if config_path is None:
        config_path = get_config_path()
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        if required:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        logger.debug(f"No config file at {config_path}, using defaults")
        return {}

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    return data


def get_log_level(config: dict) -> str:
    """Extract log level from config, with sensible default.

    Args:
        config: Configuration dictionary.

    Returns:
        Log level string (e.g., 'INFO', 'DEBUG').
    """
    return str(config.get("log_level", "INFO")).upper()
