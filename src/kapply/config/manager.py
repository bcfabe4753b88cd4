"""Layered configuration manager (defaults, user, project, explicit file, environment)."""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from pydantic import ValidationError
from .paths import DEFAULTS_PATH, get_user_config_path, get_project_config_path
from .settings import KapplySettings
from ..utils.errors import ConfigError
from ..utils.logging import get_logger

logger = get_logger("config.manager")

ENV_OVERRIDES = {
    "KAPPLY_CLUSTER_ENDPOINT": ("cluster", "endpoint"),
    "KAPPLY_CLUSTER_TOKEN": ("cluster", "token"),
    "KAPPLY_CREDENTIALS_FILE": ("cluster", "credentials_file"),
    "KAPPLY_BACKEND": ("cluster", "backend"),
    "KAPPLY_STATE_FILE": ("cluster", "state_file"),
}


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the full config tree.

    Later sources override earlier ones: packaged defaults, user config,
    project config, explicit config file, credentials file, environment.

    Args:
        config_path: Optional explicit config file (must exist)

    Returns:
        Merged configuration dictionary
    """
    config = _read_yaml(DEFAULTS_PATH)

    user_config_path = get_user_config_path()
    if user_config_path.exists():
        try:
            _deep_merge(config, _read_yaml(user_config_path))
        except ConfigError as e:
            logger.warning(f"Could not load user config from {user_config_path}: {e}")

    project_config_path = get_project_config_path()
    if project_config_path:
        try:
            _deep_merge(config, _read_yaml(project_config_path))
            logger.info(f"Loaded project config from {project_config_path}")
        except ConfigError as e:
            logger.warning(f"Could not load project config from {project_config_path}: {e}")

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {config_path}")
        _deep_merge(config, _read_yaml(path))
        logger.info(f"Loaded configuration from {config_path}")

    _apply_env_overrides(config)
    _apply_credentials_file(config)
    return config


def load_settings(config_path: Optional[str] = None) -> KapplySettings:
    """Load and validate configuration into KapplySettings."""
    config = load_config(config_path)
    try:
        return KapplySettings(**config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}")


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file {path}: {e}")
    except OSError as e:
        raise ConfigError(f"Error loading config file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a dictionary")
    return data


def _apply_env_overrides(config: Dict[str, Any]) -> None:
    for env_var, (section, key) in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            config.setdefault(section, {})[key] = value
            logger.debug(f"Config {section}.{key} set from {env_var}")


def _apply_credentials_file(config: Dict[str, Any]) -> None:
    """Fill endpoint/token from the credentials file without overriding explicit values."""
    cluster = config.setdefault("cluster", {})
    credentials_file = cluster.get("credentials_file")
    if not credentials_file:
        return

    path = Path(credentials_file).expanduser()
    if not path.exists():
        raise ConfigError(f"Credentials file not found: {credentials_file}")

    credentials = _read_yaml(path)
    for key in ("endpoint", "token"):
        if not cluster.get(key) and credentials.get(key):
            cluster[key] = credentials[key]
    logger.debug(f"Loaded cluster credentials from {path}")


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
