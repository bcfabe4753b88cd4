"""Config path resolution for packaged defaults, user and project config."""

from pathlib import Path
from typing import Optional

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_user_config_path() -> Path:
    """Get user config path: ~/.kapply/config.yaml"""
    home = Path.home()
    return home / ".kapply" / "config.yaml"


def get_project_config_path() -> Optional[Path]:
    """Get project config path: .kapply/config.yaml (from current working directory)"""
    cwd = Path.cwd()
    project_config = cwd / ".kapply" / "config.yaml"
    if project_config.exists():
        return project_config
    return None
