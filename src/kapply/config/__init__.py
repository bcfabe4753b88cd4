"""Configuration module: load layered settings for the reconciler and cluster backends."""

from .manager import load_config, load_settings
from .paths import get_user_config_path, get_project_config_path
from .settings import (
    ApiSettings,
    BackendType,
    ClusterSettings,
    ConcurrencySettings,
    KapplySettings,
    RetrySettings,
    MAX_WORKERS,
)

__all__ = [
    "load_config",
    "load_settings",
    "get_user_config_path",
    "get_project_config_path",
    "ApiSettings",
    "BackendType",
    "ClusterSettings",
    "ConcurrencySettings",
    "KapplySettings",
    "RetrySettings",
    "MAX_WORKERS",
]
