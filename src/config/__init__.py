"""Configuration management for Pi-hole Sync."""

from .api import APIConfig
from .environment import EnvironmentConfig
from .settings import Settings
from .sync_config import (
    ConfigurationError,
    HostConfig,
    NotifyConfig,
    SyncConfig,
    SyncOptions,
    SyncOptionsV5,
    SyncOptionsV6,
)

__all__ = [
    "Settings",
    "APIConfig",
    "EnvironmentConfig",
    "ConfigurationError",
    "HostConfig",
    "NotifyConfig",
    "SyncConfig",
    "SyncOptions",
    "SyncOptionsV5",
    "SyncOptionsV6",
]
