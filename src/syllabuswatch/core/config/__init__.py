"""Configuration loading and validation."""

from .models import (
    # Enums
    DeadlineType,
    StorageBackend,
    # Config models
    AppConfig,
    StorageConfig,
    ExtractionConfig,
    LoggingConfig,
)
from .loader import ConfigError, load_app_config, resolve_config_path

__all__ = [
    # Enums
    "DeadlineType",
    "StorageBackend",
    # Config models
    "AppConfig",
    "StorageConfig",
    "ExtractionConfig",
    "LoggingConfig",
    # Loaders
    "ConfigError",
    "load_app_config",
    "resolve_config_path",
]
