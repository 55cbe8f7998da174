"""Configuration models and loaders."""

from metaprog.core.config.loader import (
    configure_logging,
    detect_format,
    load_app_config,
    load_config,
)
from metaprog.core.config.models import (
    AppConfig,
    BuildConfig,
    CacheConfig,
    GeneratorConfig,
    LoggingConfig,
)

__all__ = [
    "AppConfig",
    "BuildConfig",
    "CacheConfig",
    "GeneratorConfig",
    "LoggingConfig",
    "configure_logging",
    "detect_format",
    "load_app_config",
    "load_config",
]
