"""Configuration loading utilities with JSON and YAML support."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from metaprog.core.config.models import AppConfig
from metaprog.core.errors import ConfigError
from metaprog.core.utils.json import read_json
from metaprog.core.utils.logging import configure_logging as _configure_logging

logger = logging.getLogger(__name__)

_DEFAULT_APP_CONFIG_PATH = Path("metaprog.yaml")


def detect_format(file_path: Path | str) -> str:
    """Detect config file format from extension.

    Raises:
        ConfigError: If format cannot be determined

    Example:
        >>> detect_format("metaprog.json")
        'json'
        >>> detect_format("metaprog.yml")
        'yaml'
    """
    suffix = Path(file_path).suffix.lower()

    if suffix == ".json":
        return "json"
    elif suffix in [".yaml", ".yml"]:
        return "yaml"
    else:
        raise ConfigError(f"Unsupported config format: {suffix}")


def load_config(path: str | Path) -> dict[str, Any]:
    """Load and return raw configuration dictionary.

    Args:
        path: Path to config file (.json, .yaml, or .yml)

    Returns:
        Raw configuration dictionary

    Raises:
        FileNotFoundError: If config file does not exist
        ConfigError: If format is not supported or file content is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file does not exist: {path}")

    fmt = detect_format(path)

    if fmt == "json":
        try:
            return read_json(path)
        except ValueError as e:
            raise ConfigError(f"Invalid JSON in {path}: {e}") from e

    try:
        with path.open("r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    # safe_load returns None for empty files
    if content is None:
        return {}
    if not isinstance(content, dict):
        raise ConfigError(f"Expected a mapping in {path}, got {type(content).__name__}")
    return content


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration.

    A missing file yields defaults. Environment variables fill the API key
    and override the model and cache directory.

    Args:
        path: Path to app config file (default: metaprog.yaml)

    Raises:
        ConfigError: If the file is unreadable or fails validation
    """
    if path is None:
        path = _DEFAULT_APP_CONFIG_PATH

    if Path(path).exists():
        raw_config = load_config(path)
        try:
            config = AppConfig.model_validate(raw_config)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {path}: {e}") from e
    else:
        logger.debug(f"No config file at {path}, using defaults")
        config = AppConfig()

    _load_env_vars_into_config(config)
    return config


def configure_logging(config: AppConfig | None = None) -> None:
    """Configure Python logging from app config.

    Args:
        config: AppConfig instance (loads default if None)
    """
    if config is None:
        config = load_app_config()

    _configure_logging(
        level=config.logging.level,
        format_string=config.logging.format,
        filename=config.logging.filename,
        structured=config.logging.structured,
    )


def get_openai_api_key() -> str | None:
    """Get OpenAI API key from environment."""
    return os.getenv("OPENAI_API_KEY")


def _load_env_vars_into_config(config: AppConfig) -> None:
    """Apply environment variables to ``config`` in place."""
    if config.generator.api_key is None:
        api_key = get_openai_api_key()
        if api_key:
            logger.debug("Loaded OPENAI_API_KEY from environment")
            config.generator = config.generator.model_copy(update={"api_key": api_key})

    model = os.getenv("METAPROG_MODEL")
    if model:
        logger.debug(f"Model overridden by METAPROG_MODEL={model}")
        config.generator = config.generator.model_copy(update={"model": model})

    cache_dir = os.getenv("METAPROG_CACHE_DIR")
    if cache_dir:
        logger.debug(f"Cache directory overridden by METAPROG_CACHE_DIR={cache_dir}")
        config.cache = config.cache.model_copy(update={"dir": Path(cache_dir)})
