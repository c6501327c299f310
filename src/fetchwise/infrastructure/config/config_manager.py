"""Configuration manager for loading and validating .fetchwise.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from pydantic import ValidationError

from fetchwise.domain.config import DEFAULT_USER_AGENT, FetchConfig, PaginateConfig, RetryConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".fetchwise.yml"


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .fetchwise.yml and environment variables

    Loads configuration with validation using Pydantic models. Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .fetchwise.yml file (searched from current directory)
    3. Environment variables (FETCHWISE_*)
    4. CLI arguments (handled by CLI layer)

    Callables (retry condition, next page resolver) cannot come from a file;
    pass them in code.
    """

    DEFAULT_CONFIG = {
        "retry": {
            "max_attempts": 4,
            "backoff_multiplier": 2.0,
            "delay_min": 1.0,
            "delay_max": 60.0,
            "jitter": 1.0,
        },
        "paginate": {
            "max_pages": None,
            "pause": 0.0,
            "fail_on_bad_link_header": True,
        },
        "timeout": None,
        "user_agent": DEFAULT_USER_AGENT,
    }

    # env var -> (section, key, converter)
    ENV_OVERRIDES: Dict[str, tuple] = {
        "FETCHWISE_TIMEOUT": (None, "timeout", float),
        "FETCHWISE_USER_AGENT": (None, "user_agent", str),
        "FETCHWISE_MAX_ATTEMPTS": ("retry", "max_attempts", int),
        "FETCHWISE_MAX_PAGES": ("paginate", "max_pages", int),
    }

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .fetchwise.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: FetchConfig = self._load_config()
        except ValidationError as e:
            # Format validation errors for user
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .fetchwise.yml file starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> FetchConfig:
        """Load configuration from file and validate with Pydantic

        Returns:
            Validated FetchConfig instance

        Raises:
            ValidationError: If configuration is invalid
            ConfigurationError: If an environment override is not a valid value
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
                config_dict = self._merge_config(config_dict, file_config)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")

        config_dict = self._apply_env_overrides(config_dict)

        return FetchConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with env overrides applied
        """
        for env_name, (section, key, convert) in self.ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if not raw:
                continue
            try:
                value = self._convert_env(raw, convert)
            except ValueError as e:
                raise ConfigurationError(f"Invalid value for {env_name}: {raw!r}") from e
            target = config if section is None else config.setdefault(section, {})
            target[key] = value
            logger.debug(f"Applied {env_name} override: {key}={value!r}")
        return config

    @staticmethod
    def _convert_env(raw: str, convert: Callable[[str], Any]) -> Any:
        if convert is not str and raw.strip().lower() in ("none", "unlimited"):
            return None
        return convert(raw)

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration

        Returns:
            Retry configuration model
        """
        return self.config.retry

    def get_paginate_config(self) -> PaginateConfig:
        """Get pagination configuration

        Returns:
            Pagination configuration model
        """
        return self.config.paginate

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "retry.max_attempts" or "retry")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.config.model_dump()
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value
