"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
YAML configuration file (~/.shopsavvy/config.yaml).
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from shopsavvy.core.client_config import (
    DEFAULT_BASE_URL,
    DEFAULT_CONCURRENCY_LIMIT,
    DEFAULT_TIMEOUT_SECONDS,
    ClientConfig,
    RateLimitSettings,
)
from shopsavvy.domain.errors import MissingApiKeyError
from shopsavvy.domain.models.common import RetryPolicyConfig

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".shopsavvy"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_FILE_NAME = ".env"
ENV_PREFIX = "SHOPSAVVY_"

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}  # For testing purposes
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys ('retry.max_attempts')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Test overrides
    2. Environment Variables
    3. .env file (never overrides variables already set)
    4. YAML configuration file
    5. Defaults of the caller

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. YAML file (lowest priority)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. .env file; override=False keeps real environment variables on top
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no .env found).")

    _loaded = True
    logger.debug("Configuration loading process completed.")


def env_var_name(key: str) -> str:
    """Environment variable consulted for a dotted key.

    'retry.max_attempts' -> SHOPSAVVY_RETRY_MAX_ATTEMPTS,
    'shopsavvy.base_url' -> SHOPSAVVY_BASE_URL.
    """
    name = key.upper().replace(".", "_")
    return name if name.startswith(ENV_PREFIX) else f"{ENV_PREFIX}{name}"


def _coerce(value: str) -> Any:
    if value.lower() == "true":
        return True
    if value.lower() == "false":
        return False
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        return value


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Args:
        key: The dotted configuration key
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = env_var_name(key)
    if env_key in os.environ:
        return _coerce(os.environ[env_key])

    if key in _config:
        return _config[key]

    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_api_key() -> Optional[str]:
    """Gets the API key (SHOPSAVVY_API_KEY or api_key in YAML)."""
    key = get_config("api_key")
    return str(key) if key is not None else None


def get_retry_policy_config() -> RetryPolicyConfig:
    defaults = RetryPolicyConfig()
    return RetryPolicyConfig(
        max_attempts=int(get_config("retry.max_attempts", defaults.max_attempts)),
        initial_delay=float(get_config("retry.initial_delay", defaults.initial_delay)),
        max_delay=float(get_config("retry.max_delay", defaults.max_delay)),
        backoff_multiplier=float(get_config("retry.backoff_multiplier", defaults.backoff_multiplier)),
    )


def get_rate_limit_settings() -> Optional[RateLimitSettings]:
    """Client-side pacing settings, or None when rate_limit.max_requests is unset."""
    max_requests = get_config("rate_limit.max_requests")
    if max_requests is None:
        return None
    return RateLimitSettings(
        max_requests=int(max_requests),
        time_window=float(get_config("rate_limit.time_window", 60.0)),
    )


def get_client_config(api_key: Optional[str] = None) -> ClientConfig:
    """Builds a ClientConfig from the loaded settings.

    Raises:
        MissingApiKeyError: If no API key is given or configured.
    """
    load_configuration()
    resolved_key = api_key or get_api_key()
    if not resolved_key:
        raise MissingApiKeyError()
    return ClientConfig(
        api_key=resolved_key,
        base_url=str(get_config("base_url", DEFAULT_BASE_URL)),
        timeout=float(get_config("timeout", DEFAULT_TIMEOUT_SECONDS)),
        retry=get_retry_policy_config(),
        concurrency_limit=int(get_config("batch.concurrency_limit", DEFAULT_CONCURRENCY_LIMIT)),
        rate_limit=get_rate_limit_settings(),
    )


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {config_dict}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")
