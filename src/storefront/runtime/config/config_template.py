"""Configuration template substitution utilities."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.storefront.runtime.config.config_data import ConfigData


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """
    def replacer(match):
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        elif ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        else:
            var_name = var_expr
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name} not set")
            return value

    pattern = r'\$\{([^}]+)\}'
    return re.sub(pattern, replacer, text)


def load_templated_yaml(file_path: Path) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML file

    Returns:
        Parsed configuration with environment variables substituted

    Raises:
        ValueError: If required environment variables are missing or the
            file does not validate
        FileNotFoundError: If the YAML file doesn't exist
    """
    with open(file_path) as f:
        content = f.read()

    env_mode = os.getenv("STOREFRONT_ENVIRONMENT", "development")
    logger.info(f"Loading configuration for environment: {env_mode}")

    # STOREFRONT_<ENV>_FOO=bar is exposed to the template as FOO=bar
    prefix = f"STOREFRONT_{env_mode.upper()}_"
    for var_name, var_value in list(os.environ.items()):
        if var_name.startswith(prefix):
            os.environ[var_name[len(prefix):]] = var_value
            logger.debug(f"Set environment variable {var_name[len(prefix):]} from {var_name}")

    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content)
        if not loaded:
            raise ValueError("Failed to parse YAML")
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    try:
        config_data = loaded.get('config', {})
        config = ConfigData(**config_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    return config


def load_default_config() -> ConfigData:
    """Load config from STOREFRONT_CONFIG (or ./config.yaml), else defaults."""
    config_path = Path(os.getenv("STOREFRONT_CONFIG", "config.yaml"))
    if not config_path.exists():
        logger.debug("No configuration file at {}, using defaults", config_path)
        return ConfigData()
    return load_templated_yaml(config_path)
