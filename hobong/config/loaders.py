import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from cerberus import Validator
from pydantic import ValidationError

from .models import EngineConfig

# Configure logger for this module
logger = logging.getLogger(__name__)

# Structural schema checked before the pydantic models see the data.
# Field-level ranges live on the models.
CONFIG_SCHEMA: Dict[str, Any] = {
    "rank": {
        "type": "dict",
        "required": False,
        "schema": {
            "min_rank": {"type": "integer"},
            "max_rank": {"type": "integer"},
            "upgrade_interval_years": {"type": "integer"},
            "snap_upgrade_to_month_start": {"type": "boolean"},
            "max_prior_career_years": {"type": "integer"},
        },
    },
    "remote": {
        "type": "dict",
        "required": False,
        "schema": {
            "mode": {"type": "string", "allowed": ["local", "remote"]},
            "base_url": {"type": "string", "nullable": True},
            "endpoint": {"type": "string"},
            "api_key": {"type": "string", "nullable": True},
            "timeout_seconds": {"type": "number"},
            "max_attempts": {"type": "integer"},
            "backoff_min_seconds": {"type": "number"},
            "backoff_max_seconds": {"type": "number"},
        },
    },
    "cache_enabled": {"type": "boolean", "required": False},
}


class ConfigLoadError(Exception):
    """Custom exception for errors during config loading."""

    pass


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Loads configuration data from a YAML file.

    Args:
        config_path: Path pointing to the YAML configuration file.

    Returns:
        A dictionary containing the loaded configuration.

    Raises:
        ConfigLoadError: If the file cannot be found or parsed.
    """
    if not isinstance(config_path, Path):
        config_path = Path(config_path)

    logger.info(f"Attempting to load configuration from: {config_path}")

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise ConfigLoadError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.exception(f"Error parsing YAML configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Error parsing YAML file {config_path}") from e
    except OSError as e:
        logger.exception(f"Could not read configuration file {config_path}: {e}")
        raise ConfigLoadError(f"Could not read config {config_path}") from e

    if config_data is None:
        config_data = {}
    if not isinstance(config_data, dict):
        logger.error(f"Configuration file {config_path} did not parse into a dictionary.")
        raise ConfigLoadError(
            f"Invalid configuration format in {config_path}: Expected a dictionary."
        )

    logger.info(f"Successfully loaded configuration from {config_path}")
    return config_data


def parse_engine_config(config_data: Dict[str, Any]) -> EngineConfig:
    """
    Validates a configuration mapping and builds an EngineConfig.

    Raises:
        ConfigLoadError: on schema or model validation errors.
    """
    v = Validator(CONFIG_SCHEMA)
    if not v.validate(config_data):
        raise ConfigLoadError(f"Config validation failed: {v.errors}")

    try:
        config = EngineConfig(**config_data)
    except ValidationError as e:
        raise ConfigLoadError(f"Config validation failed: {e}") from e

    logger.debug(f"Engine configuration: {config}")
    return config


def load_engine_config(config_path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Loads the engine configuration; without a path, returns the defaults.
    """
    if config_path is None:
        return EngineConfig()
    return parse_engine_config(load_yaml_config(config_path))


# Expose for import
__all__ = [
    "CONFIG_SCHEMA",
    "load_yaml_config",
    "parse_engine_config",
    "load_engine_config",
    "ConfigLoadError",
]
