"""
Configuration management for the s3lite package.

This module handles loading and validating configuration from YAML files
and environment variables.
"""

import logging
import os
from typing import Any, Optional

import yaml

from s3lite.exceptions import ConfigurationError
from s3lite.validators import validate_options

# Environment variable prefix for s3lite configuration
ENV_PREFIX = "S3LITE_"

# Mapping of environment variables to config paths
# Format: ENV_VAR_NAME -> (config_section, config_key)
ENV_MAPPING = {
    # Storage connection
    "S3LITE_KEY": ("storage", "key"),
    "S3LITE_SECRET": ("storage", "secret"),
    "S3LITE_ENDPOINT": ("storage", "endpoint"),
    "S3LITE_REGION": ("storage", "region"),
    "S3LITE_BUCKET": ("storage", "bucket_name"),
    "S3LITE_PROVIDER": ("storage", "provider"),
    "S3LITE_TIMEOUT": ("storage", "timeout"),
    "S3LITE_VERIFY": ("storage", "verify"),
    "S3LITE_REGIONAL_CONFIG_DISCOVERY": ("storage", "use_regional_config_discovery"),
    # Logging
    "S3LITE_LOG_LEVEL": ("logging", "loglevel"),
    "S3LITE_LOG_FILE": ("logging", "logfile"),
    "S3LITE_LOG_FORMAT": ("logging", "logformat"),
}

LOG_FORMATS = {
    "default": "%(asctime)s %(levelname)s %(name)s - %(message)s",
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
    "logstash": '{"@timestamp": "%(asctime)s", "level": "%(levelname)s", "logger_name": "%(name)s", "message": "%(message)s"}',
}


def _deep_set(config: dict, path: tuple, value) -> None:
    """Store ``value`` at ``path`` (e.g. ``("storage", "endpoint")``), creating sections as needed"""
    current = config
    for key in path[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[path[-1]] = value


def _parse_env_value(value: str, key: str) -> Any:
    """
    Convert an environment string to the type expected by option ``key``.

    Values that cannot be converted are returned as is and left for the schema
    to reject.
    """
    if key == "use_regional_config_discovery":
        return value.lower() in ("true", "1", "yes")

    # verify is either a boolean or a CA bundle path
    if key == "verify":
        if value.lower() in ("true", "1", "yes"):
            return True
        if value.lower() in ("false", "0", "no"):
            return False
        return value

    if key == "timeout":
        try:
            return float(value)
        except ValueError:
            return value

    return value


def load_config(config_path: Optional[str] = None) -> dict:
    """
    Load configuration from a YAML file and environment variables.

    Environment variables take precedence over file configuration.

    ```yaml
    storage:
      key: minioadmin
      secret: minioadmin
      endpoint: http://localhost:9000
      region: us-east-1
      bucket_name: my-bucket
      provider: native        # or boto3
      timeout: 30

    logging:
      loglevel: INFO
      logfile: /path/to/log
      logformat: default
    ```

    Args:
        config_path: Optional path to YAML configuration file.
                     If not provided, only environment variables are used.

    Returns:
        dict: Merged configuration dictionary

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    loggit = logging.getLogger("s3lite.config")
    config = {}

    if config_path:
        loggit.debug("Loading configuration from: %s", config_path)
        try:
            with open(config_path) as f:
                file_config = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(f"Configuration file not found: {config_path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Error reading configuration file: {e}") from e

        if not file_config:
            loggit.warning("Configuration file is empty: %s", config_path)
        elif not isinstance(file_config, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping: {config_path}")
        else:
            config = file_config

    # S3LITE_* variables win over the file
    for env_var, config_path_tuple in ENV_MAPPING.items():
        value = os.environ.get(env_var)
        if value is not None:
            # Never log the value, it may be a secret
            loggit.debug("Applying environment override: %s", env_var)
            parsed_value = _parse_env_value(value, config_path_tuple[-1])
            _deep_set(config, config_path_tuple, parsed_value)

    return config


def get_storage_config(config: dict) -> dict:
    """
    Extract the storage configuration from the full config.

    Args:
        config: Full configuration dictionary

    Returns:
        dict: Storage configuration, suitable for ``S3.from_dict``

    Raises:
        ConfigurationError: If no storage configuration is found
    """
    storage_config = config.get("storage")
    if not storage_config:
        raise ConfigurationError(
            "No storage configuration found. "
            "Configuration must include a 'storage' section with connection details."
        )
    return dict(storage_config)


def get_logging_config(config: dict) -> dict:
    """
    Extract logging configuration from the full config.

    Args:
        config: Full configuration dictionary

    Returns:
        dict: Logging configuration with defaults applied

    Raises:
        ConfigurationError: If the logging section is invalid
    """
    return validate_options("logging", dict(config.get("logging") or {}))


def configure_logging(config: dict) -> None:
    """
    Install console (and optional file) handlers on the ``s3lite`` logger.

    Only the ``s3lite`` hierarchy is touched; the root logger is left alone.

    Args:
        config: Full configuration dictionary
    """
    log_config = get_logging_config(config)

    level = getattr(logging, log_config["loglevel"], logging.INFO)
    logformat = log_config["logformat"]
    # Anything that is not a known name is a custom format string
    format_str = LOG_FORMATS.get(logformat, logformat)

    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(format_str))
    handlers.append(console_handler)

    if log_config["logfile"]:
        file_handler = logging.FileHandler(log_config["logfile"])
        file_handler.setFormatter(logging.Formatter(format_str))
        handlers.append(file_handler)

    # Configure the s3lite logger
    logger = logging.getLogger("s3lite")
    logger.setLevel(level)
    logger.handlers = handlers
    logger.propagate = False

    # urllib3 is chatty at DEBUG
    logging.getLogger("urllib3").setLevel(max(level, logging.WARNING))


def validate_config(config: dict) -> dict:
    """
    Validate the storage section of a full configuration.

    Args:
        config: Configuration dictionary to validate

    Returns:
        dict: The validated storage options, defaults applied

    Raises:
        ConfigurationError: If required configuration is missing or invalid
    """
    return validate_options("storage", get_storage_config(config))
