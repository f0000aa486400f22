"""
Schema validation for the s3lite package.

This module provides voluptuous schemas for validating the configuration of the
storage facades and of logging.
"""

import os

from voluptuous import Invalid, MultipleInvalid, Schema

from s3lite import defaults
from s3lite.constants import REGION_ENV_VARS
from s3lite.exceptions import ConfigurationError


# Option schemas per configuration section
# Each schema lists the option defaults that apply to that section

S3LITE_OPTIONS = {
    'storage': [
        defaults.key(),
        defaults.secret(),
        defaults.endpoint(),
        defaults.region(),
        defaults.bucket_name(),
        defaults.use_regional_config_discovery(),
        defaults.provider(),
        defaults.timeout(),
        defaults.verify(),
    ],
    'logging': [
        defaults.loglevel(),
        defaults.logfile(),
        defaults.logformat(),
    ],
}

# camelCase spellings accepted for the storage section
ALIASES = {
    'bucketName': 'bucket_name',
    'useRegionalConfigDiscovery': 'use_regional_config_discovery',
}


def _build_schema(option_list: list) -> Schema:
    """
    Build a voluptuous Schema from a list of option definitions.

    Each option definition is a dict with a single key (the option name)
    and a validation rule as the value.

    Args:
        option_list: List of option definition dicts

    Returns:
        Schema: A voluptuous Schema that validates all options
    """
    schema_dict = {}
    for option_def in option_list:
        schema_dict.update(option_def)
    return Schema(schema_dict)


STORAGE_SCHEMA = _build_schema(S3LITE_OPTIONS['storage'])
LOGGING_SCHEMA = _build_schema(S3LITE_OPTIONS['logging'])

SECTION_SCHEMAS = {
    'storage': STORAGE_SCHEMA,
    'logging': LOGGING_SCHEMA,
}


def normalize_aliases(options: dict) -> dict:
    """Return a copy of ``options`` with camelCase keys renamed to snake_case"""
    normalized = {}
    for name, value in options.items():
        normalized[ALIASES.get(name, name)] = value
    return normalized


def _truthy(value) -> bool:
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes')
    return bool(value)


def resolve_region(options: dict) -> dict:
    """
    Fill a missing region from the environment when regional config discovery is on.

    Args:
        options: Storage options (snake_case keys)

    Returns:
        dict: The options, with ``region`` set if it could be discovered
    """
    if options.get('region') or not _truthy(options.get('use_regional_config_discovery')):
        return options
    for env_var in REGION_ENV_VARS:
        value = os.environ.get(env_var)
        if value:
            return {**options, 'region': value}
    return options


def _describe(error: Invalid) -> str:
    errors = error.errors if isinstance(error, MultipleInvalid) else [error]
    parts = []
    for err in errors:
        path = ".".join(str(p) for p in err.path) or "<root>"
        parts.append(f"{path}: {err.msg}")
    return "; ".join(parts)


def validate_options(section: str, options: dict) -> dict:
    """
    Validate options for a given configuration section.

    This function validates the provided options against the schema for the
    specified section, applying defaults where appropriate.

    Args:
        section: The configuration section (storage, logging)
        options: Dictionary of option values to validate

    Returns:
        dict: Validated and normalized options with defaults applied

    Raises:
        ConfigurationError: If validation fails
        KeyError: If the section is not recognized
    """
    if section not in SECTION_SCHEMAS:
        raise KeyError(f"Unknown section: {section}. Valid sections are: {list(SECTION_SCHEMAS.keys())}")
    if not isinstance(options, dict):
        raise ConfigurationError(f"{section} configuration must be a mapping, got {type(options).__name__}")

    if section == 'storage':
        options = resolve_region(normalize_aliases(options))

    try:
        return SECTION_SCHEMAS[section](options)
    except Invalid as e:
        raise ConfigurationError(f"Invalid {section} configuration: {_describe(e)}") from e


def get_schema(section: str) -> Schema:
    """
    Get the validation schema for a given configuration section.

    Raises:
        KeyError: If the section is not recognized
    """
    if section not in SECTION_SCHEMAS:
        raise KeyError(f"Unknown section: {section}. Valid sections are: {list(SECTION_SCHEMAS.keys())}")
    return SECTION_SCHEMAS[section]
