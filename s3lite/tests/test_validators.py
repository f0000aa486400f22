"""Tests for the s3lite validators module"""

import os
from unittest.mock import patch

import pytest
from voluptuous import Invalid, Schema

from s3lite import defaults
from s3lite.exceptions import ConfigurationError
from s3lite.validators import (
    S3LITE_OPTIONS,
    SECTION_SCHEMAS,
    get_schema,
    normalize_aliases,
    resolve_region,
    validate_options,
)

REQUIRED = {
    'key': 'key',
    'secret': 'secret',
    'endpoint': 'http://localhost:9000',
    'region': 'us-east-1',
}


class TestDefaults:
    """Tests for option default functions."""

    def test_storage_defaults_applied(self):
        """Test optional storage defaults are applied during validation."""
        validated = validate_options('storage', dict(REQUIRED))
        assert validated['bucket_name'] == ''
        assert validated['use_regional_config_discovery'] is False
        assert validated['provider'] == 'native'
        assert validated['timeout'] is None
        assert validated['verify'] is True

    def test_logging_defaults_applied(self):
        validated = validate_options('logging', {})
        assert validated == {'loglevel': 'INFO', 'logfile': None, 'logformat': 'default'}

    def test_boolean_validator(self):
        validator = defaults.Boolean()
        assert validator('Yes') is True
        assert validator('0') is False
        assert validator(True) is True
        with pytest.raises(ValueError):
            validator('maybe')


class TestStorageValidation:
    """Tests for the storage section."""

    @pytest.mark.parametrize('missing', list(REQUIRED))
    def test_required(self, missing):
        options = {k: v for k, v in REQUIRED.items() if k != missing}
        with pytest.raises(ConfigurationError) as exc_info:
            validate_options('storage', options)
        assert f'{missing}: required key not provided' in str(exc_info.value)

    @pytest.mark.parametrize(
        'name,value',
        [
            ('key', 1234),
            ('secret', ''),
            ('endpoint', None),
            ('region', ['us-east-1']),
            ('provider', 'azure'),
            ('timeout', 0),
            ('timeout', 'soon'),
            ('use_regional_config_discovery', 'maybe'),
            ('verify', 1),
        ],
    )
    def test_invalid_values(self, name, value):
        with pytest.raises(ConfigurationError):
            validate_options('storage', {**REQUIRED, name: value})

    def test_unknown_option(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_options('storage', {**REQUIRED, 'color': 'blue'})
        assert 'color' in str(exc_info.value)

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            validate_options('storage', ['key', 'secret'])

    def test_timeout_coerced(self):
        assert validate_options('storage', {**REQUIRED, 'timeout': '30'})['timeout'] == 30.0

    def test_verify_ca_bundle(self):
        assert validate_options('storage', {**REQUIRED, 'verify': '/ca.pem'})['verify'] == '/ca.pem'

    def test_boto3_provider(self):
        assert validate_options('storage', {**REQUIRED, 'provider': 'boto3'})['provider'] == 'boto3'

    def test_camel_case_aliases(self):
        validated = validate_options(
            'storage',
            {**REQUIRED, 'bucketName': 'b', 'useRegionalConfigDiscovery': 'true'},
        )
        assert validated['bucket_name'] == 'b'
        assert validated['use_regional_config_discovery'] is True

    def test_normalize_aliases(self):
        assert normalize_aliases({'bucketName': 'b', 'key': 'k'}) == {'bucket_name': 'b', 'key': 'k'}

    def test_input_not_modified(self):
        options = {**REQUIRED, 'bucketName': 'b'}
        validate_options('storage', options)
        assert 'bucketName' in options


class TestRegionDiscovery:
    """Tests for regional config discovery."""

    def test_region_from_environment(self):
        options = {k: v for k, v in REQUIRED.items() if k != 'region'}
        options['use_regional_config_discovery'] = True
        with patch.dict(os.environ, {'AWS_REGION': 'ap-south-1'}):
            assert validate_options('storage', options)['region'] == 'ap-south-1'

    def test_default_region_variable(self):
        with patch.dict(os.environ, {'AWS_DEFAULT_REGION': 'eu-north-1'}):
            os.environ.pop('AWS_REGION', None)
            resolved = resolve_region({'use_regional_config_discovery': True})
        assert resolved['region'] == 'eu-north-1'

    def test_explicit_region_wins(self):
        with patch.dict(os.environ, {'AWS_REGION': 'ap-south-1'}):
            resolved = resolve_region({'region': 'us-west-2', 'use_regional_config_discovery': True})
        assert resolved['region'] == 'us-west-2'

    def test_discovery_off(self):
        with patch.dict(os.environ, {'AWS_REGION': 'ap-south-1'}):
            assert resolve_region({'use_regional_config_discovery': False}) == {
                'use_regional_config_discovery': False
            }

    def test_no_region_anywhere(self):
        options = {k: v for k, v in REQUIRED.items() if k != 'region'}
        options['use_regional_config_discovery'] = True
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                validate_options('storage', options)
        assert 'region' in str(exc_info.value)


class TestSchemas:
    """Tests for schema access."""

    def test_sections(self):
        assert set(S3LITE_OPTIONS) == set(SECTION_SCHEMAS) == {'storage', 'logging'}

    def test_get_schema(self):
        schema = get_schema('storage')
        assert isinstance(schema, Schema)
        with pytest.raises(Invalid):
            schema({})

    def test_unknown_section(self):
        with pytest.raises(KeyError):
            get_schema('elasticsearch')
        with pytest.raises(KeyError):
            validate_options('elasticsearch', {})

    def test_loglevel_case_insensitive(self):
        assert validate_options('logging', {'loglevel': 'warning'})['loglevel'] == 'WARNING'
