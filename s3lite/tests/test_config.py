"""Tests for the s3lite config module"""

import logging
import os
import tempfile
from unittest.mock import patch

import pytest

from s3lite.config import (
    configure_logging,
    get_logging_config,
    get_storage_config,
    load_config,
    validate_config,
)
from s3lite.exceptions import ConfigurationError


CONFIG_CONTENT = """
storage:
  key: minioadmin
  secret: file_secret
  endpoint: http://localhost:9000
  region: us-east-1
  bucket_name: my-bucket

logging:
  loglevel: DEBUG
"""


@pytest.fixture
def config_file():
    """Write CONFIG_CONTENT to a temporary file."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        f.write(CONFIG_CONTENT)
        f.flush()
        yield f.name
    os.unlink(f.name)


@pytest.fixture
def s3lite_logger():
    return logging.getLogger('s3lite')


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_config_from_file(self, config_file):
        """Test loading configuration from a YAML file."""
        config = load_config(config_file)

        assert config['storage']['endpoint'] == 'http://localhost:9000'
        assert config['storage']['bucket_name'] == 'my-bucket'
        assert config['logging']['loglevel'] == 'DEBUG'

    def test_load_config_file_not_found(self):
        """Test that missing config file raises ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            load_config('/nonexistent/path/config.yaml')
        assert 'not found' in str(exc_info.value)

    def test_load_config_invalid_yaml(self, tmp_path):
        """Test that invalid YAML raises ConfigurationError."""
        path = tmp_path / 'config.yaml'
        path.write_text("invalid: yaml: content: :")

        with pytest.raises(ConfigurationError) as exc_info:
            load_config(str(path))
        assert 'Invalid YAML' in str(exc_info.value)

    def test_load_config_not_a_mapping(self, tmp_path):
        path = tmp_path / 'config.yaml'
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError):
            load_config(str(path))

    def test_load_config_empty_file(self, tmp_path, caplog):
        path = tmp_path / 'config.yaml'
        path.write_text("")

        with caplog.at_level(logging.WARNING, logger='s3lite.config'):
            assert load_config(str(path)) == {}
        assert 'empty' in caplog.text

    def test_load_config_environment_override(self, config_file):
        """Test that environment variables override file config."""
        with patch.dict(os.environ, {'S3LITE_SECRET': 'env_secret', 'S3LITE_BUCKET': 'env-bucket'}):
            config = load_config(config_file)

        assert config['storage']['secret'] == 'env_secret'
        assert config['storage']['bucket_name'] == 'env-bucket'
        assert config['storage']['key'] == 'minioadmin'

    def test_load_config_env_only(self):
        """Test loading configuration from environment variables only."""
        env = {
            'S3LITE_KEY': 'k',
            'S3LITE_SECRET': 's',
            'S3LITE_ENDPOINT': 'http://localhost:9000',
            'S3LITE_REGION': 'us-east-1',
            'S3LITE_LOG_LEVEL': 'WARNING',
        }
        with patch.dict(os.environ, env):
            config = load_config()

        assert config['storage'] == {
            'key': 'k',
            'secret': 's',
            'endpoint': 'http://localhost:9000',
            'region': 'us-east-1',
        }
        assert config['logging']['loglevel'] == 'WARNING'

    @pytest.mark.parametrize(
        'env,key,expected',
        [
            ({'S3LITE_REGIONAL_CONFIG_DISCOVERY': 'yes'}, 'use_regional_config_discovery', True),
            ({'S3LITE_REGIONAL_CONFIG_DISCOVERY': 'off'}, 'use_regional_config_discovery', False),
            ({'S3LITE_VERIFY': 'false'}, 'verify', False),
            ({'S3LITE_VERIFY': '/etc/ssl/ca.pem'}, 'verify', '/etc/ssl/ca.pem'),
            ({'S3LITE_TIMEOUT': '2.5'}, 'timeout', 2.5),
        ],
    )
    def test_load_config_env_types(self, env, key, expected):
        """Test that environment values are converted to the option type."""
        with patch.dict(os.environ, env):
            config = load_config()
        assert config['storage'][key] == expected

    def test_secret_is_never_logged(self, config_file, caplog):
        with patch.dict(os.environ, {'S3LITE_SECRET': 'env_secret'}):
            with caplog.at_level(logging.DEBUG, logger='s3lite.config'):
                load_config(config_file)
        assert 'S3LITE_SECRET' in caplog.text
        assert 'env_secret' not in caplog.text


class TestSections:
    """Tests for the section helpers."""

    def test_get_storage_config(self, config_file):
        storage = get_storage_config(load_config(config_file))
        assert storage['key'] == 'minioadmin'

    def test_get_storage_config_missing(self):
        with pytest.raises(ConfigurationError) as exc_info:
            get_storage_config({'logging': {}})
        assert 'storage' in str(exc_info.value)

    def test_get_logging_config_defaults(self):
        assert get_logging_config({}) == {
            'loglevel': 'INFO',
            'logfile': None,
            'logformat': 'default',
        }

    def test_get_logging_config_invalid_level(self):
        with pytest.raises(ConfigurationError):
            get_logging_config({'logging': {'loglevel': 'LOUD'}})

    def test_validate_config(self, config_file):
        options = validate_config(load_config(config_file))
        assert options['provider'] == 'native'
        assert options['timeout'] is None
        assert options['verify'] is True

    def test_validate_config_missing_field(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_config({'storage': {'key': 'k', 'secret': 's', 'region': 'r'}})
        assert 'endpoint' in str(exc_info.value)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_level(self, s3lite_logger):
        configure_logging({'logging': {'loglevel': 'debug'}})

        assert s3lite_logger.level == logging.DEBUG
        assert s3lite_logger.propagate is False
        assert len(s3lite_logger.handlers) == 1
        assert logging.getLogger('urllib3').level == logging.WARNING

    def test_configure_logging_file(self, s3lite_logger, tmp_path):
        logfile = tmp_path / 's3lite.log'
        configure_logging({'logging': {'logfile': str(logfile), 'logformat': 'json'}})

        logging.getLogger('s3lite.storage').info('hello')
        for handler in s3lite_logger.handlers:
            handler.flush()

        assert len(s3lite_logger.handlers) == 2
        assert '"message": "hello"' in logfile.read_text()

    def test_configure_logging_custom_format(self, s3lite_logger):
        configure_logging({'logging': {'logformat': '%(levelname)s %(message)s'}})
        assert s3lite_logger.handlers[0].formatter._fmt == '%(levelname)s %(message)s'
