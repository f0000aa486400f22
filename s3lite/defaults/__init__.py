"""
Option defaults for the s3lite package.

This module provides voluptuous schema definitions for every configuration
option accepted by the storage facades and by the logging setup.
"""

from voluptuous import All, Any, Coerce, Length, Optional, Range, Required

from s3lite.constants import PROVIDER_NATIVE, PROVIDERS


def Boolean():
    """
    Validate boolean-like string values.
    Accepts 'true', 'false', '1', '0', 'yes', 'no' (case-insensitive).
    """
    def validator(value):
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            if value.lower() in ('true', '1', 'yes'):
                return True
            if value.lower() in ('false', '0', 'no'):
                return False
        raise ValueError(f"Invalid boolean value: {value}")
    return validator


def NonEmptyString():
    return All(str, Length(min=1))


# Storage options

def key():
    """
    Access key used to sign requests.
    """
    return {Required("key"): NonEmptyString()}


def secret():
    """
    Secret access key used to sign requests. Never logged.
    """
    return {Required("secret"): NonEmptyString()}


def endpoint():
    """
    Base URL of the S3-compatible endpoint (e.g. http://localhost:9000).
    """
    return {Required("endpoint"): NonEmptyString()}


def region():
    """
    Region of the storage service, part of the signature scope.
    """
    return {Required("region"): NonEmptyString()}


def bucket_name():
    """
    Default bucket, used when an operation does not name one.
    """
    return {Optional("bucket_name", default=""): Any(None, str)}


def use_regional_config_discovery():
    """
    Resolve a missing region from the AWS_REGION / AWS_DEFAULT_REGION environment.
    """
    return {
        Optional("use_regional_config_discovery", default=False): Any(
            bool, All(str, Boolean())
        )
    }


def provider():
    """
    Storage backend: the native SigV4 client or the boto3 SDK.
    """
    return {Optional("provider", default=PROVIDER_NATIVE): Any(*PROVIDERS)}


def timeout():
    """
    Timeout in seconds for each HTTP exchange (no timeout when unset).
    """
    return {
        Optional("timeout", default=None): Any(
            None, All(Coerce(float), Range(min=0, min_included=False))
        )
    }


def verify():
    """
    Verify TLS certificates, or path to a CA bundle.
    """
    return {Optional("verify", default=True): Any(bool, str)}


# Logging options

def loglevel():
    """
    Log level of the s3lite loggers.
    """
    return {
        Optional("loglevel", default="INFO"): All(
            str, lambda v: v.upper(), Any("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        )
    }


def logfile():
    """
    Optional file to write log messages to, in addition to the console.
    """
    return {Optional("logfile", default=None): Any(None, str)}


def logformat():
    """
    Log format: default, json, logstash, or a custom format string.
    """
    return {Optional("logformat", default="default"): NonEmptyString()}
