"""
s3lite - Lightweight client for S3-compatible object storage

This package signs requests with AWS Signature Version 4, sends them over HTTP
with path-style addressing and interprets the XML responses, without requiring
a vendor SDK.
"""

__version__ = "1.0.0"

from s3lite.exceptions import (
    S3LiteException,
    ConfigurationError,
    InvalidEndpoint,
    SigningError,
    TransportError,
    DecodingError,
    InvalidXml,
    ServiceError,
    FileReadError,
)
from s3lite.constants import (
    ALGORITHM,
    DATE_HEADER,
    CONTENT_SHA256_HEADER,
    MAX_REDIRECTS,
    PROVIDERS,
)
from s3lite.auth import Authentication
from s3lite.connection import Connection
from s3lite.response import Response
from s3lite.client import HttpClient
from s3lite.status import Outcome, STATUS_POLICY, resolve, resolve_status
from s3lite.storage import (
    ObjectStorage,
    S3,
    storage_factory,
)
from s3lite.config import (
    configure_logging,
    load_config,
    validate_config,
)

__all__ = [
    "__version__",
    # Exceptions
    "S3LiteException",
    "ConfigurationError",
    "InvalidEndpoint",
    "SigningError",
    "TransportError",
    "DecodingError",
    "InvalidXml",
    "ServiceError",
    "FileReadError",
    # Constants
    "ALGORITHM",
    "DATE_HEADER",
    "CONTENT_SHA256_HEADER",
    "MAX_REDIRECTS",
    "PROVIDERS",
    # Authentication and transport
    "Authentication",
    "Connection",
    "Response",
    "HttpClient",
    # Status mapping
    "Outcome",
    "STATUS_POLICY",
    "resolve",
    "resolve_status",
    # Storage
    "ObjectStorage",
    "S3",
    "storage_factory",
    # Configuration
    "configure_logging",
    "load_config",
    "validate_config",
]
