"""Constants for the s3lite package"""

# Signature Version 4
ALGORITHM = "AWS4-HMAC-SHA256"
DATE_HEADER = "X-Amz-Date"
CONTENT_SHA256_HEADER = "X-Amz-Content-Sha256"
AUTHORIZATION_HEADER = "Authorization"
SERVICE = "s3"
TERMINATOR = "aws4_request"
AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
DATE_STAMP_FORMAT = "%Y%m%d"

# SHA-256 of an empty payload
EMPTY_SHA256 = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"

REDACTED = "********"

# Transport
MAX_REDIRECTS = 10
DEFAULT_SCHEMES = ("http", "https")
DEFAULT_PORTS = {"http": 80, "https": 443}

# Regions where CreateBucket must not carry a LocationConstraint
DEFAULT_REGION = "us-east-1"

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Storage backends
PROVIDER_NATIVE = "native"
PROVIDER_BOTO3 = "boto3"
PROVIDERS = [PROVIDER_NATIVE, PROVIDER_BOTO3]

# Environment variables consulted by regional config discovery
REGION_ENV_VARS = ("AWS_REGION", "AWS_DEFAULT_REGION")
