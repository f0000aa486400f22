"""AWS Signature Version 4 authentication for S3-compatible services

The module level helpers implement each step of the public SigV4 algorithm so that
they can be tested in isolation; :class:`Authentication` ties them together with
a set of credentials.
"""

import hashlib
import hmac
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Optional
from urllib.parse import quote

from s3lite.constants import (
    ALGORITHM,
    AMZ_DATE_FORMAT,
    AUTHORIZATION_HEADER,
    CONTENT_SHA256_HEADER,
    DATE_HEADER,
    DATE_STAMP_FORMAT,
    EMPTY_SHA256,
    REDACTED,
    SERVICE,
    TERMINATOR,
)
from s3lite.exceptions import ConfigurationError, SigningError

# Headers that proxies and clients are known to rewrite
UNSIGNED_HEADERS = frozenset(["authorization", "user-agent", "expect"])


def sign(key: bytes, msg: str) -> bytes:
    """HMAC-SHA256 signing helper"""
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def get_signature_key(secret_key: str, date_stamp: str, region: str, service: str) -> bytes:
    """
    Derive the signing key for AWS Signature Version 4.

    The signing key is derived from the secret access key through a series of
    HMAC-SHA256 operations: kSecret -> kDate -> kRegion -> kService -> kSigning
    """
    k_date = sign(("AWS4" + secret_key).encode("utf-8"), date_stamp)
    k_region = sign(k_date, region)
    k_service = sign(k_region, service)
    return sign(k_service, TERMINATOR)


def hash_payload(payload) -> str:
    """Calculate the hex SHA256 hash of the payload (``str`` is UTF-8 encoded)"""
    if payload is None:
        return EMPTY_SHA256
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def get_canonical_uri(path: str) -> str:
    """
    Get canonical URI (URL-encoded path).

    The path is the one sent on the wire, already encoded once (S3 rule), so
    existing escapes such as ``%2E%2E`` are kept as they are and only characters
    that are not URI-safe get encoded.
    """
    if not path:
        return "/"
    if not path.startswith("/"):
        path = "/" + path
    return quote(path, safe="/~%")


def get_canonical_query_string(params: Optional[Mapping] = None) -> str:
    """
    Get canonical query string.

    - Sort query params by key name (then value)
    - URL-encode keys and values (RFC 3986)
    """
    if not params:
        return ""
    pairs = []
    for key, value in params.items():
        value = "" if value is None else str(value)
        pairs.append((quote(str(key), safe="-_.~"), quote(value, safe="-_.~")))
    return "&".join(f"{key}={value}" for key, value in sorted(pairs))


def _header_value(name: str, value) -> str:
    if isinstance(value, bytes):
        try:
            value = value.decode("ascii")
        except UnicodeDecodeError as e:
            raise SigningError(f"Header {name} is not ASCII: {e}") from e
    elif not isinstance(value, (str, int)):
        raise SigningError(f"Header {name} has an unsupported type: {type(value).__name__}")
    value = str(value)
    try:
        value.encode("latin-1")
    except UnicodeEncodeError as e:
        raise SigningError(f"Header {name} cannot be encoded: {e}") from e
    # Trim and collapse whitespace
    return " ".join(value.split())


def get_canonical_headers(headers: Mapping) -> tuple:
    """
    Get canonical headers and the signed headers list.

    - Lowercase header names
    - Trim whitespace from values
    - Sort by header name

    :returns: ``(canonical_headers, signed_headers)``
    :rtype: tuple
    """
    canonical = {}
    for name, value in headers.items():
        lower = name.lower().strip()
        if lower in UNSIGNED_HEADERS:
            continue
        canonical[lower] = _header_value(name, value)
    names = sorted(canonical)
    lines = "".join(f"{name}:{canonical[name]}\n" for name in names)
    return lines, ";".join(names)


def create_canonical_request(
    method: str,
    path: str,
    params: Optional[Mapping],
    headers: Mapping,
    payload_hash: str,
) -> tuple:
    """
    Create the canonical request string.

    Format:
    HTTPMethod\\n
    CanonicalURI\\n
    CanonicalQueryString\\n
    CanonicalHeaders\\n
    SignedHeaders\\n
    HashedPayload

    :returns: ``(canonical_request, signed_headers)``
    :rtype: tuple
    """
    canonical_headers, signed_headers = get_canonical_headers(headers)
    canonical_request = "\n".join([
        method.upper(),
        get_canonical_uri(path),
        get_canonical_query_string(params),
        canonical_headers,
        signed_headers,
        payload_hash,
    ])
    return canonical_request, signed_headers


def create_string_to_sign(canonical_request: str, amz_date: str,
                          date_stamp: str, region: str, service: str) -> str:
    """
    Create the string to sign.

    Format:
    Algorithm\\n
    RequestDateTime\\n
    CredentialScope\\n
    HashedCanonicalRequest
    """
    credential_scope = f"{date_stamp}/{region}/{service}/{TERMINATOR}"
    hashed_canonical = hashlib.sha256(canonical_request.encode("utf-8")).hexdigest()
    return "\n".join([ALGORITHM, amz_date, credential_scope, hashed_canonical])


def calculate_signature(string_to_sign: str, secret_key: str,
                        date_stamp: str, region: str, service: str) -> str:
    """Calculate the AWS Signature V4 signature"""
    signing_key = get_signature_key(secret_key, date_stamp, region, service)
    return hmac.new(signing_key, string_to_sign.encode("utf-8"), hashlib.sha256).hexdigest()


@dataclass(frozen=True, repr=False)
class Authentication:
    """
    Credentials used to sign requests (AWS Signature Version 4).

    :param key: Access key
    :param secret: Secret access key
    :param region: Server region
    """

    key: str
    secret: str
    region: str

    ALGORITHM = ALGORITHM
    DATE_HEADER = DATE_HEADER

    def __post_init__(self):
        for name in ("key", "secret", "region"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"Authentication {name} must be a non-empty string")

    def debug_info(self) -> dict:
        """Credentials as a dict with the key and secret redacted"""
        return {"key": REDACTED, "secret": REDACTED, "region": self.region}

    def __repr__(self):
        return f"Authentication(key='{REDACTED}', secret='{REDACTED}', region='{self.region}')"

    __str__ = __repr__

    def credential_scope(self, date_stamp: str) -> str:
        return f"{date_stamp}/{self.region}/{SERVICE}/{TERMINATOR}"

    def sign(
        self,
        method: str,
        path: str,
        query: Optional[Mapping] = None,
        headers: Optional[Mapping] = None,
        payload_hash: str = EMPTY_SHA256,
        timestamp: Optional[datetime] = None,
    ) -> dict:
        """
        Compute the headers that authorize a request.

        ``headers`` must contain ``Host``; every header given is signed. The result
        holds ``Authorization``, ``X-Amz-Date`` and ``X-Amz-Content-Sha256`` and is
        meant to be merged into the request headers.

        :param method: HTTP method
        :param path: Absolute request path, as sent on the wire
        :param query: Query parameters
        :param headers: Request headers, including ``Host``
        :param payload_hash: Hex SHA256 of the body, or ``UNSIGNED-PAYLOAD``
        :param timestamp: Signing time, defaults to now (UTC)

        :raises SigningError: If a header value cannot be encoded
        """
        headers = dict(headers or {})
        if not any(name.lower() == "host" for name in headers):
            raise SigningError("The Host header is required to sign a request")

        if timestamp is None:
            timestamp = datetime.now(timezone.utc)
        elif timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        else:
            timestamp = timestamp.astimezone(timezone.utc)
        amz_date = timestamp.strftime(AMZ_DATE_FORMAT)
        date_stamp = timestamp.strftime(DATE_STAMP_FORMAT)

        # Drop caller supplied copies so that they are not signed twice
        headers = {
            name: value for name, value in headers.items()
            if name.lower() not in (DATE_HEADER.lower(), CONTENT_SHA256_HEADER.lower())
        }
        headers[DATE_HEADER] = amz_date
        headers[CONTENT_SHA256_HEADER] = payload_hash

        canonical_request, signed_headers = create_canonical_request(
            method, path, query, headers, payload_hash
        )
        string_to_sign = create_string_to_sign(
            canonical_request, amz_date, date_stamp, self.region, SERVICE
        )
        signature = calculate_signature(
            string_to_sign, self.secret, date_stamp, self.region, SERVICE
        )
        authorization = (
            f"{ALGORITHM} Credential={self.key}/{self.credential_scope(date_stamp)}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )
        return {
            AUTHORIZATION_HEADER: authorization,
            DATE_HEADER: amz_date,
            CONTENT_SHA256_HEADER: payload_hash,
        }
