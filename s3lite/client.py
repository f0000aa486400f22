"""
HTTP client signing and sending requests to an S3 endpoint.
"""

import logging
from typing import Mapping, Optional
from urllib.parse import quote

from s3lite.auth import Authentication, get_canonical_query_string, hash_payload
from s3lite.connection import Connection
from s3lite.response import Response


def _encode_part(part: str) -> str:
    # Literal dot segments would be collapsed by the URL parser before sending
    if part in (".", ".."):
        return "%2E" * len(part)
    return quote(part, safe="~")


def encode_path(*segments: str) -> str:
    """
    Join path segments (bucket name, object key) and URL-encode them once.

    Slashes inside object keys are kept as path separators. Key parts that are
    exactly ``.`` or ``..`` are sent percent-encoded so that the object is
    stored under the key as given.
    """
    return "/".join(
        _encode_part(part)
        for segment in segments
        if segment
        for part in segment.split("/")
    )


class HttpClient:
    """
    Client handling signed HTTP requests.

    The :class:`~s3lite.auth.Authentication` is passed explicitly to every request so
    that signing stays a pure function of its inputs.

    :param endpoint: Base URI of the S3 endpoint
    :param timeout: Optional timeout in seconds for each exchange
    :param verify: Verify TLS certificates (or path to a CA bundle)

    :raises InvalidEndpoint: If the endpoint URL is invalid
    """

    def __init__(self, endpoint: str, timeout: Optional[float] = None, verify=True) -> None:
        self.loggit = logging.getLogger("s3lite.client")
        self.connection = Connection(endpoint, timeout=timeout, verify=verify)

    @property
    def endpoint(self) -> str:
        return self.connection.endpoint

    def request(
        self,
        auth: Authentication,
        method: str,
        path: str = "",
        body=b"",
        headers: Optional[Mapping] = None,
        params: Optional[Mapping] = None,
    ) -> Response:
        """
        Sign and send a request.

        :param auth: Credentials to sign the request with
        :param method: HTTP method
        :param path: Path relative to the endpoint, already URL-encoded
        :param body: Request body
        :param headers: Extra request headers (``Content-Type``...)
        :param params: Query parameters

        :raises SigningError: If the request cannot be signed
        :raises TransportError: If the exchange could not be completed
        """
        if body is None:
            body = b""
        elif isinstance(body, str):
            body = body.encode("utf-8")

        request_headers = {"Host": self.connection.host_header()}
        request_headers.update(headers or {})
        if body:
            request_headers["Content-Length"] = str(len(body))
        request_headers.update(
            auth.sign(
                method,
                self.connection.path_for(path),
                query=params,
                headers=request_headers,
                payload_hash=hash_payload(body),
            )
        )

        relative = path
        query = get_canonical_query_string(params)
        if query:
            relative = f"{path}?{query}"

        response = self.connection.execute(
            relative, method=method, headers=request_headers, body=body or None
        )
        self.loggit.debug("%s %s -> %d", method, response.url, response.status_code)
        return response

    def get(self, auth: Authentication, path: str = "", **kwargs) -> Response:
        return self.request(auth, "GET", path, **kwargs)

    def head(self, auth: Authentication, path: str = "", **kwargs) -> Response:
        return self.request(auth, "HEAD", path, **kwargs)

    def put(self, auth: Authentication, path: str = "", body=b"", **kwargs) -> Response:
        return self.request(auth, "PUT", path, body=body, **kwargs)

    def delete(self, auth: Authentication, path: str = "", **kwargs) -> Response:
        return self.request(auth, "DELETE", path, **kwargs)

    def close(self) -> None:
        self.connection.close()
