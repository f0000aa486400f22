"""
Connection handling for the s3lite package.

A :class:`Connection` owns a single :class:`requests.Session` bound to a validated
base endpoint and executes one relative-path request at a time.
"""

import logging
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import requests

from s3lite.constants import DEFAULT_PORTS, DEFAULT_SCHEMES, MAX_REDIRECTS
from s3lite.exceptions import InvalidEndpoint, TransportError
from s3lite.response import Response


def normalize_endpoint(endpoint: str) -> str:
    """
    Validate an endpoint URL and return it with exactly one trailing ``/``.

    :param endpoint: Base URI of the S3 endpoint

    :raises InvalidEndpoint: If the endpoint is not an absolute http(s) URL with a host
    """
    if not isinstance(endpoint, str) or not endpoint.strip():
        raise InvalidEndpoint(f"Invalid endpoint URL: {endpoint!r}")
    endpoint = endpoint.strip()
    try:
        parts = urlsplit(endpoint)
        # Accessing port validates it
        parts.port
    except ValueError as e:
        raise InvalidEndpoint(f"Invalid endpoint URL: {endpoint} ({e})") from e
    if parts.scheme.lower() not in DEFAULT_SCHEMES or not parts.hostname:
        raise InvalidEndpoint(f"Invalid endpoint URL: {endpoint}")
    if parts.query or parts.fragment:
        raise InvalidEndpoint(f"Endpoint URL cannot have a query or fragment: {endpoint}")
    if any(char.isspace() for char in endpoint):
        raise InvalidEndpoint(f"Invalid endpoint URL: {endpoint}")
    return endpoint.rstrip("/") + "/"


class Connection:
    """
    A reusable HTTP handle bound to a base endpoint.

    Redirects are followed (at most ``MAX_REDIRECTS``) and response bodies are read
    into memory. The handle is not safe for concurrent use by several threads.

    :param endpoint: Base URI of the S3 endpoint
    :param timeout: Optional timeout in seconds for each exchange
    :param verify: Verify TLS certificates (or path to a CA bundle)

    :raises InvalidEndpoint: If the endpoint URL is invalid
    """

    def __init__(self, endpoint: str, timeout: Optional[float] = None, verify=True) -> None:
        self.loggit = logging.getLogger("s3lite.connection")
        self.base_uri = normalize_endpoint(endpoint)
        self.endpoint = endpoint
        self.timeout = timeout
        self.verify = verify
        self._parts = urlsplit(self.base_uri)
        self.session = requests.Session()
        self.session.max_redirects = MAX_REDIRECTS
        self.loggit.debug("Connection opened for %s", self.base_uri)

    @property
    def base_path(self) -> str:
        """Path component of the base URI, always ending with ``/``"""
        return self._parts.path or "/"

    def uri_for(self, relative_path: str = "") -> str:
        """Full target URL for a path relative to the base URI"""
        return self.base_uri + relative_path.lstrip("/")

    def path_for(self, relative_path: str = "") -> str:
        """Absolute request path (as sent on the wire) for a relative path"""
        return self.base_path + relative_path.lstrip("/")

    def host_header(self) -> str:
        """Value of the ``Host`` header, port omitted when it is the scheme default"""
        host = self._parts.hostname
        if ":" in host:
            host = f"[{host}]"
        port = self._parts.port
        if port and port != DEFAULT_PORTS.get(self._parts.scheme.lower()):
            return f"{host}:{port}"
        return host

    @staticmethod
    def _signed_target(prepared_url: str, url: str) -> str:
        """
        The prepared URL with the path and query of ``url`` put back verbatim.

        requests decodes unreserved escapes (``%2E`` becomes ``.``) while preparing
        a URL, so the path that was signed would no longer be the one sent.
        """
        prepared = urlsplit(prepared_url)
        target = urlsplit(url)
        return urlunsplit((prepared.scheme, prepared.netloc, target.path, target.query, ""))

    def execute(
        self,
        relative_path: str = "",
        method: str = "GET",
        headers: Optional[dict] = None,
        body=None,
    ) -> Response:
        """
        Execute one request against the endpoint.

        :param relative_path: Path relative to the base URI (may carry a query string)
        :param method: HTTP method
        :param headers: Request headers
        :param body: Request body

        :returns: The response of the completed exchange
        :raises TransportError: If the exchange could not be completed
        """
        url = self.uri_for(relative_path)
        self.loggit.debug("%s %s", method, url)
        try:
            prepared = self.session.prepare_request(
                requests.Request(method, url, headers=headers, data=body)
            )
            prepared.url = self._signed_target(prepared.url, url)
            settings = self.session.merge_environment_settings(
                prepared.url, {}, None, self.verify, None
            )
            raw = self.session.send(
                prepared, allow_redirects=True, timeout=self.timeout, **settings
            )
        except requests.RequestException as e:
            self.loggit.error("%s %s failed: %s", method, url, e)
            raise TransportError(f"Failed to execute {method} {url}: {e}") from e
        return Response.from_requests(raw)

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def __repr__(self):
        return f"Connection(endpoint='{self.base_uri}')"
