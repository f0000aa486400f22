"""Responses from HTTP requests"""

import re
from dataclasses import dataclass, field
from typing import Optional, Tuple
from xml.etree import ElementTree

from requests.structures import CaseInsensitiveDict

from s3lite.exceptions import InvalidXml

_NAMESPACE = re.compile(r"^\{[^}]*\}")


def _strip_namespaces(element: ElementTree.Element) -> ElementTree.Element:
    """Remove ``{namespace}`` prefixes from every tag in the tree"""
    for node in element.iter():
        if isinstance(node.tag, str):
            node.tag = _NAMESPACE.sub("", node.tag)
    return element


@dataclass(frozen=True)
class Response:
    """
    The outcome of a single completed HTTP exchange.

    :param url: Final URL of the request, after redirects
    :param body: Raw body of the response
    :param status_code: HTTP status code
    :param headers: Response headers (case-insensitive keys)
    """

    url: str
    body: bytes
    status_code: int
    headers: CaseInsensitiveDict = field(default_factory=CaseInsensitiveDict, compare=False)

    def __post_init__(self):
        if isinstance(self.body, str):
            object.__setattr__(self, "body", self.body.encode("utf-8"))
        elif self.body is None:
            object.__setattr__(self, "body", b"")
        if not isinstance(self.headers, CaseInsensitiveDict):
            object.__setattr__(self, "headers", CaseInsensitiveDict(self.headers or {}))

    @classmethod
    def from_requests(cls, raw) -> "Response":
        """Create a Response from a completed :class:`requests.Response`"""
        return cls(
            url=raw.url,
            body=raw.content or b"",
            status_code=raw.status_code,
            headers=CaseInsensitiveDict(raw.headers),
        )

    @property
    def ok(self) -> bool:
        """True for 2xx and 3xx status codes"""
        return 200 <= self.status_code < 400

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def xml(self) -> ElementTree.Element:
        """
        Returns the response body as an XML element (standard for S3 responses).

        Namespaces are stripped from the tags so that ``xml().find("Code")`` works
        on namespaced S3 documents.

        :raises InvalidXml: If the body is not well-formed XML
        """
        try:
            root = ElementTree.fromstring(self.body)
        except ElementTree.ParseError as e:
            raise InvalidXml(f"Invalid XML response: {e}", position=e.position) from e
        return _strip_namespaces(root)

    def error_details(self) -> Tuple[Optional[str], Optional[str]]:
        """
        ``(code, message)`` of an S3 error document, ``(None, None)`` when the body
        is empty or is not XML.
        """
        if not self.body.strip():
            return None, None
        try:
            root = self.xml()
        except InvalidXml:
            return None, None
        return root.findtext("Code"), root.findtext("Message")
