"""s3lite Exceptions

This module contains all exception classes raised by the s3lite package.
Callers can catch :class:`S3LiteException` to handle every error the library
raises, or one of the subclasses to tell configuration, transport, decoding
and service failures apart.
"""


class S3LiteException(Exception):
    """
    Base class for all exceptions raised by s3lite.
    """


class ConfigurationError(S3LiteException):
    """
    Exception raised when credentials, endpoint or other settings are missing or
    malformed. Raised before any network I/O is attempted.
    """


class InvalidEndpoint(ConfigurationError):
    """
    Exception raised when the endpoint is not an absolute URL with a scheme and a host
    """


class SigningError(S3LiteException):
    """
    Exception raised when a request cannot be signed (e.g. unencodable header values)
    """


class TransportError(S3LiteException):
    """
    Exception raised when an HTTP exchange could not be completed (connection refused,
    DNS failure, timeout, too many redirects)
    """


class DecodingError(S3LiteException):
    """
    Exception raised when a response body cannot be decoded
    """


class InvalidXml(DecodingError):
    """
    Exception raised when a response body is not well-formed XML.

    :param message: Human readable message
    :param position: ``(line, column)`` reported by the XML parser, if any
    """

    def __init__(self, message, position=None):
        super().__init__(message)
        self.position = position


class ServiceError(S3LiteException):
    """
    Exception raised when the storage service answers with a non-success status.

    :param status_code: HTTP status code of the response
    :param code: S3 error code (``NoSuchBucket``, ``BucketNotEmpty``...), if the
        service sent an error document
    :param message: Error message from the service, or a generic one
    :param response: The :class:`~s3lite.response.Response` (or raw SDK error payload)
    """

    def __init__(self, status_code, code=None, message=None, response=None):
        self.status_code = status_code
        self.code = code
        self.message = message or f"Unexpected status code {status_code}"
        self.response = response
        super().__init__(self._render())

    def _render(self):
        if self.code:
            return f"[{self.status_code}] {self.code}: {self.message}"
        return f"[{self.status_code}] {self.message}"


class FileReadError(S3LiteException):
    """
    Exception raised when a local file or directory to upload cannot be read
    """
