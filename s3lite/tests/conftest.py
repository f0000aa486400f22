"""Shared fixtures for the s3lite tests"""

import logging
import re
from urllib.parse import unquote

import pytest

from s3lite.constants import ALGORITHM
from s3lite.response import Response
from s3lite.storage import S3

ENDPOINT = "http://localhost:9000"
VALID_BUCKET = re.compile(r"^[a-z0-9][a-z0-9.-]{1,61}[a-z0-9]$")


def error_body(code, message):
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f"<Error><Code>{code}</Code><Message>{message}</Message></Error>"
    ).encode()


class FakeS3Server:
    """
    In-memory stand-in for an S3 endpoint, installed in place of
    ``Connection.execute``. Records every request it receives.
    """

    def __init__(self):
        self.buckets = {}
        self.calls = []

    def count(self, method):
        return sum(1 for call in self.calls if call[0] == method)

    def __call__(self, relative_path="", method="GET", headers=None, body=None):
        headers = headers or {}
        self.calls.append((method, relative_path, headers))
        url = f"{ENDPOINT}/{relative_path}"
        assert headers["Authorization"].startswith(ALGORITHM)
        assert "X-Amz-Date" in headers

        path = unquote(relative_path.split("?", 1)[0])
        bucket, _, key = path.partition("/")
        if key:
            status, content = self._object(method, bucket, key, body)
        else:
            status, content = self._bucket(method, bucket)
        if method == "HEAD":
            content = b""
        return Response(url, content, status, {"Content-Length": str(len(content))})

    def _bucket(self, method, bucket):
        exists = bucket in self.buckets
        if method == "HEAD":
            return (200 if exists else 404), b""
        if method == "PUT":
            if not VALID_BUCKET.match(bucket):
                return 400, error_body("InvalidBucketName", "The specified bucket is not valid.")
            if exists:
                return 409, error_body("BucketAlreadyOwnedByYou", "Your previous request to create the named bucket succeeded.")
            self.buckets[bucket] = {}
            return 200, b""
        if method == "DELETE":
            if not VALID_BUCKET.match(bucket):
                return 400, error_body("InvalidBucketName", "The specified bucket is not valid.")
            if not exists:
                return 404, error_body("NoSuchBucket", "The specified bucket does not exist")
            if self.buckets[bucket]:
                return 409, error_body("BucketNotEmpty", "The bucket you tried to delete is not empty")
            del self.buckets[bucket]
            return 204, b""
        return 405, error_body("MethodNotAllowed", "Not allowed")

    def _object(self, method, bucket, key, body):
        if bucket not in self.buckets:
            return 404, error_body("NoSuchBucket", "The specified bucket does not exist")
        objects = self.buckets[bucket]
        if method == "PUT":
            objects[key] = body or b""
            return 200, b""
        if method in ("GET", "HEAD"):
            if key not in objects:
                return 404, error_body("NoSuchKey", "The specified key does not exist.")
            return 200, objects[key]
        if method == "DELETE":
            objects.pop(key, None)
            return 204, b""
        return 405, error_body("MethodNotAllowed", "Not allowed")


@pytest.fixture(autouse=True)
def restore_logging():
    """configure_logging rewires the s3lite logger; undo it after every test"""
    logger = logging.getLogger("s3lite")
    urllib3_logger = logging.getLogger("urllib3")
    saved = (logger.level, list(logger.handlers), logger.propagate, urllib3_logger.level)
    yield
    for handler in logger.handlers:
        if handler not in saved[1]:
            handler.close()
    logger.setLevel(saved[0])
    logger.handlers = saved[1]
    logger.propagate = saved[2]
    urllib3_logger.setLevel(saved[3])


@pytest.fixture
def fake_server():
    return FakeS3Server()


@pytest.fixture
def s3(fake_server, monkeypatch):
    """An S3 facade (default bucket ``test-bucket``) talking to the fake server"""
    storage = S3("key", "secret", ENDPOINT, "us-east-1", "test-bucket")
    monkeypatch.setattr(storage.client.connection, "execute", fake_server)
    yield storage
    storage.close()
