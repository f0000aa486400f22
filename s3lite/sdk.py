"""
sdk.py

Storage facade backed by the boto3 SDK. It satisfies the same bucket/object
contract as :class:`s3lite.storage.S3` and can be swapped in through
:func:`s3lite.storage.storage_factory`.
"""

from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from s3lite.auth import Authentication
from s3lite.connection import normalize_endpoint
from s3lite.constants import DEFAULT_REGION
from s3lite.exceptions import TransportError
from s3lite.status import (
    BUCKET_EXISTS,
    CREATE_BUCKET,
    DELETE_BUCKET,
    DELETE_OBJECT,
    GET_OBJECT,
    OBJECT_EXISTS,
    PUT_OBJECT,
    Outcome,
    resolve_status,
)
from s3lite.storage import ObjectStorage


def _status_code(error: ClientError) -> int:
    """HTTP status of a boto3 ClientError, falling back on a numeric error code"""
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    if status is None:
        code = error.response.get("Error", {}).get("Code", "")
        status = int(code) if str(code).isdigit() else 500
    return int(status)


class Boto3S3(ObjectStorage):
    """
    A storage facade using a boto3 S3 client (path-style addressing, SigV4).

    :param key: Access key
    :param secret: Secret access key
    :param endpoint: Base URL of the endpoint
    :param region: Server region
    :param bucket_name: Default bucket name
    :param timeout: Optional connect/read timeout in seconds
    :param verify: Verify TLS certificates (or path to a CA bundle)

    :raises ConfigurationError: If a credential is not a non-empty string
    :raises InvalidEndpoint: If the endpoint URL is invalid
    """

    def __init__(
        self,
        key: str,
        secret: str,
        endpoint: str,
        region: str,
        bucket_name: str = "",
        timeout: Optional[float] = None,
        verify=True,
    ) -> None:
        super().__init__(bucket_name)
        self.auth = Authentication(key, secret, region)
        self.endpoint = normalize_endpoint(endpoint)
        config_kwargs = {
            "signature_version": "s3v4",
            "s3": {"addressing_style": "path"},
            "retries": {"max_attempts": 1, "mode": "standard"},
            "max_pool_connections": 1,
        }
        if timeout:
            config_kwargs["connect_timeout"] = timeout
            config_kwargs["read_timeout"] = timeout
        self.client = boto3.client(
            "s3",
            endpoint_url=self.endpoint.rstrip("/"),
            aws_access_key_id=key,
            aws_secret_access_key=secret,
            region_name=region,
            verify=verify,
            config=Config(**config_kwargs),
        )
        self.loggit.debug("boto3 S3 client created for %s", self.endpoint)

    def __repr__(self):
        return f"Boto3S3(endpoint='{self.endpoint}', auth={self.auth!r}, bucket_name='{self._bucket_name}')"

    def _call(self, operation: str, method: str, **kwargs):
        """
        Invoke a boto3 client method.

        :returns: ``(outcome, result)``; ``result`` is None unless the call succeeded
        :raises ServiceError: On a failure status not absorbed for ``operation``
        :raises TransportError: If the exchange could not be completed
        """
        try:
            return Outcome.SUCCESS, getattr(self.client, method)(**kwargs)
        except ClientError as e:
            error = e.response.get("Error", {})
            outcome = resolve_status(
                operation,
                _status_code(e),
                code=error.get("Code"),
                message=error.get("Message"),
                response=e.response,
            )
            return outcome, None
        except BotoCoreError as e:
            self.loggit.error("%s failed: %s", method, e)
            raise TransportError(f"Failed to execute {method}: {e}") from e

    def bucket_exists(self, bucket_name: str = "") -> bool:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.debug("Checking if bucket %s exists", bucket)
        outcome, _ = self._call(BUCKET_EXISTS, "head_bucket", Bucket=bucket)
        return outcome is Outcome.SUCCESS

    def object_exists(self, key: str, bucket_name: str = "") -> bool:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.debug("Checking if object s3://%s/%s exists", bucket, key)
        outcome, _ = self._call(OBJECT_EXISTS, "head_object", Bucket=bucket, Key=key)
        return outcome is Outcome.SUCCESS

    def create_bucket(self, bucket_name: str = "") -> None:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.info("Creating bucket: %s", bucket)
        kwargs = {"Bucket": bucket}
        # AWS requires LocationConstraint for all regions except us-east-1
        if self.auth.region != DEFAULT_REGION:
            kwargs["CreateBucketConfiguration"] = {"LocationConstraint": self.auth.region}
        outcome, _ = self._call(CREATE_BUCKET, "create_bucket", **kwargs)
        if outcome is Outcome.ALREADY_EXISTS:
            self.loggit.info("Bucket %s already exists", bucket)
        self._register_bucket(bucket)

    def put_object(self, content, key: str, content_type: str, bucket_name: str = "") -> None:
        bucket = self.resolve_bucket(bucket_name)
        if not key:
            raise ValueError("An object key is required")
        self.loggit.info("Putting object: %s in bucket: %s", key, bucket)
        if isinstance(content, str):
            content = content.encode("utf-8")
        kwargs = {"Bucket": bucket, "Key": key, "Body": content}
        if content_type:
            kwargs["ContentType"] = content_type
        self._call(PUT_OBJECT, "put_object", **kwargs)
        self.add_object_key(bucket, key)

    def get_object(self, key: str, bucket_name: str = "") -> dict:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.debug("Getting object s3://%s/%s", bucket, key)
        _, result = self._call(GET_OBJECT, "get_object", Bucket=bucket, Key=key)
        return result

    def get_object_content(self, key: str, bucket_name: str = "") -> bytes:
        result = self.get_object(key, bucket_name)
        try:
            return result["Body"].read()
        except (BotoCoreError, OSError) as e:
            self.loggit.error("Error reading body of %s: %s", key, e)
            raise TransportError(f"Failed to read the body of {key}: {e}") from e

    def delete_bucket(self, bucket_name: str = "") -> bool:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.info("Deleting bucket: %s", bucket)
        outcome, _ = self._call(DELETE_BUCKET, "delete_bucket", Bucket=bucket)
        self._forget_bucket(bucket)
        if outcome is Outcome.ABSENT:
            self.loggit.info("Bucket %s does not exist", bucket)
            return False
        return True

    def delete_object(self, key: str, bucket_name: str = "") -> bool:
        bucket = self.resolve_bucket(bucket_name)
        if not self.object_exists(key, bucket):
            self.loggit.debug("Object s3://%s/%s does not exist, nothing to delete", bucket, key)
            return False
        self.loggit.info("Deleting object: %s from bucket: %s", key, bucket)
        outcome, _ = self._call(DELETE_OBJECT, "delete_object", Bucket=bucket, Key=key)
        self._forget_key(bucket, key)
        return outcome is not Outcome.ABSENT

    def close(self) -> None:
        self.client.close()
