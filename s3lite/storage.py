"""
Object storage facades.

:class:`ObjectStorage` holds what every backend shares: default bucket handling and
the registry of buckets/keys created through the instance. :class:`S3` implements
the bucket and object operations over the native SigV4 HTTP client.
"""

import abc
import logging
from typing import Dict, List, Optional
from xml.etree import ElementTree

from s3lite.auth import Authentication
from s3lite.client import HttpClient, encode_path
from s3lite.constants import DEFAULT_REGION, PROVIDER_BOTO3, PROVIDER_NATIVE
from s3lite.exceptions import ConfigurationError
from s3lite.response import Response
from s3lite.status import (
    BUCKET_EXISTS,
    CREATE_BUCKET,
    DELETE_BUCKET,
    DELETE_OBJECT,
    GET_OBJECT,
    OBJECT_EXISTS,
    PUT_OBJECT,
    Outcome,
    resolve,
)
from s3lite.utilities import guess_content_type, iter_directory, read_file
from s3lite.validators import validate_options

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"


def _check_bucket_name(bucket_name) -> str:
    """None and "" both mean no bucket; anything else must be a string"""
    if bucket_name is None:
        return ""
    if not isinstance(bucket_name, str):
        raise ConfigurationError(
            f"Bucket name must be a string, got {type(bucket_name).__name__}"
        )
    return bucket_name


class ObjectStorage(metaclass=abc.ABCMeta):
    """
    Superclass for storage facades.

    Every operation takes an optional bucket name; when it is blank the default
    bucket (see :meth:`set_bucket_name`) is used instead. The registry returned by
    :meth:`get_objects` only reflects operations performed through this instance.

    :param bucket_name: Default bucket name
    """

    def __init__(self, bucket_name: str = "") -> None:
        self.loggit = logging.getLogger("s3lite.storage")
        self._bucket_name = _check_bucket_name(bucket_name)
        self._objects: Dict[str, List[str]] = {}

    @classmethod
    def from_dict(cls, config: dict) -> "ObjectStorage":
        """
        Create a facade from a configuration mapping.

        Accepted keys: ``key``, ``secret``, ``endpoint``, ``region``, and optionally
        ``bucket_name`` (``bucketName``), ``use_regional_config_discovery``
        (``useRegionalConfigDiscovery``), ``timeout``, ``verify``, ``provider``.

        :raises ConfigurationError: If a required field is missing or mistyped
        """
        options = validate_options("storage", config)
        return cls(
            key=options["key"],
            secret=options["secret"],
            endpoint=options["endpoint"],
            region=options["region"],
            bucket_name=options["bucket_name"] or "",
            timeout=options["timeout"],
            verify=options["verify"],
        )

    @property
    def bucket_name(self) -> str:
        return self._bucket_name

    def set_bucket_name(self, bucket_name: str) -> "ObjectStorage":
        """Set the default bucket name (chainable)"""
        self._bucket_name = _check_bucket_name(bucket_name)
        return self

    def resolve_bucket(self, bucket_name: Optional[str] = "") -> str:
        """
        The given bucket name, or the default one when blank.

        :raises ConfigurationError: If neither is set
        """
        name = _check_bucket_name(bucket_name) or self._bucket_name
        if not name:
            raise ConfigurationError(
                "No bucket name given and no default bucket name configured"
            )
        return name

    # Registry

    def add_object_key(self, bucket_name: str, key: str) -> None:
        """Record an object key created in a bucket outside the normal put path"""
        self._objects.setdefault(self.resolve_bucket(bucket_name), []).append(key)

    def get_objects(self) -> Dict[str, List[str]]:
        """Snapshot of the buckets and keys created through this instance"""
        return {bucket: list(keys) for bucket, keys in self._objects.items()}

    def _register_bucket(self, bucket_name: str) -> None:
        self._objects.setdefault(bucket_name, [])

    def _forget_bucket(self, bucket_name: str) -> None:
        self._objects.pop(bucket_name, None)

    def _forget_key(self, bucket_name: str, key: str) -> None:
        keys = self._objects.get(bucket_name)
        if keys and key in keys:
            keys.remove(key)

    # Operations

    @abc.abstractmethod
    def bucket_exists(self, bucket_name: str = "") -> bool:
        """
        Test whether or not the bucket exists

        :raises ServiceError: On any failure status other than "not found"
        """

    @abc.abstractmethod
    def object_exists(self, key: str, bucket_name: str = "") -> bool:
        """
        Test whether or not the object exists in the bucket

        :raises ServiceError: On any failure status other than "not found"
        """

    @abc.abstractmethod
    def create_bucket(self, bucket_name: str = "") -> None:
        """
        Create a bucket. Does nothing if the bucket already exists.

        :raises ServiceError: On any other failure status
        """

    @abc.abstractmethod
    def put_object(self, content, key: str, content_type: str, bucket_name: str = "") -> None:
        """
        Upload ``content`` (bytes or str) as the object ``key``.

        :raises ServiceError: If the service refuses the upload
        """

    @abc.abstractmethod
    def get_object(self, key: str, bucket_name: str = ""):
        """
        Fetch an object; returns the backend's raw result.

        :raises ServiceError: If the bucket or the key does not exist
        """

    @abc.abstractmethod
    def get_object_content(self, key: str, bucket_name: str = "") -> bytes:
        """
        Fetch the content of an object.

        :raises ServiceError: If the bucket or the key does not exist
        :raises TransportError: If the body cannot be fully read
        """

    @abc.abstractmethod
    def delete_bucket(self, bucket_name: str = "") -> bool:
        """
        Delete a bucket.

        :returns: False if the bucket does not exist, True once deleted
        :raises ServiceError: On any other failure (e.g. bucket not empty)
        """

    @abc.abstractmethod
    def delete_object(self, key: str, bucket_name: str = "") -> bool:
        """
        Delete an object.

        :returns: False if the object does not exist, True once deleted
        :raises ServiceError: On any other failure status
        """

    def put_file(self, file_path, key: str, content_type: str, bucket_name: str = "") -> None:
        """
        Upload the content of a local file as the object ``key``.

        :raises FileReadError: If the file cannot be read
        """
        self.put_object(read_file(file_path), key, content_type, bucket_name)

    def put_directory(self, path, prefix: str = "", bucket_name: str = "") -> List[str]:
        """
        Upload every regular file under ``path``.

        Keys are the paths relative to ``path``, prefixed with the virtual directory
        ``prefix``. Nothing is uploaded when ``path`` is not a readable directory.

        :returns: The uploaded keys, in upload order
        :raises FileReadError: If ``path`` is not a readable directory
        """
        bucket = self.resolve_bucket(bucket_name)
        files = iter_directory(path, prefix)
        self.loggit.info("Uploading directory %s to bucket %s", path, bucket)
        keys = []
        for file_path, key in files:
            self.put_file(file_path, key, guess_content_type(file_path), bucket)
            keys.append(key)
        self.loggit.info("Uploaded %d files from %s to bucket %s", len(keys), path, bucket)
        return keys

    def cleanup(self) -> List[str]:
        """
        Delete every object registered through this instance, then its bucket.

        Objects or buckets that are already gone are skipped.

        :returns: The buckets handled, in registration order
        """
        handled = []
        for bucket, keys in self.get_objects().items():
            for key in keys:
                self.delete_object(key, bucket)
            self.delete_bucket(bucket)
            handled.append(bucket)
        return handled

    def close(self) -> None:
        """Release the resources held by the backend"""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


class S3(ObjectStorage):
    """
    Storage facade over the native SigV4 HTTP client (path-style addressing).

    :param key: Access key
    :param secret: Secret access key
    :param endpoint: Base URL of the endpoint
    :param region: Server region
    :param bucket_name: Default bucket name
    :param timeout: Optional timeout in seconds for each exchange
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
        self.client = HttpClient(endpoint, timeout=timeout, verify=verify)

    def __repr__(self):
        return f"S3(endpoint='{self.client.endpoint}', auth={self.auth!r}, bucket_name='{self._bucket_name}')"

    def _location_constraint(self) -> bytes:
        if self.auth.region == DEFAULT_REGION:
            return b""
        root = ElementTree.Element("CreateBucketConfiguration", xmlns=S3_NAMESPACE)
        ElementTree.SubElement(root, "LocationConstraint").text = self.auth.region
        return ElementTree.tostring(root, encoding="utf-8")

    def bucket_exists(self, bucket_name: str = "") -> bool:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.debug("Checking if bucket %s exists", bucket)
        response = self.client.head(self.auth, encode_path(bucket))
        return resolve(BUCKET_EXISTS, response) is Outcome.SUCCESS

    def object_exists(self, key: str, bucket_name: str = "") -> bool:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.debug("Checking if object s3://%s/%s exists", bucket, key)
        response = self.client.head(self.auth, encode_path(bucket, key))
        return resolve(OBJECT_EXISTS, response) is Outcome.SUCCESS

    def create_bucket(self, bucket_name: str = "") -> None:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.info("Creating bucket: %s", bucket)
        body = self._location_constraint()
        headers = {"Content-Type": "application/xml"} if body else None
        response = self.client.put(self.auth, encode_path(bucket), body=body, headers=headers)
        if resolve(CREATE_BUCKET, response) is Outcome.ALREADY_EXISTS:
            self.loggit.info("Bucket %s already exists", bucket)
        self._register_bucket(bucket)

    def put_object(self, content, key: str, content_type: str, bucket_name: str = "") -> None:
        bucket = self.resolve_bucket(bucket_name)
        if not key:
            raise ValueError("An object key is required")
        self.loggit.info("Putting object: %s in bucket: %s", key, bucket)
        headers = {"Content-Type": content_type} if content_type else None
        response = self.client.put(
            self.auth, encode_path(bucket, key), body=content, headers=headers
        )
        resolve(PUT_OBJECT, response)
        self.add_object_key(bucket, key)

    def get_object(self, key: str, bucket_name: str = "") -> Response:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.debug("Getting object s3://%s/%s", bucket, key)
        response = self.client.get(self.auth, encode_path(bucket, key))
        resolve(GET_OBJECT, response)
        return response

    def get_object_content(self, key: str, bucket_name: str = "") -> bytes:
        return self.get_object(key, bucket_name).body

    def delete_bucket(self, bucket_name: str = "") -> bool:
        bucket = self.resolve_bucket(bucket_name)
        self.loggit.info("Deleting bucket: %s", bucket)
        response = self.client.delete(self.auth, encode_path(bucket))
        outcome = resolve(DELETE_BUCKET, response)
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
        response = self.client.delete(self.auth, encode_path(bucket, key))
        outcome = resolve(DELETE_OBJECT, response)
        self._forget_key(bucket, key)
        return outcome is not Outcome.ABSENT

    def close(self) -> None:
        self.client.close()


def storage_factory(config: dict) -> ObjectStorage:
    """
    Return a storage facade for the ``provider`` named in ``config``.

    Args:
        config (dict): Storage configuration (see :meth:`ObjectStorage.from_dict`)

    Raises:
        ConfigurationError: raised if the configuration is invalid or names an
            unsupported provider

    Returns:
        ObjectStorage: :class:`S3` for ``native``, :class:`~s3lite.sdk.Boto3S3` for ``boto3``
    """
    provider = validate_options("storage", config)["provider"]
    if provider == PROVIDER_NATIVE:
        return S3.from_dict(config)
    if provider == PROVIDER_BOTO3:
        from s3lite.sdk import Boto3S3

        return Boto3S3.from_dict(config)
    raise ConfigurationError(f"Unsupported provider: {provider}")
