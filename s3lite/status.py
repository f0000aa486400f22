"""
Mapping of storage service status codes to operation outcomes.

Only the entries of :data:`STATUS_POLICY` are absorbed; every other non-success
status becomes a :class:`~s3lite.exceptions.ServiceError`.
"""

from enum import Enum

from s3lite.exceptions import ServiceError


class Outcome(Enum):
    """Result of an exchange as seen by the storage facade"""

    SUCCESS = "success"
    ABSENT = "absent"
    ALREADY_EXISTS = "already_exists"


# Operation names
BUCKET_EXISTS = "bucket_exists"
OBJECT_EXISTS = "object_exists"
CREATE_BUCKET = "create_bucket"
DELETE_BUCKET = "delete_bucket"
PUT_OBJECT = "put_object"
GET_OBJECT = "get_object"
DELETE_OBJECT = "delete_object"

OPERATIONS = [
    BUCKET_EXISTS,
    OBJECT_EXISTS,
    CREATE_BUCKET,
    DELETE_BUCKET,
    PUT_OBJECT,
    GET_OBJECT,
    DELETE_OBJECT,
]

# (operation, status code) -> outcome
STATUS_POLICY = {
    (CREATE_BUCKET, 409): Outcome.ALREADY_EXISTS,
    (DELETE_BUCKET, 404): Outcome.ABSENT,
    (DELETE_OBJECT, 404): Outcome.ABSENT,
    (BUCKET_EXISTS, 404): Outcome.ABSENT,
    (OBJECT_EXISTS, 404): Outcome.ABSENT,
}


# Existence checks answer yes on any 2xx/3xx; every other operation needs a 2xx
PROBES = frozenset([BUCKET_EXISTS, OBJECT_EXISTS])


def is_success(operation: str, status_code: int) -> bool:
    if operation in PROBES:
        return 200 <= status_code < 400
    return 200 <= status_code < 300


def resolve_status(operation: str, status_code: int, code=None, message=None, response=None) -> Outcome:
    """
    Translate a status code into an :class:`Outcome` for the given operation.

    :param operation: One of :data:`OPERATIONS`
    :param status_code: HTTP status code of the response
    :param code: S3 error code, used when raising
    :param message: S3 error message, used when raising
    :param response: Raw response, attached to the raised error

    :raises ServiceError: If the status is neither a success for ``operation`` nor
        a documented case (a redirect left unfollowed is a failure for everything
        but the existence checks)
    :raises ValueError: If the operation is unknown
    """
    if operation not in OPERATIONS:
        raise ValueError(f"Unknown operation: {operation}")
    if is_success(operation, status_code):
        return Outcome.SUCCESS
    outcome = STATUS_POLICY.get((operation, status_code))
    if outcome is not None:
        return outcome
    raise ServiceError(status_code, code=code, message=message, response=response)


def resolve(operation: str, response) -> Outcome:
    """
    :func:`resolve_status` for a :class:`~s3lite.response.Response`; the error
    document is only parsed when an error has to be raised.
    """
    if is_success(operation, response.status_code) or (operation, response.status_code) in STATUS_POLICY:
        return resolve_status(operation, response.status_code)
    code, message = response.error_details()
    return resolve_status(
        operation, response.status_code, code=code, message=message, response=response
    )
