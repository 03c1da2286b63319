"""Typed errors for Azure Blob Storage operations.

Failed responses are translated into a small taxonomy keyed by HTTP status.
The kind always comes from the status code; the message is best effort,
taken from ``Error.Message`` in the XML body when one is present and
falling back to a fixed message per kind otherwise.

Local precondition failures (a source file that cannot be read) use their
own branch of the hierarchy and never carry a status code.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Generic, Optional, Type, TypeVar

import httpx

from azsharedblob.protocol.xml_codec import XMLKeyPathError, decode_key_path

logger = logging.getLogger(__name__)

ERROR_MESSAGE_KEY_PATH = "Error.Message"
REQUEST_ID_HEADER = "x-ms-request-id"
ERROR_CODE_HEADER = "x-ms-error-code"

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Stable error kinds surfaced to callers."""

    NO_SUCH_FILE = "NoSuchFile"
    INVALID_AUTHENTICATION_INFO = "InvalidAuthenticationInfo"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    RESOURCE_ALREADY_EXISTS = "ResourceAlreadyExists"
    CUSTOM = "Custom"


DEFAULT_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.NO_SUCH_FILE: "No file found",
    ErrorKind.INVALID_AUTHENTICATION_INFO: "The key is missing or is invalid",
    ErrorKind.RESOURCE_NOT_FOUND: "The specific resource is not found",
    ErrorKind.RESOURCE_ALREADY_EXISTS: "Resource already exists",
    ErrorKind.CUSTOM: "Unknown error",
}


class BlobError(Exception):
    """Base exception for all blob client errors."""

    kind: ErrorKind = ErrorKind.CUSTOM

    def __init__(self, message: Optional[str] = None):
        self.message = message or DEFAULT_MESSAGES[self.kind]
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


class LocalPreconditionError(BlobError):
    """A local precondition failed before any request was sent."""


class NoSuchFileError(LocalPreconditionError):
    """The upload source does not exist or cannot be read."""

    kind = ErrorKind.NO_SUCH_FILE

    def __init__(self, path: Optional[str] = None, message: Optional[str] = None):
        self.path = path
        super().__init__(message)


class BlobServiceError(BlobError):
    """The service (or the transport to it) rejected a request."""

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        error_code: Optional[str] = None,
    ):
        self.status_code = status_code
        self.request_id = request_id
        self.error_code = error_code
        super().__init__(message)


class InvalidAuthenticationInfoError(BlobServiceError):
    """The signature or key was rejected (401)."""

    kind = ErrorKind.INVALID_AUTHENTICATION_INFO


class ResourceNotFoundError(BlobServiceError):
    """The container or blob does not exist (404)."""

    kind = ErrorKind.RESOURCE_NOT_FOUND


class ResourceAlreadyExistsError(BlobServiceError):
    """The container or blob already exists (409)."""

    kind = ErrorKind.RESOURCE_ALREADY_EXISTS


class CustomServiceError(BlobServiceError):
    """Any other failure, including transport errors."""

    kind = ErrorKind.CUSTOM


STATUS_ERROR_TYPES: Dict[int, Type[BlobServiceError]] = {
    401: InvalidAuthenticationInfoError,
    404: ResourceNotFoundError,
    409: ResourceAlreadyExistsError,
}


def error_type_for_status(status_code: int) -> Type[BlobServiceError]:
    """Map an HTTP status code to its error class."""
    return STATUS_ERROR_TYPES.get(status_code, CustomServiceError)


def translate_response(
    response: httpx.Response,
    cause: Optional[Exception] = None,
) -> BlobServiceError:
    """
    Translate a failed response into a typed error.

    Args:
        response: Response with a non-success status
        cause: Transport-level error describing the failure, used as the
            message when the body cannot be decoded

    Returns:
        BlobServiceError subclass matching the status code
    """
    error_type = error_type_for_status(response.status_code)
    body = response.content

    message: Optional[str] = None
    if body:
        try:
            message = decode_key_path(body, ERROR_MESSAGE_KEY_PATH)
        except XMLKeyPathError as e:
            logger.debug(f"Could not extract error message from response body: {e}")
            message = str(cause) if cause is not None else None

    return error_type(
        message=message,
        status_code=response.status_code,
        request_id=response.headers.get(REQUEST_ID_HEADER),
        error_code=response.headers.get(ERROR_CODE_HEADER),
    )


def translate_transport_error(exc: httpx.HTTPError) -> BlobServiceError:
    """Translate a transport failure (no response) into a typed error."""
    return CustomServiceError(message=str(exc) or type(exc).__name__)


@dataclass(frozen=True)
class BlobResult(Generic[T]):
    """Outcome of a public operation: a value or a typed error."""

    value: Optional[T] = None
    error: Optional[BlobError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Optional[T]:
        """Return the value, raising the error on failure."""
        if self.error is not None:
            raise self.error
        return self.value

    @classmethod
    def success(cls, value: Optional[T] = None) -> "BlobResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: BlobError) -> "BlobResult[T]":
        return cls(error=error)
