"""Protocol module for azsharedblob.

This module provides request canonicalization, signed request building,
XML wire helpers and error translation for the Azure Blob service.
"""

from azsharedblob.protocol.canonicalizer import (
    RequestCanonicalizer,
    CanonicalizedRequest,
    STANDARD_HEADERS,
    account_from_host,
)
from azsharedblob.protocol.errors import (
    ErrorKind,
    BlobError,
    BlobResult,
    BlobServiceError,
    LocalPreconditionError,
    NoSuchFileError,
    InvalidAuthenticationInfoError,
    ResourceNotFoundError,
    ResourceAlreadyExistsError,
    CustomServiceError,
    translate_response,
    translate_transport_error,
)
from azsharedblob.protocol.request_builder import (
    RequestBuilder,
    EndpointProtocol,
    DEFAULT_API_VERSION,
    blob_endpoint,
    format_http_date,
)
from azsharedblob.protocol.xml_codec import (
    XMLKeyPathError,
    decode_key_path,
)

__all__ = [
    "RequestCanonicalizer",
    "CanonicalizedRequest",
    "STANDARD_HEADERS",
    "account_from_host",
    "ErrorKind",
    "BlobError",
    "BlobResult",
    "BlobServiceError",
    "LocalPreconditionError",
    "NoSuchFileError",
    "InvalidAuthenticationInfoError",
    "ResourceNotFoundError",
    "ResourceAlreadyExistsError",
    "CustomServiceError",
    "translate_response",
    "translate_transport_error",
    "RequestBuilder",
    "EndpointProtocol",
    "DEFAULT_API_VERSION",
    "blob_endpoint",
    "format_http_date",
    "XMLKeyPathError",
    "decode_key_path",
]
