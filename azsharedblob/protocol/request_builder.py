"""Signed request construction for Azure Blob Storage.

Every request gets three baseline headers (client request id, date and API
version), caller headers on top, an exact ``Content-Length`` when a body is
sent, and finally the SharedKey ``Authorization`` header computed over the
finished request. Nothing is cached between calls: date, request id and
signature are recomputed each time.
"""

import logging
import uuid
from datetime import datetime, timezone
from email.utils import format_datetime
from enum import Enum
from typing import Collection, Mapping, Optional, Sequence, Tuple
from urllib.parse import quote

import httpx

from azsharedblob.auth.credentials import Credential
from azsharedblob.auth.exceptions import UnsupportedCredentialError
from azsharedblob.core.logging_config import clear_correlation_id, set_correlation_id
from azsharedblob.protocol.canonicalizer import BLOB_HOST_SUFFIX, RequestCanonicalizer
from azsharedblob.protocol.errors import (
    REQUEST_ID_HEADER,
    BlobResult,
    CustomServiceError,
    translate_response,
    translate_transport_error,
)

logger = logging.getLogger(__name__)

DEFAULT_API_VERSION = "2023-05-03"

CLIENT_REQUEST_ID_HEADER = "x-ms-client-request-id"
DATE_HEADER = "x-ms-date"
VERSION_HEADER = "x-ms-version"
AUTHORIZATION_HEADER = "Authorization"

QueryItems = Sequence[Tuple[str, str]]


class EndpointProtocol(str, Enum):
    """URL scheme used to reach the blob service."""
    HTTP = "http"
    HTTPS = "https"


def blob_endpoint(account_name: str, protocol: EndpointProtocol = EndpointProtocol.HTTPS) -> str:
    """Return the blob service endpoint for an account."""
    return f"{EndpointProtocol(protocol).value}://{account_name}{BLOB_HOST_SUFFIX}"


def format_http_date(moment: Optional[datetime] = None) -> str:
    """
    Format a timestamp as an RFC 1123 GMT date.

    Locale independent and stateless, e.g. "Mon, 19 Oct 2026 10:30:00 GMT".

    Args:
        moment: Timestamp to format (default: now). Naive values are taken as UTC.
    """
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def generate_request_id() -> str:
    """Generate a client request ID in UUID format."""
    return str(uuid.uuid4())


class RequestBuilder:
    """
    Builds, signs and sends requests relative to a blob endpoint.

    Example:
        builder = RequestBuilder(credential, blob_endpoint("myaccount"), client)
        result = await builder.send(
            "container", "PUT",
            query=[("restype", "container")],
            expected_status={201},
        )
    """

    def __init__(
        self,
        credential: Credential,
        endpoint: str,
        http_client: httpx.AsyncClient,
        api_version: str = DEFAULT_API_VERSION,
        canonicalizer: Optional[RequestCanonicalizer] = None,
    ):
        if not isinstance(credential, Credential):
            raise UnsupportedCredentialError(type(credential).__name__)

        self.credential = credential
        self.endpoint = endpoint.rstrip("/")
        self.http_client = http_client
        self.api_version = api_version
        self.canonicalizer = canonicalizer or RequestCanonicalizer()

    def default_headers(self) -> httpx.Headers:
        """Fresh baseline headers for one request."""
        return httpx.Headers({
            CLIENT_REQUEST_ID_HEADER: generate_request_id(),
            DATE_HEADER: format_http_date(),
            VERSION_HEADER: self.api_version,
        })

    def url_for(self, path: str) -> str:
        """Absolute, percent-encoded URL for a path relative to the endpoint."""
        return f"{self.endpoint}/{quote(path.lstrip('/'), safe='/')}"

    def build(
        self,
        path: str,
        method: str,
        query: Optional[QueryItems] = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> httpx.Request:
        """
        Build a fully addressed and signed request.

        Args:
            path: Path relative to the endpoint, e.g. "container/blob"
            method: HTTP method
            query: Ordered query items
            content: Request body
            headers: Extra headers; they override baseline headers

        Returns:
            httpx.Request carrying the Authorization header

        Raises:
            InvalidAccountKeyError: If the credential's key cannot be decoded
        """
        all_headers = self.default_headers()
        if content is not None:
            all_headers["Content-Length"] = str(len(content))
        if headers:
            all_headers.update(headers)

        request = self.http_client.build_request(
            method,
            self.url_for(path),
            params=list(query) if query else None,
            content=content,
            headers=all_headers,
        )
        self.sign(request)
        return request

    def sign(self, request: httpx.Request) -> None:
        """Attach the Authorization header; all other headers must be final."""
        canonical = self.canonicalizer.canonicalize(
            request.method,
            str(request.url),
            request.headers,
        )
        request.headers[AUTHORIZATION_HEADER] = self.credential.authorization_header(
            canonical.string_to_sign
        )

    async def send(
        self,
        path: str,
        method: str,
        query: Optional[QueryItems] = None,
        content: Optional[bytes] = None,
        headers: Optional[Mapping[str, str]] = None,
        expected_status: Optional[Collection[int]] = None,
    ) -> BlobResult[httpx.Response]:
        """
        Build, sign and issue a request.

        Args:
            path: Path relative to the endpoint
            method: HTTP method
            query: Ordered query items
            content: Request body
            headers: Extra headers
            expected_status: Success statuses; any 2xx when omitted

        Returns:
            BlobResult holding the response or a translated error
        """
        request = self.build(path, method, query=query, content=content, headers=headers)
        request_id = request.headers[CLIENT_REQUEST_ID_HEADER]

        set_correlation_id(request_id)
        try:
            logger.debug(f"{method} {request.url} (client request id {request_id})")
            try:
                response = await self.http_client.send(request)
            except httpx.HTTPError as e:
                logger.warning(f"{method} {request.url} failed: {e}")
                return BlobResult.failure(translate_transport_error(e))

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                error = translate_response(response, e)
                logger.debug(
                    f"{method} {request.url} returned {response.status_code}: {error.message}"
                )
                return BlobResult.failure(error)

            if expected_status and response.status_code not in expected_status:
                return BlobResult.failure(CustomServiceError(
                    message=f"Unexpected status code {response.status_code}",
                    status_code=response.status_code,
                    request_id=response.headers.get(REQUEST_ID_HEADER),
                ))

            return BlobResult.success(response)
        finally:
            clear_correlation_id()
