"""
Azure Blob Storage client.

Public operations return a :class:`~azsharedblob.protocol.errors.BlobResult`
instead of raising for service or local precondition failures.

Example:
    async with BlobClient(SharedKeyCredential("myaccount", key)) as client:
        await client.create_container_if_not_exists("photos")
        result = await client.upload_local_blob("cat.jpg", "photos")
        if not result.ok:
            print(result.error.kind, result.error.message)
"""

import io
import logging
import os
from typing import BinaryIO, Optional, Union

import httpx

from azsharedblob.auth.credentials import Credential
from azsharedblob.core.config_manager import ClientConfig, DEFAULT_CHUNK_SIZE
from azsharedblob.protocol.errors import BlobResult, NoSuchFileError, ResourceNotFoundError
from azsharedblob.protocol.request_builder import (
    DEFAULT_API_VERSION,
    EndpointProtocol,
    RequestBuilder,
    blob_endpoint,
)
from azsharedblob.services.blob.models import BlockList
from azsharedblob.services.blob.uploader import BlockUploader

logger = logging.getLogger(__name__)

CONTAINER_QUERY = [("restype", "container")]


class BlobClient:
    """Client for one storage account's blob endpoint."""

    def __init__(
        self,
        credential: Credential,
        protocol: EndpointProtocol = EndpointProtocol.HTTPS,
        *,
        api_version: str = DEFAULT_API_VERSION,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_concurrency: int = 1,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            credential: Credential that signs every request
            protocol: Endpoint scheme
            api_version: x-ms-version header value
            chunk_size: Maximum block size for uploads
            max_concurrency: Blocks staged in parallel during uploads
            timeout: HTTP timeout in seconds (ignored with ``http_client``)
            http_client: Transport to use; the caller keeps ownership
        """
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

        self.endpoint = blob_endpoint(credential.account_name, protocol)
        self._builder = RequestBuilder(
            credential,
            self.endpoint,
            self._http_client,
            api_version=api_version,
        )
        self._uploader = BlockUploader(
            self._builder,
            chunk_size=chunk_size,
            max_concurrency=max_concurrency,
        )

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "BlobClient":
        """Create a client from a loaded configuration."""
        return cls(
            config.credential(),
            config.protocol,
            api_version=config.api_version,
            chunk_size=config.chunk_size,
            max_concurrency=config.max_concurrency,
            timeout=config.timeout,
            http_client=http_client,
        )

    async def close(self) -> None:
        """Close the HTTP transport if this client created it."""
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "BlobClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Containers

    async def container_exists(self, name: str) -> BlobResult[bool]:
        """
        Check whether a container exists.

        Returns:
            True or False; failures other than 404 are returned as errors
        """
        result = await self._builder.send(name, "HEAD", query=CONTAINER_QUERY)
        if result.ok:
            return BlobResult.success(True)
        if isinstance(result.error, ResourceNotFoundError):
            return BlobResult.success(False)
        return BlobResult.failure(result.error)

    async def create_container(self, name: str) -> BlobResult[None]:
        """Create a container; fails with ResourceAlreadyExists if present."""
        result = await self._builder.send(
            name, "PUT", query=CONTAINER_QUERY, expected_status={201}
        )
        if not result.ok:
            return BlobResult.failure(result.error)
        logger.info(f"Created container {name}")
        return BlobResult.success()

    async def create_container_if_not_exists(self, name: str) -> BlobResult[bool]:
        """
        Create a container unless it already exists.

        Returns:
            True if the container was created, False if it already existed
        """
        exists = await self.container_exists(name)
        if exists.ok and exists.value:
            return BlobResult.success(False)

        created = await self.create_container(name)
        if not created.ok:
            return BlobResult.failure(created.error)
        return BlobResult.success(True)

    # Blobs

    async def upload_blob(
        self,
        data: Union[bytes, bytearray, BinaryIO],
        name: str,
        container: str,
    ) -> BlobResult[BlockList]:
        """
        Upload bytes or a binary stream as a block blob.

        Streams passed in are closed once the upload finishes.

        Returns:
            BlobResult holding the committed block list
        """
        stream = io.BytesIO(bytes(data)) if isinstance(data, (bytes, bytearray)) else data
        return await self._uploader.upload(stream, f"{container}/{name}")

    async def upload_local_blob(
        self,
        path: Union[str, os.PathLike],
        container: str,
        name: Optional[str] = None,
    ) -> BlobResult[BlockList]:
        """
        Upload a local file as a block blob.

        Args:
            path: Local file path
            container: Destination container
            name: Blob name (default: the file's base name)

        Returns:
            BlobResult; NoSuchFileError if the file cannot be opened
        """
        path = os.fspath(path)
        try:
            stream = open(path, "rb")
        except OSError as e:
            logger.warning(f"Cannot read {path}: {e}")
            return BlobResult.failure(NoSuchFileError(path))

        return await self.upload_blob(stream, name or os.path.basename(path), container)
