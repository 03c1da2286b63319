"""
Block blob upload engine.

A payload is read in bounded chunks, each chunk is staged as an uncommitted
block (Put Block), and the ordered list of block IDs is committed at the
end (Put Block List). The first failing request aborts the upload; staged
blocks are left for the service to garbage-collect.

Author: azsharedblob contributors
"""

import asyncio
import logging
from contextlib import aclosing
from typing import AsyncIterator, BinaryIO, List

from azsharedblob.core.config_manager import DEFAULT_CHUNK_SIZE
from azsharedblob.core.logging_config import log_with_context
from azsharedblob.protocol.errors import BlobResult, NoSuchFileError
from azsharedblob.protocol.request_builder import RequestBuilder
from azsharedblob.services.blob.models import BlockList, generate_block_id

logger = logging.getLogger(__name__)

CREATED = {201}


async def iter_chunks(stream: BinaryIO, chunk_size: int) -> AsyncIterator[bytes]:
    """
    Lazily read a binary stream in chunks of at most ``chunk_size`` bytes.

    Reads run in a worker thread so the event loop is never blocked. The
    stream is closed when iteration ends, fails, or the iterator is closed
    early; the iterator cannot be restarted.

    Args:
        stream: Readable binary stream; ownership passes to the iterator
        chunk_size: Maximum chunk size in bytes

    Yields:
        Non-empty byte chunks in stream order
    """
    try:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        while True:
            chunk = await asyncio.to_thread(stream.read, chunk_size)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


async def batched(chunks: AsyncIterator[bytes], size: int) -> AsyncIterator[List[bytes]]:
    """Group chunks into lists of at most ``size`` items."""
    window: List[bytes] = []
    async for chunk in chunks:
        window.append(chunk)
        if len(window) >= size:
            yield window
            window = []
    if window:
        yield window


class BlockUploader:
    """
    Uploads a stream as a committed block blob.

    With ``max_concurrency`` of 1 (the default) blocks are staged strictly
    one after another. Larger values stage up to that many blocks at once;
    the block list always keeps stream order.
    """

    def __init__(
        self,
        builder: RequestBuilder,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_concurrency: int = 1,
    ):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")

        self.builder = builder
        self.chunk_size = chunk_size
        self.max_concurrency = max_concurrency

    async def upload(self, stream: BinaryIO, path: str) -> BlobResult[BlockList]:
        """
        Stage every chunk of ``stream`` and commit them to ``path``.

        Args:
            stream: Readable binary stream, closed on every exit path
            path: Blob path relative to the endpoint ("container/blob")

        Returns:
            BlobResult holding the committed block list, or the error of
            the first failed stage request or of the commit; a failed
            stream read is reported as NoSuchFileError
        """
        block_ids: List[str] = []
        total_bytes = 0

        try:
            async with aclosing(iter_chunks(stream, self.chunk_size)) as chunks, \
                    aclosing(batched(chunks, self.max_concurrency)) as windows:
                async for window in windows:
                    window_ids = [generate_block_id() for _ in window]
                    results = await asyncio.gather(*(
                        self.stage_block(path, block_id, chunk)
                        for block_id, chunk in zip(window_ids, window)
                    ))

                    for block_id, chunk, result in zip(window_ids, window, results):
                        if not result.ok:
                            logger.warning(
                                f"Upload of {path} aborted at block {len(block_ids) + 1}: "
                                f"{result.error.message}"
                            )
                            return BlobResult.failure(result.error)
                        block_ids.append(block_id)
                        total_bytes += len(chunk)
        except OSError as e:
            logger.warning(f"Upload of {path} aborted reading block {len(block_ids) + 1}: {e}")
            return BlobResult.failure(NoSuchFileError(message=str(e) or None))

        block_list = BlockList(latest=block_ids)
        result = await self.commit(path, block_list)
        if not result.ok:
            logger.warning(f"Commit of {path} failed: {result.error.message}")
            return BlobResult.failure(result.error)

        log_with_context(
            logger, logging.INFO, f"Uploaded {path}",
            blocks=len(block_ids), bytes=total_bytes,
        )
        return BlobResult.success(block_list)

    async def stage_block(self, path: str, block_id: str, chunk: bytes) -> BlobResult:
        """Put Block: upload one uncommitted block."""
        logger.debug(f"Staging block {block_id} ({len(chunk)} bytes) for {path}")
        return await self.builder.send(
            path,
            "PUT",
            query=[("comp", "block"), ("blockid", block_id)],
            content=chunk,
            expected_status=CREATED,
        )

    async def commit(self, path: str, block_list: BlockList) -> BlobResult:
        """Put Block List: commit ``block_list.latest`` in order."""
        logger.debug(f"Committing {len(block_list.latest)} blocks for {path}")
        return await self.builder.send(
            path,
            "PUT",
            query=[("comp", "blocklist")],
            content=block_list.to_xml(),
            expected_status=CREATED,
        )
