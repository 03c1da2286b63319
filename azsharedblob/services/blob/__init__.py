"""
Azure Blob Storage client.

Provides container operations and chunked block blob uploads signed with
SharedKey.
"""

from .client import BlobClient
from .models import BlockList, BlockListType, generate_block_id
from .uploader import BlockUploader, iter_chunks

__all__ = [
    "BlobClient",
    "BlockList",
    "BlockListType",
    "BlockUploader",
    "generate_block_id",
    "iter_chunks",
]
