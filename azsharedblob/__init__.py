"""
azsharedblob: Azure Blob Storage client with SharedKey signing

Signs requests with the Azure Storage SharedKey scheme and uploads block
blobs in bounded chunks.
"""

__version__ = "0.1.0"

from .auth import SharedKeyCredential
from .protocol import BlobResult, ErrorKind, EndpointProtocol
from .services.blob import BlobClient

__all__ = [
    "BlobClient",
    "BlobResult",
    "EndpointProtocol",
    "ErrorKind",
    "SharedKeyCredential",
    "__version__",
]
