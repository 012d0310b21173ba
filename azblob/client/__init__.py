"""
azblob Blob Client.

Request building, signing and the blob operations built on them.
"""

from azblob.client.exceptions import AzureStorageError
from azblob.client.models import (
    AppendBlob,
    BlobItem,
    BlobListing,
    BlobPayload,
    BlobProperties,
    BlobType,
    BlockBlob,
)
from azblob.client.paths import split_path_segment
from azblob.client.request import BlobRequest, RequestBuilder, sign_request
from azblob.client.storage import BlobStorageClient

__all__ = [
    "AzureStorageError",
    "AppendBlob",
    "BlobItem",
    "BlobListing",
    "BlobPayload",
    "BlobProperties",
    "BlobType",
    "BlockBlob",
    "split_path_segment",
    "BlobRequest",
    "RequestBuilder",
    "sign_request",
    "BlobStorageClient",
]
