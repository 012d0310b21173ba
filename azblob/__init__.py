"""
azblob: Azure Blob Storage client with SharedKey request signing.
"""

__version__ = "0.1.0"

from .auth import (
    AzBlobError,
    ConnectionStringError,
    InvalidAccountKeyError,
    StorageCredentials,
    UriConstructionError,
    build_uri,
    parse_connection_string,
    sign,
    sign_blob_link,
)
from .client import (
    AppendBlob,
    AzureStorageError,
    BlobStorageClient,
    BlobType,
    BlockBlob,
    RequestBuilder,
    sign_request,
    split_path_segment,
)
from .constants import MS_VERSION, SAS_SIGNED_VERSION

__all__ = [
    "__version__",
    "AzBlobError",
    "ConnectionStringError",
    "InvalidAccountKeyError",
    "UriConstructionError",
    "AzureStorageError",
    "StorageCredentials",
    "parse_connection_string",
    "build_uri",
    "sign",
    "sign_blob_link",
    "split_path_segment",
    "RequestBuilder",
    "sign_request",
    "BlobStorageClient",
    "BlobType",
    "BlockBlob",
    "AppendBlob",
    "MS_VERSION",
    "SAS_SIGNED_VERSION",
]
