"""
azblob Authentication Module.

Connection string parsing, SharedKey request signing and read-only blob
link signing.
"""

from azblob.auth.connection import (
    ConnectionKey,
    StorageCredentials,
    build_uri,
    parse_connection_string,
)
from azblob.auth.exceptions import (
    AzBlobError,
    ConnectionStringError,
    InvalidAccountKeyError,
    UriConstructionError,
)
from azblob.auth.sas import (
    build_link_string_to_sign,
    format_signed_expiry,
    sign_blob_link,
)
from azblob.auth.sharedkey import (
    build_string_to_sign,
    compute_signature,
    sign,
)

__all__ = [
    # Exceptions
    "AzBlobError",
    "ConnectionStringError",
    "InvalidAccountKeyError",
    "UriConstructionError",
    # Credentials
    "ConnectionKey",
    "StorageCredentials",
    "build_uri",
    "parse_connection_string",
    # SharedKey
    "build_string_to_sign",
    "compute_signature",
    "sign",
    # Blob links
    "build_link_string_to_sign",
    "format_signed_expiry",
    "sign_blob_link",
]
