"""
Connection string parsing and blob endpoint resolution.

A connection string is a ``;``-separated list of ``key=value`` pairs, e.g.::

    DefaultEndpointsProtocol=https;AccountName=myaccount;AccountKey=<base64>;EndpointSuffix=core.windows.net

Reference: https://learn.microsoft.com/azure/storage/common/storage-configure-connection-string
"""

import base64
import binascii
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import quote, urlsplit

import httpx

from azblob.auth.exceptions import (
    ConnectionStringError,
    InvalidAccountKeyError,
    UriConstructionError,
)
from azblob.constants import DEFAULT_ENDPOINT_SUFFIX, DEFAULT_PROTOCOL

logger = logging.getLogger(__name__)

QueryValue = Union[str, Sequence[str]]
QueryParameters = Mapping[str, QueryValue]

# Characters left unescaped in blob paths (RFC 3986 pchar plus "/")
PATH_SAFE_CHARACTERS = "/!$&'()*+,;=:@~"


class ConnectionKey(str, Enum):
    """Recognized connection string keys."""

    PROTOCOL = "DefaultEndpointsProtocol"
    ACCOUNT_NAME = "AccountName"
    ACCOUNT_KEY = "AccountKey"
    ENDPOINT_SUFFIX = "EndpointSuffix"
    BLOB_ENDPOINT = "BlobEndpoint"

    @property
    def default(self) -> Optional[str]:
        """Value used when the key is absent (None means no default)."""
        return CONNECTION_DEFAULTS[self]


CONNECTION_DEFAULTS: Dict[ConnectionKey, Optional[str]] = {
    ConnectionKey.PROTOCOL: DEFAULT_PROTOCOL,
    ConnectionKey.ACCOUNT_NAME: "",
    ConnectionKey.ACCOUNT_KEY: None,
    ConnectionKey.ENDPOINT_SUFFIX: DEFAULT_ENDPOINT_SUFFIX,
    ConnectionKey.BLOB_ENDPOINT: None,
}


@dataclass(frozen=True)
class StorageCredentials:
    """
    Resolved account credentials.

    The account key is held decoded; it never appears in ``repr()``.
    """

    account_name: str
    account_key: bytes = field(repr=False)
    scheme: str = DEFAULT_PROTOCOL
    endpoint_suffix: str = DEFAULT_ENDPOINT_SUFFIX
    blob_endpoint: Optional[str] = None

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "StorageCredentials":
        """Parse a connection string into credentials."""
        return parse_connection_string(connection_string)

    @property
    def host(self) -> str:
        """Default blob service host, ignoring any endpoint override."""
        return f"{self.account_name}.blob.{self.endpoint_suffix}"


def split_connection_string(connection_string: str) -> Dict[str, str]:
    """
    Split a connection string into a key/value mapping.

    Each segment is split on its first ``=``. An empty segment (such as the
    one produced by a trailing ``;``) has no ``=`` and is rejected like any
    other. The last occurrence of a duplicated key wins.

    Args:
        connection_string: Raw connection string

    Returns:
        Mapping of key to value

    Raises:
        ConnectionStringError: If a segment contains no ``=``
    """
    settings: Dict[str, str] = {}

    for index, segment in enumerate(connection_string.split(";")):
        key, separator, value = segment.partition("=")
        if not separator:
            # The segment itself is not echoed; it may hold secret material.
            raise ConnectionStringError(
                f"Connection string segment {index} is not in key=value form"
            )
        settings[key] = value

    return settings


def decode_account_key(encoded_key: str) -> bytes:
    """
    Decode a base64 account key.

    Raises:
        InvalidAccountKeyError: If the key is not valid base64
    """
    try:
        return base64.b64decode(encoded_key, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidAccountKeyError(f"AccountKey is not valid base64: {e}") from e


def parse_connection_string(connection_string: str) -> StorageCredentials:
    """
    Parse a connection string into immutable credentials.

    Args:
        connection_string: ``key=value`` pairs separated by ``;``

    Returns:
        StorageCredentials with the account key already decoded

    Raises:
        ConnectionStringError: If a segment is malformed or AccountKey is missing
        InvalidAccountKeyError: If AccountKey is not valid base64
    """
    settings = split_connection_string(connection_string)

    encoded_key = settings.get(ConnectionKey.ACCOUNT_KEY.value)
    if encoded_key is None:
        raise ConnectionStringError(
            f"Connection string is missing {ConnectionKey.ACCOUNT_KEY.value}"
        )

    account_key = decode_account_key(encoded_key)

    def setting(key: ConnectionKey) -> Optional[str]:
        return settings.get(key.value, key.default)

    credentials = StorageCredentials(
        account_name=setting(ConnectionKey.ACCOUNT_NAME) or "",
        account_key=account_key,
        scheme=setting(ConnectionKey.PROTOCOL) or DEFAULT_PROTOCOL,
        endpoint_suffix=setting(ConnectionKey.ENDPOINT_SUFFIX) or DEFAULT_ENDPOINT_SUFFIX,
        blob_endpoint=setting(ConnectionKey.BLOB_ENDPOINT) or None,
    )

    unknown = sorted(set(settings) - {key.value for key in ConnectionKey})
    if unknown:
        logger.debug(f"Ignoring unrecognized connection string keys: {unknown}")

    logger.debug(f"Parsed credentials for account: {credentials.account_name}")
    return credentials


def resolve_endpoint(credentials: StorageCredentials) -> Tuple[str, str, str]:
    """
    Resolve scheme, authority and base path of the blob endpoint.

    ``BlobEndpoint`` may be a bare host (``localhost:10000``) or a full URL
    (``http://127.0.0.1:10000/devstoreaccount1``); a full URL contributes its
    own scheme and base path.

    Raises:
        UriConstructionError: If no host can be derived
    """
    endpoint = credentials.blob_endpoint
    if endpoint:
        if "://" in endpoint:
            parts = urlsplit(endpoint)
            if not parts.netloc:
                raise UriConstructionError(f"BlobEndpoint has no host: {endpoint}")
            return parts.scheme or credentials.scheme, parts.netloc, parts.path.rstrip("/")
        return credentials.scheme, endpoint.rstrip("/"), ""

    if not credentials.account_name:
        raise UriConstructionError(
            "Cannot build blob host: AccountName and BlobEndpoint are both missing"
        )
    return credentials.scheme, credentials.host, ""


def build_uri(
    credentials: StorageCredentials,
    path: str = "/",
    query: Optional[QueryParameters] = None,
) -> httpx.URL:
    """
    Build the URI of a blob resource.

    Args:
        credentials: Resolved credentials
        path: Resource path, e.g. ``/container/blob`` (leading ``/`` optional)
        query: Query parameters; list values produce repeated parameters

    Returns:
        httpx.URL with scheme, host, percent-encoded path and query string

    Raises:
        UriConstructionError: If the path holds control characters or no
            host can be derived from the credentials
    """
    if any(ord(char) < 0x20 or ord(char) == 0x7F for char in path):
        raise UriConstructionError(f"Path contains control characters: {path!r}")

    if not path.startswith("/"):
        path = "/" + path

    scheme, authority, base_path = resolve_endpoint(credentials)
    encoded_path = quote(base_path + path, safe=PATH_SAFE_CHARACTERS)

    kwargs = {}
    if query:
        kwargs["params"] = {
            name: value if isinstance(value, str) else list(value)
            for name, value in query.items()
        }

    try:
        return httpx.URL(f"{scheme}://{authority}{encoded_path}", **kwargs)
    except httpx.InvalidURL as e:
        raise UriConstructionError(f"Invalid blob URI for path {path!r}: {e}") from e
