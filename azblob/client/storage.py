"""
Blob Storage client.

Thin synchronous client over httpx. Every operation is one signed request
(two for an append blob created with content); unexpected status codes
raise AzureStorageError and are never retried.
"""

import logging
from datetime import datetime, timedelta
from typing import Mapping, Optional, Union

import httpx

from azblob.auth.connection import (
    QueryParameters,
    StorageCredentials,
    build_uri,
    parse_connection_string,
)
from azblob.auth.sas import sign_blob_link
from azblob.client.exceptions import AzureStorageError
from azblob.client.models import (
    AppendBlob,
    BlobListing,
    BlobPayload,
    BlobType,
    BlockBlob,
    Body,
    make_payload,
    parse_blob_listing,
)
from azblob.client.paths import split_path_segment
from azblob.client.request import BlobRequest, RequestBuilder, sign_request
from azblob.constants import (
    DEFAULT_LINK_EXPIRY_SECONDS,
    DEFAULT_TIMEOUT,
    HEADER_MS_BLOB_TYPE,
)
from azblob.core.config_manager import AzBlobConfig
from azblob.core.logging_config import log_with_context

logger = logging.getLogger(__name__)


class BlobStorageClient:
    """
    Client for one storage account.

    Example:
        with BlobStorageClient.from_connection_string(conn_str) as storage:
            storage.put_blob("/container/hello.txt", "hello", content_type="text/plain")
            data = storage.get_blob("/container/hello.txt")
            link = storage.get_blob_link("/container/hello.txt")
    """

    def __init__(
        self,
        credentials: StorageCredentials,
        http_client: Optional[httpx.Client] = None,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        link_expiry_seconds: int = DEFAULT_LINK_EXPIRY_SECONDS,
    ):
        """
        Initialize the client.

        Args:
            credentials: Parsed account credentials
            http_client: httpx client to send through; one is created (and
                closed by ``close()``) when omitted
            timeout: Timeout of a created client, in seconds
            link_expiry_seconds: Default lifetime of blob links
        """
        self.credentials = credentials
        self.link_lifetime = timedelta(seconds=link_expiry_seconds)
        self._owns_client = http_client is None
        self._http = http_client if http_client is not None else httpx.Client(timeout=timeout)

    @classmethod
    def from_connection_string(cls, connection_string: str, **kwargs) -> "BlobStorageClient":
        """Create a client from a connection string."""
        return cls(parse_connection_string(connection_string), **kwargs)

    @classmethod
    def from_config(
        cls,
        config: AzBlobConfig,
        http_client: Optional[httpx.Client] = None,
    ) -> "BlobStorageClient":
        """
        Create a client from loaded configuration.

        Raises:
            ValueError: If the configuration has no connection string
        """
        if not config.connection_string:
            raise ValueError("Configuration has no connection_string")
        return cls(
            parse_connection_string(config.connection_string),
            http_client,
            timeout=config.timeout,
            link_expiry_seconds=config.link_expiry_seconds,
        )

    def __repr__(self) -> str:
        return f"BlobStorageClient(account={self.credentials.account_name!r})"

    def __enter__(self) -> "BlobStorageClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client if this client created it."""
        if self._owns_client:
            self._http.close()

    def uri(self, path: str = "/", query: Optional[QueryParameters] = None) -> httpx.URL:
        """Build the URI of a resource of this account."""
        return build_uri(self.credentials, path, query)

    def _send(self, request: BlobRequest, expected_status: int) -> httpx.Response:
        """Sign, dispatch and check one request."""
        signed = sign_request(self.credentials, request)
        logger.debug(f"Sending {signed.method} {signed.url.path}")

        response = self._http.send(signed.to_httpx())

        if response.status_code != expected_status:
            error = AzureStorageError.from_response(
                response.status_code,
                response.headers,
                response.text,
            )
            log_with_context(
                logger,
                logging.WARNING,
                f"{signed.method} {signed.url.path} failed: "
                f"{response.status_code} {error.error_code}",
                method=signed.method,
                path=signed.url.path,
                status_code=response.status_code,
                error_code=error.error_code,
                request_id=response.headers.get("x-ms-request-id"),
            )
            raise error

        return response

    def list_blobs_raw(self, path: str) -> str:
        """
        List blobs of a container, returning the service's XML.

        Args:
            path: ``/container`` or ``/container/prefix``

        Returns:
            EnumerationResults XML document
        """
        container, prefix = split_path_segment(path)
        query = {"restype": "container", "comp": "list"}
        if prefix is not None:
            query["prefix"] = prefix

        request = RequestBuilder("GET", self.uri(container, query)).build()
        return self._send(request, 200).text

    def list_blobs(self, path: str) -> BlobListing:
        """List blobs of a container, parsed into a BlobListing."""
        container, _ = split_path_segment(path)
        return parse_blob_listing(self.list_blobs_raw(path), container)

    def get_blob(self, path: str) -> bytes:
        """Download a blob."""
        request = RequestBuilder("GET", self.uri(path)).build()
        return self._send(request, 200).content

    def delete_blob(self, path: str) -> None:
        """Delete a blob."""
        request = RequestBuilder("DELETE", self.uri(path)).build()
        self._send(request, 202)

    def put_blob(
        self,
        path: str,
        body: Union[Body, BlobPayload, None] = None,
        *,
        content_type: Optional[str] = None,
        blob_type: BlobType = BlobType.BLOCK_BLOB,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> None:
        """
        Create or replace a blob.

        Args:
            path: ``/container/blob``
            body: Content as str/bytes, or a BlockBlob/AppendBlob payload
            content_type: Content-Type of the blob
            blob_type: Blob type used when ``body`` is raw content
            metadata: User metadata, sent as ``x-ms-meta-*`` headers

        For an append blob the content, if any, is written by a second
        Append Block request.
        """
        if isinstance(body, (BlockBlob, AppendBlob)):
            payload = body
        else:
            payload = make_payload(body, blob_type)

        builder = (
            RequestBuilder("PUT", self.uri(path))
            .header(HEADER_MS_BLOB_TYPE, payload.blob_type.value)
            .metadata(metadata)
            .content(payload.create_body())
        )
        if content_type is not None:
            builder.header("Content-Type", content_type)

        self._send(builder.build(), 201)
        logger.info(f"Created {payload.blob_type.value} {path}")

        block = payload.follow_up_block()
        if block is not None:
            self.append_block(path, block)

    def append_block(self, path: str, body: Body) -> None:
        """Append a block to an existing append blob."""
        request = (
            RequestBuilder("PUT", self.uri(path, {"comp": "appendblock"}))
            .content(body)
            .build()
        )
        self._send(request, 201)

    def get_blob_link(self, path: str, expiry: Optional[datetime] = None) -> httpx.URL:
        """
        Build a read-only link to a blob.

        No request is made. The link works until ``expiry`` (default: now
        plus the configured link lifetime).
        """
        return sign_blob_link(self.credentials, path, expiry, self.link_lifetime)
