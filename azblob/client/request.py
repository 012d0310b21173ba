"""
Request construction and signing.

A RequestBuilder accumulates headers and body, then ``build()`` freezes them
into a BlobRequest together with the ``x-ms-date`` and ``x-ms-version``
headers. ``sign_request()`` signs that frozen snapshot, so a signature is
always computed over final headers.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import List, Mapping, Optional, Tuple, Union

import httpx

from azblob.auth.connection import StorageCredentials
from azblob.auth.sharedkey import sign
from azblob.client.models import Body, to_bytes
from azblob.constants import (
    HEADER_AUTHORIZATION,
    HEADER_MS_CLIENT_REQUEST_ID,
    HEADER_MS_DATE,
    HEADER_MS_META_PREFIX,
    HEADER_MS_VERSION,
    MS_VERSION,
)
from azblob.core.logging_config import get_client_request_id
from azblob.headers import HeaderInput, HeaderSet, HeaderValue

logger = logging.getLogger(__name__)

# Methods that always send Content-Length, even for an empty body
_BODY_METHODS = ("PUT", "POST", "PATCH")


def format_http_date(moment: Optional[datetime] = None) -> str:
    """Format a moment as an RFC 1123 HTTP date (default: now)."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


@dataclass(frozen=True)
class BlobRequest:
    """Immutable request snapshot, signed or not."""

    method: str
    url: httpx.URL
    headers: HeaderSet
    content: bytes = b""

    @property
    def authorization(self) -> Optional[str]:
        return self.headers.get(HEADER_AUTHORIZATION) or None

    def to_httpx(self) -> httpx.Request:
        """Convert into an httpx.Request carrying exactly these headers."""
        return httpx.Request(
            self.method,
            self.url,
            headers=list(self.headers),
            content=self.content or None,
        )


class RequestBuilder:
    """
    Accumulates the parts of a blob request.

    Example:
        request = (
            RequestBuilder("PUT", url)
            .header("x-ms-blob-type", "BlockBlob")
            .content(b"hello")
            .build()
        )
        signed = sign_request(credentials, request)
    """

    def __init__(self, method: str, url: Union[httpx.URL, str]):
        self.method = method.upper()
        self.url = httpx.URL(url)
        self._headers: List[Tuple[str, str]] = []
        self._content = b""

    def header(self, name: str, value: HeaderValue) -> "RequestBuilder":
        """Add a header value."""
        self._headers.extend(HeaderSet.of({name: value}))
        return self

    def headers(self, headers: Optional[HeaderInput]) -> "RequestBuilder":
        """Add several headers."""
        self._headers.extend(HeaderSet.of(headers))
        return self

    def metadata(self, metadata: Optional[Mapping[str, str]]) -> "RequestBuilder":
        """Add user metadata as ``x-ms-meta-*`` headers."""
        for key, value in (metadata or {}).items():
            self.header(f"{HEADER_MS_META_PREFIX}{key}", value)
        return self

    def content(self, body: Optional[Body]) -> "RequestBuilder":
        """Set the request body; str is encoded as UTF-8."""
        self._content = to_bytes(body) or b""
        return self

    def build(self, now: Optional[datetime] = None) -> BlobRequest:
        """
        Freeze the request.

        Stamps ``x-ms-date`` (from ``now``, default current time),
        ``x-ms-version``, the context's ``x-ms-client-request-id`` when one is
        set, and ``Content-Length``.
        """
        headers = HeaderSet(tuple(self._headers))
        headers = headers.with_header(HEADER_MS_DATE, format_http_date(now))
        headers = headers.with_header(HEADER_MS_VERSION, MS_VERSION)

        request_id = get_client_request_id()
        if request_id and HEADER_MS_CLIENT_REQUEST_ID not in headers:
            headers = headers.add(HEADER_MS_CLIENT_REQUEST_ID, request_id)

        if self._content or self.method in _BODY_METHODS:
            headers = headers.with_header("Content-Length", len(self._content))

        return BlobRequest(self.method, self.url, headers, self._content)


def sign_request(credentials: StorageCredentials, request: BlobRequest) -> BlobRequest:
    """Return a copy of ``request`` carrying its SharedKey Authorization header."""
    unsigned = request.headers.without(HEADER_AUTHORIZATION)
    authorization = sign(credentials, request.method, request.url, unsigned)
    return replace(request, headers=unsigned.add(HEADER_AUTHORIZATION, authorization))
