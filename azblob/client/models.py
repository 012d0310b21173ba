"""
Blob Models

Payload variants for blob creation and pydantic models for container
listings.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Union
from xml.etree import ElementTree as ET

from pydantic import BaseModel, Field, field_validator

from azblob.constants import RFC1123_FORMAT

logger = logging.getLogger(__name__)

Body = Union[str, bytes]


class BlobType(str, Enum):
    """Blob types the client can create."""
    BLOCK_BLOB = "BlockBlob"
    APPEND_BLOB = "AppendBlob"


def to_bytes(body: Optional[Body]) -> Optional[bytes]:
    """Encode a str body as UTF-8; bytes and None pass through."""
    if isinstance(body, str):
        return body.encode("utf-8")
    return body


@dataclass(frozen=True)
class BlockBlob:
    """Whole content sent in the Put Blob request itself."""

    content: bytes = b""

    blob_type: ClassVar[BlobType] = BlobType.BLOCK_BLOB

    def create_body(self) -> bytes:
        return self.content

    def follow_up_block(self) -> Optional[bytes]:
        return None


@dataclass(frozen=True)
class AppendBlob:
    """
    Empty Put Blob request, then one Append Block carrying the content.

    No append call is made when there is no content.
    """

    content: Optional[bytes] = None

    blob_type: ClassVar[BlobType] = BlobType.APPEND_BLOB

    def create_body(self) -> bytes:
        return b""

    def follow_up_block(self) -> Optional[bytes]:
        return self.content or None


BlobPayload = Union[BlockBlob, AppendBlob]


def make_payload(body: Optional[Body] = None, blob_type: BlobType = BlobType.BLOCK_BLOB) -> BlobPayload:
    """Wrap a raw body into the payload variant of ``blob_type``."""
    content = to_bytes(body)
    if BlobType(blob_type) == BlobType.APPEND_BLOB:
        return AppendBlob(content)
    return BlockBlob(content or b"")


class BlobProperties(BaseModel):
    """Properties reported for a blob in a listing."""

    content_length: int = Field(default=0, ge=0)
    content_type: Optional[str] = None
    etag: Optional[str] = None
    last_modified: Optional[datetime] = None
    blob_type: Optional[str] = None

    @field_validator("last_modified", mode="before")
    @classmethod
    def parse_last_modified(cls, v):
        """Accept RFC 1123 dates as sent by the service."""
        if isinstance(v, str):
            return datetime.strptime(v, RFC1123_FORMAT).replace(tzinfo=timezone.utc)
        return v


class BlobItem(BaseModel):
    """A blob entry of a container listing."""

    name: str
    properties: BlobProperties = Field(default_factory=BlobProperties)
    metadata: Dict[str, str] = Field(default_factory=dict)


class BlobListing(BaseModel):
    """One page of a container listing."""

    container: str
    prefix: Optional[str] = None
    marker: Optional[str] = None
    next_marker: Optional[str] = None
    blobs: List[BlobItem] = Field(default_factory=list)
    blob_prefixes: List[str] = Field(default_factory=list)


def _text(element: Optional[ET.Element], tag: str) -> Optional[str]:
    value = element.findtext(tag) if element is not None else None
    return value or None


def parse_blob_listing(xml_text: str, container: str) -> BlobListing:
    """
    Parse a List Blobs ``EnumerationResults`` document.

    Raises:
        ValueError: If the document is not a blob listing
    """
    try:
        root = ET.fromstring(xml_text.lstrip("\ufeff").strip())
    except ET.ParseError as e:
        raise ValueError(f"Blob listing is not well-formed XML: {e}") from e

    if root.tag != "EnumerationResults":
        raise ValueError(f"Unexpected listing root element: {root.tag}")

    listing = BlobListing(
        container=root.get("ContainerName") or container,
        prefix=_text(root, "Prefix"),
        marker=_text(root, "Marker"),
        next_marker=_text(root, "NextMarker"),
    )

    blobs = root.find("Blobs")
    if blobs is None:
        return listing

    for blob_element in blobs.findall("Blob"):
        props = blob_element.find("Properties")
        metadata = blob_element.find("Metadata")
        listing.blobs.append(BlobItem(
            name=_text(blob_element, "Name") or "",
            properties=BlobProperties(
                content_length=int(_text(props, "Content-Length") or 0),
                content_type=_text(props, "Content-Type"),
                etag=_text(props, "Etag"),
                last_modified=_text(props, "Last-Modified"),
                blob_type=_text(props, "BlobType"),
            ),
            metadata={
                child.tag: child.text or ""
                for child in (metadata if metadata is not None else [])
            },
        ))

    for prefix_element in blobs.findall("BlobPrefix"):
        name = _text(prefix_element, "Name")
        if name:
            listing.blob_prefixes.append(name)

    logger.debug(f"Parsed {len(listing.blobs)} blobs from listing of {listing.container}")
    return listing
