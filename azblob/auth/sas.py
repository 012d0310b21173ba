"""
Read-only blob links signed with the account key.

A link carries a service SAS (signed version 2012-02-12) in its query string:

    StringToSign = signedpermissions + "\\n" +
                   signedstart + "\\n" +
                   signedexpiry + "\\n" +
                   canonicalizedresource + "\\n" +
                   signedidentifier + "\\n" +
                   signedversion

The service enforces the expiry; nothing here validates it or can revoke a
link once issued.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx

from azblob.auth.connection import StorageCredentials, build_uri
from azblob.auth.sharedkey import compute_signature
from azblob.constants import DEFAULT_LINK_EXPIRY_SECONDS, SAS_SIGNED_VERSION

logger = logging.getLogger(__name__)

SIGNED_PERMISSIONS = "r"
SIGNED_RESOURCE = "b"
SIGNED_PROTOCOL = "https"


def format_signed_expiry(expiry: datetime) -> str:
    """
    Format an expiry as ISO-8601 UTC truncated to whole seconds.

    Naive datetimes are taken to be UTC.

    Example:
        >>> format_signed_expiry(datetime(2025, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc))
        '2025-01-02T03:04:05Z'
    """
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def build_link_string_to_sign(
    credentials: StorageCredentials,
    path: str,
    signed_expiry: str,
) -> str:
    """Build the six-line string-to-sign of a read-only blob link."""
    if not path.startswith("/"):
        path = "/" + path

    return "\n".join([
        SIGNED_PERMISSIONS,
        "",  # signed start
        signed_expiry,
        f"/{credentials.account_name}{path}",
        "",  # signed identifier
        SAS_SIGNED_VERSION,
    ])


def sign_blob_link(
    credentials: StorageCredentials,
    path: str,
    expiry: Optional[datetime] = None,
    default_lifetime: timedelta = timedelta(seconds=DEFAULT_LINK_EXPIRY_SECONDS),
) -> httpx.URL:
    """
    Build a time-limited read-only URI for a blob.

    Args:
        credentials: Account credentials
        path: Blob path, e.g. ``/container/blob``
        expiry: When the link stops working (default: now + ``default_lifetime``)
        default_lifetime: Lifetime used when ``expiry`` is not given

    Returns:
        Blob URI carrying ``sr``, ``sp``, ``se``, ``sv``, ``spr`` and ``sig``
    """
    if expiry is None:
        expiry = datetime.now(timezone.utc) + default_lifetime

    signed_expiry = format_signed_expiry(expiry)
    string_to_sign = build_link_string_to_sign(credentials, path, signed_expiry)
    signature = compute_signature(string_to_sign, credentials.account_key)

    logger.debug(f"Signed blob link for {path} expiring {signed_expiry}")

    return build_uri(
        credentials,
        path,
        {
            "sr": SIGNED_RESOURCE,
            "sp": SIGNED_PERMISSIONS,
            "se": signed_expiry,
            "sv": SAS_SIGNED_VERSION,
            "spr": SIGNED_PROTOCOL,
            "sig": signature,
        },
    )
