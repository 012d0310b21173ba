"""
SharedKey request signing for Azure Blob Storage.

Builds the string-to-sign of the 2015-04-05+ canonicalization format and
signs it with HMAC-SHA256 under the account key:

    VERB\\n
    Content-Encoding\\n
    Content-Language\\n
    Content-Length\\n
    Content-MD5\\n
    Content-Type\\n
    Date\\n
    If-Modified-Since\\n
    If-Match\\n
    If-None-Match\\n
    If-Unmodified-Since\\n
    Range\\n
    CanonicalizedHeaders
    CanonicalizedResource

Reference: https://learn.microsoft.com/rest/api/storageservices/authorize-with-shared-key
"""

import base64
import hashlib
import hmac
import logging
from typing import Dict, List, Optional, Union

import httpx

from azblob.auth.connection import StorageCredentials
from azblob.constants import HEADER_MS_PREFIX, SIGNED_STANDARD_HEADERS
from azblob.headers import HeaderInput, HeaderSet

logger = logging.getLogger(__name__)

SHARED_KEY_SCHEME = "SharedKey"


def compute_signature(string_to_sign: str, account_key: bytes) -> str:
    """
    Compute a base64 HMAC-SHA256 signature.

    Signature = Base64(HMAC-SHA256(UTF8(StringToSign), AccountKey))

    Args:
        string_to_sign: Canonical string to sign
        account_key: Decoded account key

    Returns:
        Base64-encoded signature
    """
    digest = hmac.new(
        account_key,
        string_to_sign.encode("utf-8"),
        hashlib.sha256
    ).digest()

    return base64.b64encode(digest).decode("utf-8")


def _get_content_length(headers: HeaderSet) -> str:
    """Content-Length value; zero is rendered as an empty string."""
    content_length = headers.get("content-length").strip()

    if content_length == "0":
        return ""

    return content_length


def canonicalize_headers(headers: HeaderSet) -> str:
    """
    Build the CanonicalizedHeaders block.

    Every ``x-ms-*`` header contributes ``name:value\\n`` with a lowercase
    name; lines are ordered by header name.

    Example:
        >>> canonicalize_headers(HeaderSet.of({
        ...     "x-ms-version": "2019-12-12",
        ...     "x-ms-date": "Tue, 04 Dec 2025 10:30:00 GMT",
        ... }))
        'x-ms-date:Tue, 04 Dec 2025 10:30:00 GMT\\nx-ms-version:2019-12-12\\n'
    """
    ms_names = sorted(name for name in headers.names() if name.startswith(HEADER_MS_PREFIX))
    return "".join(f"{name}:{headers.get(name)}\n" for name in ms_names)


def canonicalize_resource(url: httpx.URL, account_name: str) -> str:
    """
    Build the CanonicalizedResource string.

    ``/account`` followed by the encoded URI path, then one ``\\nname:value``
    line per query parameter, sorted by name. Values are decoded;
    a repeated parameter joins its values with ``,``.

    Parameter names are lowercased before sorting, as the service does when
    it recomputes the signature, so ``?Comp=list`` and ``?comp=list`` sign
    alike. Parameters differing only in case are merged into one line.
    """
    path = url.raw_path.split(b"?", 1)[0].decode("ascii")
    resource = f"/{account_name}{path}"

    params: Dict[str, List[str]] = {}
    for name, value in url.params.multi_items():
        params.setdefault(name.lower(), []).append(value)

    for name in sorted(params):
        resource += f"\n{name}:{','.join(params[name])}"

    return resource


def build_string_to_sign(
    credentials: StorageCredentials,
    method: str,
    url: Union[httpx.URL, str],
    headers: Optional[HeaderInput] = None,
) -> str:
    """
    Build the canonical string for a request.

    Args:
        credentials: Account credentials (only the account name is used)
        method: HTTP method
        url: Full request URL
        headers: Request headers; absent standard headers count as empty

    Returns:
        The exact string the HMAC is computed over
    """
    header_set = HeaderSet.of(headers)
    url = httpx.URL(url)

    parts = [method.upper()]
    for name in SIGNED_STANDARD_HEADERS:
        if name == "content-length":
            parts.append(_get_content_length(header_set))
        else:
            parts.append(header_set.get(name))

    return (
        "\n".join(parts)
        + "\n"
        + canonicalize_headers(header_set)
        + canonicalize_resource(url, credentials.account_name)
    )


def sign(
    credentials: StorageCredentials,
    method: str,
    url: Union[httpx.URL, str],
    headers: Optional[HeaderInput] = None,
) -> str:
    """
    Compute the Authorization header value for a request.

    The caller must have set ``x-ms-date`` and ``x-ms-version`` already;
    both are signed over. The result is deterministic for fixed inputs.

    Returns:
        ``SharedKey {account}:{signature}``
    """
    string_to_sign = build_string_to_sign(credentials, method, url, headers)
    logger.debug(f"String to sign: {string_to_sign!r}")

    signature = compute_signature(string_to_sign, credentials.account_key)
    return f"{SHARED_KEY_SCHEME} {credentials.account_name}:{signature}"
