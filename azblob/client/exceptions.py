"""
Exceptions raised for service responses.
"""

import logging
from typing import Dict, Mapping, Optional
from xml.etree import ElementTree as ET

from azblob.auth.exceptions import AzBlobError

logger = logging.getLogger(__name__)


def parse_error_body(body: str) -> Dict[str, str]:
    """
    Extract ``Code`` and ``Message`` from a storage XML error body.

    Format:
        <?xml version="1.0" encoding="utf-8"?>
        <Error>
            <Code>AuthenticationFailed</Code>
            <Message>Server failed to authenticate the request.</Message>
        </Error>

    Returns:
        Dict with the ``code`` and ``message`` found; empty if the body is
        not a storage error document
    """
    text = body.lstrip("\ufeff").strip()
    if not text.startswith("<"):
        return {}

    try:
        root = ET.fromstring(text)
    except ET.ParseError:
        logger.debug("Error response body is not well-formed XML")
        return {}

    if root.tag != "Error":
        return {}

    details: Dict[str, str] = {}
    code = root.findtext("Code")
    if code:
        details["code"] = code.strip()
    message = root.findtext("Message")
    if message:
        details["message"] = message.strip()
    return details


class AzureStorageError(AzBlobError):
    """
    Raised when the service answers with an unexpected status code.

    Carries the status code, response headers and body text. ``error_code``
    is the service's ``x-ms-error-code`` (or the XML ``Code``) when present.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        headers: Optional[Mapping[str, str]] = None,
        body: str = "",
        error_code: Optional[str] = None,
    ):
        super().__init__(message, error_code or "UnexpectedStatus")
        self.status_code = status_code
        self.headers = dict(headers or {})
        self.body = body

    @classmethod
    def from_response(
        cls,
        status_code: int,
        headers: Mapping[str, str],
        body: str,
    ) -> "AzureStorageError":
        """Build an error from a raw response."""
        details = parse_error_body(body)
        error_code = details.get("code") or headers.get("x-ms-error-code")
        message = details.get("message") or body or f"HTTP {status_code}"
        return cls(message, status_code, headers, body, error_code)

    def __str__(self) -> str:
        return f"{self.status_code} {self.error_code}: {self.message}"
