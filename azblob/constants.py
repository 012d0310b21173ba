"""
azblob Constants

Pinned protocol versions, header names and defaults shared by the signer
and the blob client.
"""

# Sent as x-ms-version on every request. Changing it changes service-side
# size limits and behavior.
MS_VERSION = "2019-12-12"

# Signed version of read-only blob links. Older than MS_VERSION; it selects
# the six-field string-to-sign format.
SAS_SIGNED_VERSION = "2012-02-12"

DEFAULT_PROTOCOL = "https"
DEFAULT_ENDPOINT_SUFFIX = "core.windows.net"
DEFAULT_LINK_EXPIRY_SECONDS = 60 * 60
DEFAULT_TIMEOUT = 30.0

# Header names
HEADER_AUTHORIZATION = "Authorization"
HEADER_MS_DATE = "x-ms-date"
HEADER_MS_VERSION = "x-ms-version"
HEADER_MS_BLOB_TYPE = "x-ms-blob-type"
HEADER_MS_CLIENT_REQUEST_ID = "x-ms-client-request-id"
HEADER_MS_PREFIX = "x-ms-"
HEADER_MS_META_PREFIX = "x-ms-meta-"

# Standard headers in the order they appear in the string-to-sign
SIGNED_STANDARD_HEADERS = (
    "content-encoding",
    "content-language",
    "content-length",
    "content-md5",
    "content-type",
    "date",
    "if-modified-since",
    "if-match",
    "if-none-match",
    "if-unmodified-since",
    "range",
)

RFC1123_FORMAT = "%a, %d %b %Y %H:%M:%S GMT"
