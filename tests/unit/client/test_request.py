"""Tests for request building and signing."""

import base64
from datetime import datetime, timezone

import pytest

from azblob.auth.connection import build_uri, parse_connection_string
from azblob.auth.sharedkey import sign
from azblob.client.request import (
    RequestBuilder,
    format_http_date,
    sign_request,
)
from azblob.constants import MS_VERSION
from azblob.core.logging_config import clear_client_request_id, set_client_request_id

ACCOUNT_KEY = base64.b64encode(b"request-builder-key").decode("ascii")
NOW = datetime(2025, 12, 4, 10, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def credentials():
    return parse_connection_string(f"AccountName=myaccount;AccountKey={ACCOUNT_KEY}")


@pytest.fixture(autouse=True)
def reset_request_id():
    clear_client_request_id()
    yield
    clear_client_request_id()


class TestFormatHttpDate:
    """Test RFC 1123 date formatting."""

    def test_format(self):
        """Test the HTTP-date layout."""
        assert format_http_date(NOW) == "Thu, 04 Dec 2025 10:30:00 GMT"

    def test_naive_taken_as_utc(self):
        """Test naive datetimes are treated as UTC."""
        assert format_http_date(datetime(2025, 12, 4, 10, 30)) == "Thu, 04 Dec 2025 10:30:00 GMT"

    def test_defaults_to_now(self):
        """Test that omitting the moment yields a GMT date."""
        assert format_http_date().endswith(" GMT")


class TestRequestBuilder:
    """Test header accumulation and freezing."""

    def test_build_stamps_date_and_version(self, credentials):
        """Test x-ms-date and x-ms-version are set on build."""
        request = RequestBuilder("get", build_uri(credentials, "/c/b")).build(NOW)

        assert request.method == "GET"
        assert request.headers.get("x-ms-date") == "Thu, 04 Dec 2025 10:30:00 GMT"
        assert request.headers.get("x-ms-version") == MS_VERSION

    def test_get_has_no_content_length(self, credentials):
        """Test bodiless GET carries no Content-Length."""
        request = RequestBuilder("GET", build_uri(credentials, "/c/b")).build(NOW)

        assert "content-length" not in request.headers

    def test_put_content_length(self, credentials):
        """Test Content-Length is derived from the body."""
        request = (
            RequestBuilder("PUT", build_uri(credentials, "/c/b"))
            .content("héllo")
            .build(NOW)
        )

        assert request.content == "héllo".encode("utf-8")
        assert request.headers.get("content-length") == "6"

    def test_empty_put_has_zero_length(self, credentials):
        """Test an empty PUT still declares Content-Length 0."""
        request = RequestBuilder("PUT", build_uri(credentials, "/c/b")).build(NOW)

        assert request.headers.get("content-length") == "0"

    def test_metadata_headers(self, credentials):
        """Test metadata is sent as x-ms-meta-* headers."""
        request = (
            RequestBuilder("PUT", build_uri(credentials, "/c/b"))
            .metadata({"owner": "alice", "env": "test"})
            .build(NOW)
        )

        assert request.headers.get("x-ms-meta-owner") == "alice"
        assert request.headers.get("x-ms-meta-env") == "test"

    def test_client_request_id_from_context(self, credentials):
        """Test the context request id is attached."""
        set_client_request_id("req-123")

        request = RequestBuilder("GET", build_uri(credentials, "/c/b")).build(NOW)

        assert request.headers.get("x-ms-client-request-id") == "req-123"

    def test_explicit_request_id_kept(self, credentials):
        """Test an explicit request id wins over the context one."""
        set_client_request_id("from-context")

        request = (
            RequestBuilder("GET", build_uri(credentials, "/c/b"))
            .header("x-ms-client-request-id", "explicit")
            .build(NOW)
        )

        assert request.headers.get_all("x-ms-client-request-id") == ["explicit"]

    def test_builder_not_affected_by_later_changes(self, credentials):
        """Test a built snapshot ignores headers added afterwards."""
        builder = RequestBuilder("GET", build_uri(credentials, "/c/b"))
        request = builder.build(NOW)

        builder.header("x-ms-range", "bytes=0-1")

        assert "x-ms-range" not in request.headers


class TestSignRequest:
    """Test signing of frozen requests."""

    def test_adds_authorization(self, credentials):
        """Test the Authorization header equals sign() over the snapshot."""
        request = (
            RequestBuilder("PUT", build_uri(credentials, "/c/b"))
            .header("x-ms-blob-type", "BlockBlob")
            .content(b"data")
            .build(NOW)
        )

        signed = sign_request(credentials, request)

        assert signed.authorization == sign(credentials, "PUT", request.url, request.headers)
        assert signed.authorization.startswith("SharedKey myaccount:")
        assert request.authorization is None

    def test_resigning_replaces_authorization(self, credentials):
        """Test signing twice keeps one Authorization value."""
        request = RequestBuilder("GET", build_uri(credentials, "/c/b")).build(NOW)

        once = sign_request(credentials, request)
        twice = sign_request(credentials, once)

        assert twice.headers.get_all("Authorization") == [once.authorization]

    def test_fixed_date_is_deterministic(self, credentials):
        """Test two builds at the same moment sign identically."""
        url = build_uri(credentials, "/c/b")

        first = sign_request(credentials, RequestBuilder("GET", url).build(NOW))
        second = sign_request(credentials, RequestBuilder("GET", url).build(NOW))

        assert first.authorization == second.authorization

    def test_to_httpx(self, credentials):
        """Test conversion keeps method, URL, headers and body."""
        request = RequestBuilder("GET", build_uri(credentials, "/c/b")).build(NOW)

        converted = sign_request(credentials, request).to_httpx()

        assert converted.method == "GET"
        assert str(converted.url) == "https://myaccount.blob.core.windows.net/c/b"
        assert converted.headers["x-ms-version"] == MS_VERSION
        assert converted.headers["authorization"].startswith("SharedKey ")
