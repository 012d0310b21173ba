"""Tests for immutable header snapshots."""

import httpx
import pytest

from azblob.headers import HeaderSet


class TestHeaderSet:
    """Test HeaderSet behavior."""

    def test_case_insensitive_get(self):
        """Test lookups ignore case."""
        headers = HeaderSet.of({"Content-Type": "text/plain"})

        assert headers.get("content-type") == "text/plain"
        assert "CONTENT-TYPE" in headers

    def test_missing_defaults_to_empty(self):
        """Test absent headers read as ''."""
        assert HeaderSet().get("range") == ""

    def test_multiple_values(self):
        """Test list values become separate entries joined on get."""
        headers = HeaderSet.of({"x-ms-meta-a": ["1", "2"]})

        assert headers.get_all("x-ms-meta-a") == ["1", "2"]
        assert headers.get("x-ms-meta-a") == "12"

    def test_with_header_replaces(self):
        """Test with_header drops earlier values of the same name."""
        headers = HeaderSet.of({"X-Ms-Date": "old"}).with_header("x-ms-date", "new")

        assert headers.get_all("x-ms-date") == ["new"]

    def test_immutable(self):
        """Test copies leave the original untouched."""
        original = HeaderSet.of({"a": "1"})
        original.add("b", "2")

        assert "b" not in original
        with pytest.raises(AttributeError):
            original.entries = ()

    def test_names_lowercase_distinct(self):
        """Test names() lists each header once."""
        headers = HeaderSet.of([("X-A", "1"), ("x-a", "2"), ("B", "3")])

        assert headers.names() == ["x-a", "b"]

    def test_from_httpx_headers(self):
        """Test httpx.Headers keep repeated values apart."""
        headers = HeaderSet.of(httpx.Headers([("x-ms-meta-a", "1"), ("x-ms-meta-a", "2")]))

        assert headers.get_all("x-ms-meta-a") == ["1", "2"]

    def test_int_values_stringified(self):
        """Test non-string values are converted."""
        assert HeaderSet.of({"Content-Length": 5}).get("content-length") == "5"
