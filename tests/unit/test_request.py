"""
Unit tests for request line parsing.
"""

import pytest

from fileserver.http.request import (
    RequestParser,
    RequestTarget,
    NoMatch,
    NO_MATCH,
    parse_request_target,
)


class TestRequestParser:
    """Tests for RequestParser class."""

    def setup_method(self):
        self.parser = RequestParser()

    def test_simple_get(self):
        result = self.parser.parse(b"GET /index.html HTTP/1.1\r\n\r\n")
        assert result == RequestTarget(path="index.html")

    def test_root_path_is_empty(self):
        result = self.parser.parse(b"GET / HTTP/1.1\r\n\r\n")
        assert result == RequestTarget(path="")

    def test_nested_path(self):
        result = self.parser.parse(b"GET /images/logo.png HTTP/1.1\r\n\r\n")
        assert result.path == "images/logo.png"

    def test_path_stays_encoded(self):
        result = self.parser.parse(b"GET /a%20b.txt HTTP/1.1\r\n\r\n")
        assert result.path == "a%20b.txt"

    def test_http_1_0(self):
        result = self.parser.parse(b"GET /a.txt HTTP/1.0\r\n\r\n")
        assert result.path == "a.txt"

    def test_headers_ignored(self):
        raw = (
            b"GET /page.html HTTP/1.1\r\n"
            b"Host: localhost\r\n"
            b"User-Agent: test\r\n"
            b"\r\n"
        )
        assert self.parser.parse(raw).path == "page.html"

    def test_query_string_is_part_of_path(self):
        result = self.parser.parse(b"GET /a.txt?x=1 HTTP/1.1\r\n\r\n")
        assert result.path == "a.txt?x=1"

    def test_line_without_crlf(self):
        """A request line cut off by EOF still parses."""
        assert self.parser.parse(b"GET /a.txt HTTP/1.1").path == "a.txt"

    def test_bare_lf_line_end(self):
        assert self.parser.parse(b"GET /x.txt HTTP/1.0\n\n").path == "x.txt"

    def test_bare_lf_keeps_match_on_first_line(self):
        raw = b"POST /x HTTP/1.1\nX: GET /a.txt HTTP/1.1\n\n"
        assert self.parser.parse(raw) is NO_MATCH

    @pytest.mark.parametrize("raw", [
        b"",
        b"POST /index.html HTTP/1.1\r\n\r\n",
        b"HEAD /index.html HTTP/1.1\r\n\r\n",
        b"get /index.html HTTP/1.1\r\n\r\n",
        b"GET index.html HTTP/1.1\r\n\r\n",
        b"GET /index.html\r\n\r\n",
        b"GET /index.html HTTP/2\r\n\r\n",
        b" GET /index.html HTTP/1.1\r\n\r\n",
        b"\x00\x01\x02garbage",
    ])
    def test_no_match(self, raw):
        assert self.parser.parse(raw) is NO_MATCH

    def test_match_must_be_on_request_line(self):
        """A GET line inside the headers does not count."""
        raw = b"POST /x HTTP/1.1\r\nX: GET /a.txt HTTP/1.1\r\n\r\n"
        assert self.parser.parse(raw) is NO_MATCH

    def test_non_ascii_bytes_survive(self):
        result = self.parser.parse(b"GET /caf\xc3\xa9.html HTTP/1.1\r\n\r\n")
        assert result.path == "café.html"


class TestNoMatch:
    """Tests for the NO_MATCH sentinel."""

    def test_is_falsy(self):
        assert not NO_MATCH

    def test_singleton(self):
        assert NoMatch() is NO_MATCH

    def test_repr(self):
        assert repr(NO_MATCH) == "NO_MATCH"

    def test_target_is_truthy(self):
        assert RequestTarget(path="")


def test_module_level_shortcut():
    assert parse_request_target(b"GET /x.txt HTTP/1.1\r\n").path == "x.txt"
    assert parse_request_target(b"PUT /x.txt HTTP/1.1\r\n") is NO_MATCH
