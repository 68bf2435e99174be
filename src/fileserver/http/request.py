"""
=============================================================================
HTTP REQUEST LINE PARSING
=============================================================================

Extracts the requested path from the first line of an HTTP request.

=============================================================================
WHAT WE LOOK AT
=============================================================================

Only the request line matters to a GET-only file server. Headers and any
body are ignored:

    ┌─────────────────────────────────────────────────────────────────┐
    │  GET /images/logo.png HTTP/1.1\r\n      ← the only line we read │
    │  └─┘ └──────────────┘ └──────┘                                  │
    │  Method    Target      Version                                  │
    │                                                                  │
    │  Host: localhost:8080\r\n               ← ignored               │
    │  User-Agent: curl/8.4.0\r\n             ← ignored               │
    │  \r\n                                                            │
    └─────────────────────────────────────────────────────────────────┘

The line must match, from the very first byte:

    GET /<run of non-space characters> HTTP/1

The captured run is returned WITHOUT its leading slash, so it can be
joined directly onto the document root. An empty run ("GET / HTTP/1.1")
is a valid match with an empty path.

=============================================================================
NO MATCH IS AN ANSWER, NOT AN ERROR
=============================================================================

POST requests, garbage bytes, an empty buffer, lowercase "get", a missing
version: all of these produce NO_MATCH. The connection handler reacts by
closing the socket without writing anything. We never raise here, and we
never build a 400 response.

=============================================================================
"""

import re
from dataclasses import dataclass
from typing import Union

from .url import PATH_ENCODING, PATH_ERRORS


@dataclass(frozen=True)
class RequestTarget:
    """
    The path part of a matched GET request line.

    Attributes:
        path: Still percent-encoded, without the leading "/".
    """

    path: str


class NoMatch:
    """
    Outcome for a buffer that does not start with a GET request line.

    There is a single instance, NO_MATCH. It is falsy, so callers can
    write ``if not target:`` as well as ``if target is NO_MATCH:``.
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_MATCH"


NO_MATCH = NoMatch()

ParseResult = Union[RequestTarget, NoMatch]


class RequestParser:
    """
    Parser for the GET request line.

    Stateless; one instance is shared by every worker thread.

    Usage:
        parser = RequestParser()
        target = parser.parse(b"GET /index.html HTTP/1.1\\r\\n\\r\\n")
        if target is NO_MATCH:
            ...  # close the connection silently
        else:
            target.path  # "index.html"
    """

    # Compiled once at class load time.
    # [^ ]* stops at the first space; the version check only needs "HTTP/1".
    REQUEST_LINE_PATTERN = re.compile(rb"^GET /([^ ]*) HTTP/1")

    def parse(self, raw: bytes) -> ParseResult:
        """
        Parse a raw request buffer.

        Args:
            raw: Bytes received from the client. Must contain at least the
                 request line; anything after the first line feed is ignored.

        Returns:
            RequestTarget on a match, NO_MATCH otherwise.
        """
        if not raw:
            return NO_MATCH

        # Keep the match on the request line; never scan into headers.
        # Bare "\n" line ends are accepted as well as CRLF.
        line_end = raw.find(b"\n")
        request_line = raw if line_end == -1 else raw[:line_end].rstrip(b"\r")

        match = self.REQUEST_LINE_PATTERN.match(request_line)
        if match is None:
            return NO_MATCH

        return RequestTarget(path=match.group(1).decode(PATH_ENCODING, PATH_ERRORS))


_default_parser = RequestParser()


def parse_request_target(raw: bytes) -> ParseResult:
    """Parse with the shared module-level parser."""
    return _default_parser.parse(raw)
