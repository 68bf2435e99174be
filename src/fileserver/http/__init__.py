"""
=============================================================================
HTTP MODULE
=============================================================================

The pure, per-request half of the server. Nothing here touches a socket:

    raw bytes ──► request.py ──► url.py ──► mime_types.py ──► response.py
                  GET line       %XX          extension        200 / 404
                  → target       → path       → Content-Type   → bytes

Every function in this package is safe to call from any number of worker
threads at once. The only shared data is the constant MIME table.

=============================================================================
"""

from .request import RequestParser, RequestTarget, NoMatch, NO_MATCH, parse_request_target
from .url import decode_path
from .mime_types import resolve_mime_type, get_file_extension, mime_type_for_path, DEFAULT_MIME_TYPE
from .response import (
    ResponseBuilder,
    ResponseMessage,
    FileResponse,
    NotFoundResponse,
    TruncatedBodyError,
)

__all__ = [
    # Request line
    "RequestParser",
    "RequestTarget",
    "NoMatch",
    "NO_MATCH",
    "parse_request_target",
    # Path decoding
    "decode_path",
    # MIME types
    "resolve_mime_type",
    "get_file_extension",
    "mime_type_for_path",
    "DEFAULT_MIME_TYPE",
    # Responses
    "ResponseBuilder",
    "ResponseMessage",
    "FileResponse",
    "NotFoundResponse",
    "TruncatedBodyError",
]
