"""
=============================================================================
URL PATH DECODING
=============================================================================

Turns the raw request target into the path we look up on disk.

=============================================================================
PERCENT-ENCODING
=============================================================================

URLs can only carry a limited set of characters. Anything else (spaces,
non-ASCII letters, reserved characters) is sent as %XX, where XX is the
byte value in hexadecimal:

    "my%20file.txt"        → "my file.txt"
    "100%25.txt"           → "100%.txt"
    "caf%C3%A9.html"       → "café.html"      (two UTF-8 bytes → one char)

=============================================================================
DECODING RULES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  scan left to right:                                                │
    │                                                                      │
    │    "%" + two hex digits   → emit one byte, skip 3 characters        │
    │    "%" + fewer than two   → copy "%" literally, skip 1              │
    │          characters left                                            │
    │    "%" + non-hex digits   → copy "%" literally, skip 1              │
    │    anything else          → copy as-is, skip 1                      │
    └─────────────────────────────────────────────────────────────────────┘

So an incomplete escape at the end stays as typed ("abc%2" → "abc%2"),
while a complete one at the end is decoded ("abc%20" → "abc ").

Decoding never lengthens the path. It also never validates it: "%2e%2e/"
decodes to "../" on purpose, and it is the response builder's job to keep
the final path inside the document root.

=============================================================================
"""

from urllib.parse import unquote

# Request targets and file names are bytes on the wire and on disk.
# surrogateescape lets undecodable bytes survive the round trip through str.
PATH_ENCODING = "utf-8"
PATH_ERRORS = "surrogateescape"


def decode_path(encoded: str) -> str:
    """
    Percent-decode a URL path.

    Args:
        encoded: The request target as extracted by the request parser.

    Returns:
        The decoded path. ``len(result) <= len(encoded)`` always holds.

    Examples:
        >>> decode_path("a%20b")
        'a b'

        >>> decode_path("abc%2")
        'abc%2'
    """
    return unquote(encoded, encoding=PATH_ENCODING, errors=PATH_ERRORS)
