"""
=============================================================================
MIME TYPE RESOLUTION
=============================================================================

Maps a file extension to the Content-Type sent with a 200 response.

=============================================================================
THE TABLE
=============================================================================

The server only knows a handful of types. Everything else is sent as
opaque binary, which makes browsers download it instead of rendering it:

    ┌────────────────────────────────────────────────────────────────────┐
    │  EXTENSION        CONTENT-TYPE                                     │
    │  ──────────────────────────────────────────────────────────────── │
    │  html, htm        text/html                                        │
    │  txt              text/plain                                       │
    │  jpg, jpeg        image/jpeg                                       │
    │  png              image/png                                        │
    │  (anything else)  application/octet-stream                        │
    └────────────────────────────────────────────────────────────────────┘

Lookups are case-insensitive: "INDEX.HTML" and "index.html" resolve the
same way. The table is a module-level constant and is never mutated, so
worker threads read it without locking.

=============================================================================
EXTENSIONS
=============================================================================

The extension is everything after the LAST dot of the decoded path:

    "index.html"          → "html"
    "archive.tar.gz"      → "gz"
    "docs/v1.2/README"    → "2/README"   (last dot wins, even in a directory)
    "Makefile"            → ""           (no dot)
    ".bashrc"             → ""           (dot is the first character)

=============================================================================
"""

# Keys are lowercase, without the leading dot.
MIME_TYPES = {
    "html": "text/html",
    "htm": "text/html",
    "txt": "text/plain",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
}

# application/octet-stream = "I don't know what this is, treat as binary"
DEFAULT_MIME_TYPE = "application/octet-stream"


def get_file_extension(path: str) -> str:
    """
    Return the extension of a decoded request path.

    Args:
        path: Decoded path, relative to the document root.

    Returns:
        The text after the last ".", or "" when there is no dot or the
        dot is the very first character.

    Examples:
        >>> get_file_extension("images/logo.PNG")
        'PNG'

        >>> get_file_extension(".hidden")
        ''
    """
    dot = path.rfind(".")
    if dot <= 0:
        return ""
    return path[dot + 1:]


def resolve_mime_type(extension: str) -> str:
    """
    Resolve a file extension to a MIME type.

    Args:
        extension: Extension without the leading dot, any letter case.

    Returns:
        The MIME type string. Never fails; unknown extensions (including
        the empty string) map to application/octet-stream.

    Examples:
        >>> resolve_mime_type("JPG")
        'image/jpeg'

        >>> resolve_mime_type("css")
        'application/octet-stream'
    """
    return MIME_TYPES.get(extension.lower(), DEFAULT_MIME_TYPE)


def mime_type_for_path(path: str) -> str:
    """Shortcut: resolve the MIME type straight from a decoded path."""
    return resolve_mime_type(get_file_extension(path))
