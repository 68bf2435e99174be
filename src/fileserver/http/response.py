"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Turns a decoded path into one of exactly two responses: the file, or 404.

=============================================================================
THE TWO SHAPES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │  FOUND                               NOT FOUND                       │
    │  ─────                               ─────────                       │
    │  HTTP/1.1 200 OK\r\n                 HTTP/1.1 404 Not Found\r\n      │
    │  Content-Type: image/png\r\n         Content-Type: text/plain\r\n    │
    │  Content-Length: 5120\r\n            Content-Length: 13\r\n          │
    │  Connection: close\r\n               Connection: close\r\n           │
    │  \r\n                                \r\n                            │
    │  <5120 raw file bytes>               404 Not Found                   │
    └─────────────────────────────────────────────────────────────────────┘

There is no 403, 400 or 500. Missing file, permission denied, a directory,
a path that escapes the document root: the client sees the same 404 and
learns nothing about which one it was.

No Date header is sent, so building the response for the same unchanged
file twice produces identical bytes.

=============================================================================
DOCUMENT ROOT CONFINEMENT
=============================================================================

The decoded path can contain anything the client typed, "../" included:

    GET /%2e%2e/%2e%2e/etc/passwd HTTP/1.1
              │
              ▼ decode
    "../../etc/passwd"
              │
              ▼ root / path, then resolve() (follows "..", symlinks)
    "/etc/passwd"
              │
              ▼ relative_to(root) raises ValueError
    404 Not Found

The root itself is resolved once, when the builder is created, so the
check is a plain prefix comparison of two canonical absolute paths.

=============================================================================
STREAMING THE BODY
=============================================================================

FileResponse keeps the file open and copies it to the socket in
chunk_size pieces, so memory per connection is one chunk, not one file.
Content-Length comes from fstat() on the already-open descriptor.

If the file shrinks while we are sending it (or a read fails), we have
already promised Content-Length bytes. write_to() raises
TruncatedBodyError and the caller drops the connection, so the client sees
a short body instead of a silently corrupted one.

=============================================================================
"""

import os
import stat
import logging
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Union


logger = logging.getLogger(__name__)


HTTP_VERSION = "HTTP/1.1"
DEFAULT_CHUNK_SIZE = 64 * 1024


class TruncatedBodyError(Exception):
    """
    Raised when a file yields fewer bytes than its Content-Length.

    Attributes:
        expected: Bytes promised in Content-Length.
        sent: Body bytes actually written before the failure.
    """

    def __init__(self, message: str, expected: int, sent: int):
        super().__init__(message)
        self.expected = expected
        self.sent = sent


class ResponseMessage:
    """
    Base class for the two response variants.

    A response is built once, written once, then closed. It is a context
    manager so the file descriptor of a FileResponse is released on every
    exit path:

        with builder.build(path, mime_type) as response:
            response.write_to(conn)
    """

    status_code: int = 0
    reason: str = ""

    def __init__(self, content_type: str, content_length: int):
        self.headers: Dict[str, str] = {
            "Content-Type": content_type,
            "Content-Length": str(content_length),
            "Connection": "close",
        }

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 404 Not Found"."""
        return f"{HTTP_VERSION} {self.status_code} {self.reason}"

    @property
    def content_type(self) -> str:
        return self.headers["Content-Type"]

    @property
    def content_length(self) -> int:
        return int(self.headers["Content-Length"])

    def header_bytes(self) -> bytes:
        """
        Serialize status line and headers, including the blank line.

            HTTP/1.1 200 OK\\r\\n
            Content-Type: text/plain\\r\\n
            Content-Length: 2\\r\\n
            Connection: close\\r\\n
            \\r\\n
        """
        lines = [self.status_line]
        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")
        return ("\r\n".join(lines) + "\r\n").encode("latin-1")

    def to_bytes(self) -> bytes:
        """Serialize the complete response into one buffer."""
        raise NotImplementedError

    def write_to(self, conn) -> int:
        """
        Write the response to a connection.

        Args:
            conn: Anything with a ``send_all(data: bytes)`` method that
                  either sends every byte or raises OSError.

        Returns:
            Number of body bytes written.
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release resources held by the response."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


class NotFoundResponse(ResponseMessage):
    """The fixed 404 response."""

    status_code = 404
    reason = "Not Found"
    BODY = b"404 Not Found"

    def __init__(self):
        super().__init__("text/plain", len(self.BODY))

    def to_bytes(self) -> bytes:
        return self.header_bytes() + self.BODY

    def write_to(self, conn) -> int:
        conn.send_all(self.to_bytes())
        return len(self.BODY)


class FileResponse(ResponseMessage):
    """
    A 200 response backed by an open file.

    The response owns the file object and closes it in close().
    """

    status_code = 200
    reason = "OK"

    def __init__(
        self,
        file: BinaryIO,
        mime_type: str,
        size: int,
        path: Optional[Path] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        super().__init__(mime_type, size)
        self.file = file
        self.size = size
        self.path = path
        self.chunk_size = chunk_size

    def to_bytes(self) -> bytes:
        """
        Read the whole file and serialize the response.

        Reads from offset 0 every time, so calling it twice gives the same
        bytes as long as the file is unchanged.
        """
        self.file.seek(0)
        body = self.file.read(self.size)
        if len(body) < self.size:
            raise TruncatedBodyError(
                f"{self.path}: read {len(body)} of {self.size} bytes",
                expected=self.size,
                sent=0,
            )
        return self.header_bytes() + body

    def write_to(self, conn) -> int:
        """
        Send headers, then stream exactly ``size`` body bytes.

        Raises:
            TruncatedBodyError: The file ended early or a read failed.
            OSError: The connection failed while sending.
        """
        self.file.seek(0)
        conn.send_all(self.header_bytes())

        sent = 0
        while sent < self.size:
            try:
                chunk = self.file.read(min(self.chunk_size, self.size - sent))
            except OSError as e:
                raise TruncatedBodyError(
                    f"{self.path}: read failed after {sent} bytes: {e}",
                    expected=self.size,
                    sent=sent,
                ) from e

            if not chunk:
                raise TruncatedBodyError(
                    f"{self.path}: file ended after {sent} of {self.size} bytes",
                    expected=self.size,
                    sent=sent,
                )

            conn.send_all(chunk)
            sent += len(chunk)

        return sent

    def close(self) -> None:
        if not self.file.closed:
            self.file.close()


class ResponseBuilder:
    """
    Builds responses for paths under one document root.

    =========================================================================
    FLOW
    =========================================================================

        build("docs/a%20b.txt" decoded → "docs/a b.txt", "text/plain")

        1. Reject NUL bytes (the OS cannot open them anyway)
        2. root / path → resolve() → must stay inside root
        3. is_file()        → directories, FIFOs, missing paths are 404
        4. open(..., "rb")  → any OSError means 404
        5. fstat()          → re-check regular file; size = Content-Length
        6. FileResponse(file, mime_type, size)

    =========================================================================
    USAGE
    =========================================================================

        builder = ResponseBuilder("/var/www")

        with builder.build("index.html", "text/html") as response:
            response.write_to(conn)

    =========================================================================
    """

    def __init__(self, root_dir: Union[str, Path], chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Args:
            root_dir: Document root. Resolved to an absolute path here;
                      the process working directory is never consulted
                      again after this point.
            chunk_size: Bytes per read when streaming a file body.
        """
        self.root_dir = Path(root_dir).resolve()
        self.chunk_size = chunk_size

    def resolve(self, decoded_path: str) -> Optional[Path]:
        """
        Map a decoded request path to a filesystem path inside the root.

        Returns:
            The canonical absolute path, or None if the path is unusable
            or escapes the document root.
        """
        if "\x00" in decoded_path:
            logger.debug(f"Rejecting path with NUL byte: {decoded_path!r}")
            return None

        try:
            full_path = (self.root_dir / decoded_path).resolve()
        except (OSError, ValueError, RuntimeError) as e:
            # RuntimeError: symlink loop on older Pythons
            logger.debug(f"Cannot resolve {decoded_path!r}: {e}")
            return None

        try:
            full_path.relative_to(self.root_dir)
        except ValueError:
            logger.warning(f"Path traversal attempt: {decoded_path!r}")
            return None

        return full_path

    def build(self, decoded_path: str, mime_type: str) -> ResponseMessage:
        """
        Build the response for a decoded path.

        Never raises for filesystem problems: every failure becomes a
        NotFoundResponse.

        Args:
            decoded_path: Output of decode_path(), relative to the root.
            mime_type: Content-Type to use if the file is served.

        Returns:
            FileResponse (caller must close it) or NotFoundResponse.
        """
        full_path = self.resolve(decoded_path)
        if full_path is None:
            return NotFoundResponse()

        # Opening a FIFO or device would block or misbehave; stat first.
        try:
            if not full_path.is_file():
                return NotFoundResponse()
        except OSError as e:
            # ENAMETOOLONG, EACCES on a parent directory, ...
            logger.debug(f"Cannot stat {full_path}: {e}")
            return NotFoundResponse()

        try:
            file = open(full_path, "rb")
        except OSError as e:
            logger.debug(f"Cannot open {full_path}: {e}")
            return NotFoundResponse()

        try:
            file_stat = os.fstat(file.fileno())
        except OSError as e:
            file.close()
            logger.debug(f"Cannot stat {full_path}: {e}")
            return NotFoundResponse()

        if not stat.S_ISREG(file_stat.st_mode):
            file.close()
            return NotFoundResponse()

        return FileResponse(
            file=file,
            mime_type=mime_type,
            size=file_stat.st_size,
            path=full_path,
            chunk_size=self.chunk_size,
        )
