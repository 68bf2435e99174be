"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: read the request line, write the
response, close. One request per connection, no keep-alive.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. The client's request line

    GET /index.html HTTP/1.1\r\n

may arrive in one recv() or in several:

    First recv():  "GET /ind"
    Second recv(): "ex.html HTTP/1.1\r\nHost: ..."

So we keep calling recv() until the buffer contains a line feed ("\r\n" or
a bare "\n", which some clients send), and only then
hand it to the parser. Three things stop the loop early:

    ┌───────────────────────────┬──────────────────────────────────────┐
    │ Condition                 │ Result                               │
    ├───────────────────────────┼──────────────────────────────────────┤
    │ peer closed, no bytes     │ None                                 │
    │ peer closed, some bytes   │ the bytes (parser decides)           │
    │ deadline passed / reset   │ None                                 │
    │ line > max_request_line   │ RequestLineTooLong                   │
    └───────────────────────────┴──────────────────────────────────────┘

=============================================================================
DEADLINES, NOT JUST TIMEOUTS
=============================================================================

A plain socket timeout restarts on every recv(). A client trickling one
byte every 29 seconds would never trip a 30 second timeout. We compute
the time left until a fixed deadline before each recv() instead, so the
WHOLE request line must arrive within `timeout` seconds.

Writes use sendall(), which loops internally until every byte is out, so
a short send() never silently drops the tail of a response.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSING ──► CLOSED
              │              │                        ▲
              └──────────────┴────────────────────────┘
                 (no match, timeout, error: straight to close)

=============================================================================
"""

import socket
import time
import logging
import uuid
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional


logger = logging.getLogger(__name__)


class RequestLineTooLong(Exception):
    """Raised when no line end shows up within max_request_line bytes."""


class ConnectionState(Enum):
    """Connection lifecycle states, used for logging and debugging."""
    NEW = "new"                # Just accepted, nothing read yet
    READING = "reading"        # Waiting for the request line
    PROCESSING = "processing"  # Parsing and building the response
    WRITING = "writing"        # Sending response bytes
    CLOSING = "closing"        # Shutdown sequence in progress
    CLOSED = "closed"          # Socket released


@dataclass
class Connection:
    """
    A single client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
        bytes_sent: Total bytes written to the client.
    """

    # Required parameters
    socket: socket.socket
    address: tuple

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_sent: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 8192
    timeout: Optional[float] = 30.0
    max_request_line: int = 8192

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Client IP address ("-" for unix socket pairs in tests)."""
        if isinstance(self.address, tuple) and self.address:
            return str(self.address[0])
        return "-"

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    @property
    def is_closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    # =========================================================================
    # READING
    # =========================================================================

    def read_request_line(self) -> Optional[bytes]:
        """
        Read until the buffer holds a complete request line.

        Returns:
            Every byte received so far (request line plus whatever else
            arrived with it), or None if the client sent nothing usable
            before closing, resetting, or running out of time.

        Raises:
            RequestLineTooLong: No line end within max_request_line bytes.
        """
        self.state = ConnectionState.READING
        deadline = None if self.timeout is None else time.monotonic() + self.timeout

        while b"\n" not in self._buffer:
            if len(self._buffer) > self.max_request_line:
                raise RequestLineTooLong(
                    f"No end of request line within {self.max_request_line} bytes"
                )

            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.debug(f"[{self.id}] Request line deadline passed")
                    return None
                self.socket.settimeout(remaining)

            try:
                chunk = self.socket.recv(self.buffer_size)
            except socket.timeout:
                logger.debug(f"[{self.id}] Timed out waiting for request line")
                return None
            except OSError as e:
                logger.debug(f"[{self.id}] Read failed: {e}")
                return None

            if not chunk:
                # Peer closed its side; let the parser judge what we have.
                break

            self._buffer += chunk

        line_end = self._buffer.find(b"\n")
        if line_end == -1:
            line_length = len(self._buffer)
        else:
            line_length = line_end - 1 if self._buffer[:line_end].endswith(b"\r") else line_end
        if line_length > self.max_request_line:
            raise RequestLineTooLong(
                f"Request line is {line_length} bytes, limit {self.max_request_line}"
            )

        self.socket.settimeout(self.timeout)
        return self._buffer or None

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_all(self, data: bytes) -> None:
        """
        Send every byte of data.

        sendall() retries partial writes internally. The socket timeout
        bounds each blocking write.

        Raises:
            OSError: Client disconnected or the write timed out.
        """
        self.state = ConnectionState.WRITING
        self.socket.sendall(data)
        self.bytes_sent += len(data)

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-response
        2. close(): release the file descriptor

        Safe to call more than once.
        """
        if self.state == ConnectionState.CLOSED:
            return

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def abort(self):
        """
        Close without a graceful shutdown.

        Used when a response body was cut short: the client must not
        mistake the partial body for a complete one.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection aborted")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Ensure the connection is closed on every exit path."""
        self.close()
        return False
