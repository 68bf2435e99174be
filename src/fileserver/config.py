"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Centralized configuration for the file server.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m fileserver --port 3000 --root ./public          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── FILESERVER_PORT=3000 python -m fileserver                 │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
RESOURCE LIMITS
=============================================================================

Several settings exist only to cap what one client can cost us:

    timeout            slow client never finishes its request line
    max_request_line   client sends an endless line with no CRLF
    max_workers        connection flood → bounded number of threads
    queue_size         connection flood → bounded backlog in memory

Memory per connection is one recv buffer plus one file chunk, and the
number of threads never exceeds max_workers.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_FORMATS = ("text", "json")


def _env_number(name: str, default: str, convert):
    """Read a numeric environment variable, naming it on failure."""
    value = os.getenv(name, default)
    try:
        return convert(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    REQUEST SETTINGS
    - max_request_line

    FILES
    - root_dir, chunk_size

    THREADING SETTINGS
    - max_workers, queue_size

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free one (used by tests)."""

    backlog: int = 128
    """Maximum number of connections queued by the kernel before accept()."""

    buffer_size: int = 8192
    """Bytes requested per recv() call while reading the request line."""

    timeout: Optional[float] = 30.0
    """
    Read/write deadline per connection, in seconds.
    None = block forever (only sensible in tests).
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_request_line: int = 8192
    """
    Maximum bytes read while looking for the end of the request line.
    Longer lines are dropped without a response.
    """

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    root_dir: str = "."
    """Document root. Requests can never resolve outside of it."""

    chunk_size: int = 64 * 1024
    """Bytes per read when streaming a file to the client."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    max_workers: int = 16
    """Number of worker threads; the ceiling on concurrent connections."""

    queue_size: int = 64
    """
    Accepted connections waiting for a free worker.
    When full, new connections are closed immediately.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' (Apache-style) or 'json'."""

    server_name: str = "PyFileServer/1.0"
    """Shown in the startup banner and logs. Not sent to clients."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        FILESERVER_HOST        Server host (default: 127.0.0.1)
        FILESERVER_PORT        Server port (default: 8080)
        FILESERVER_ROOT        Document root (default: .)
        FILESERVER_WORKERS     Worker threads (default: 16)
        FILESERVER_TIMEOUT     Read/write deadline in seconds (default: 30)
        FILESERVER_LOG_LEVEL   Logging level (default: INFO)
        FILESERVER_LOG_FORMAT  Access log format (default: text)

        =====================================================================
        """
        return cls(
            host=os.getenv("FILESERVER_HOST", "127.0.0.1"),
            port=_env_number("FILESERVER_PORT", "8080", int),
            root_dir=os.getenv("FILESERVER_ROOT", "."),
            max_workers=_env_number("FILESERVER_WORKERS", "16", int),
            timeout=_env_number("FILESERVER_TIMEOUT", "30", float),
            log_level=os.getenv("FILESERVER_LOG_LEVEL", "INFO"),
            log_format=os.getenv("FILESERVER_LOG_FORMAT", "text"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad value fails immediately, not on the
        first request.

        Raises:
            ValueError: On the first invalid setting found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.max_workers < 1:
            raise ValueError("max_workers must be >= 1")

        if self.queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.max_request_line < 16:
            raise ValueError("max_request_line must be >= 16")

        if self.chunk_size < 1:
            raise ValueError("chunk_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"log_format must be one of {LOG_FORMATS}")

        if not os.path.isdir(self.root_dir):
            raise ValueError(f"root_dir is not a directory: {self.root_dir}")
