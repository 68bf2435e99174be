"""
=============================================================================
STATIC FILE HANDLER
=============================================================================

Runs the whole request pipeline for one accepted connection.

=============================================================================
FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                                                                      │
    │   conn.read_request_line()     loop recv() until line end           │
    │          │                                                           │
    │          ▼                                                           │
    │   RequestParser.parse()        "GET /a%20b.txt HTTP/1.1"            │
    │          │                      → RequestTarget("a%20b.txt")        │
    │          │   NO_MATCH ──────────────────────────► close, no reply   │
    │          ▼                                                           │
    │   decode_path()                → "a b.txt"                          │
    │          │                                                           │
    │          ▼                                                           │
    │   mime_type_for_path()         → "text/plain"                       │
    │          │                                                           │
    │          ▼                                                           │
    │   ResponseBuilder.build()      → FileResponse | NotFoundResponse    │
    │          │                                                           │
    │          ▼                                                           │
    │   response.write_to(conn)      headers, then streamed body          │
    │          │                                                           │
    │          ▼                                                           │
    │   close response, close connection   (on EVERY path)                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
OUTCOMES
=============================================================================

handle() reports what happened as a HandleOutcome instead of leaving it
implicit. The client only ever sees three things: a 200, a 404, or a
connection closed with nothing written.

    SERVED         200 with the full body
    NOT_FOUND      404 with the fixed body
    DROPPED        not a GET request line, or line too long: no bytes sent
    DISCONNECTED   client went away, timed out, or a write failed
    ABORTED        file ended early mid-body; connection reset

=============================================================================
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..access_log import AccessLogger, AccessLogEntry
from ..core.connection import Connection, ConnectionState, RequestLineTooLong
from ..http.request import RequestParser, NO_MATCH
from ..http.url import decode_path
from ..http.mime_types import mime_type_for_path
from ..http.response import ResponseBuilder, TruncatedBodyError, DEFAULT_CHUNK_SIZE


logger = logging.getLogger(__name__)


class HandleOutcome(Enum):
    """What happened to one connection."""
    SERVED = "served"
    NOT_FOUND = "not_found"
    DROPPED = "dropped"
    DISCONNECTED = "disconnected"
    ABORTED = "aborted"


class StaticFileHandler:
    """
    Serves files from one document root, one request per connection.

    Holds no per-request state: a single instance is shared by every
    worker thread.

    Usage:
        handler = StaticFileHandler("/var/www")
        outcome = handler.handle(conn)    # always closes conn
    """

    def __init__(
        self,
        root_dir: Union[str, Path],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        access_logger: Optional[AccessLogger] = None,
    ):
        """
        Args:
            root_dir: Document root. Must exist.
            chunk_size: Bytes per read when streaming a file.
            access_logger: Where finished requests are logged.
        """
        self.builder = ResponseBuilder(root_dir, chunk_size=chunk_size)
        self.parser = RequestParser()
        self.access_logger = access_logger or AccessLogger()

        if not self.builder.root_dir.is_dir():
            raise ValueError(f"Document root does not exist: {root_dir}")

    @property
    def root_dir(self) -> Path:
        return self.builder.root_dir

    def handle(self, conn: Connection) -> HandleOutcome:
        """
        Handle one connection from first byte to close.

        Args:
            conn: A freshly accepted connection.

        Returns:
            The outcome. The connection is closed whatever it is.
        """
        with conn:
            outcome = self._process(conn)

        logger.debug(f"[{conn.id}] {outcome.value}")
        return outcome

    def _process(self, conn: Connection) -> HandleOutcome:
        try:
            raw_request = conn.read_request_line()
        except RequestLineTooLong as e:
            logger.debug(f"[{conn.id}] {e}")
            return HandleOutcome.DROPPED

        if raw_request is None:
            return HandleOutcome.DISCONNECTED

        conn.state = ConnectionState.PROCESSING

        target = self.parser.parse(raw_request)
        if target is NO_MATCH:
            logger.debug(f"[{conn.id}] Not a GET request line, closing without response")
            return HandleOutcome.DROPPED

        decoded_path = decode_path(target.path)
        mime_type = mime_type_for_path(decoded_path)

        with self.builder.build(decoded_path, mime_type) as response:
            try:
                response.write_to(conn)
            except TruncatedBodyError as e:
                logger.error(f"[{conn.id}] Body truncated: {e}")
                conn.abort()
                return HandleOutcome.ABORTED
            except OSError as e:
                logger.warning(f"[{conn.id}] Send failed: {e}")
                return HandleOutcome.DISCONNECTED

        self.access_logger.log(AccessLogEntry(
            connection_id=conn.id,
            method="GET",
            path="/" + target.path,
            client_ip=conn.client_ip,
            status_code=response.status_code,
            content_length=response.content_length,
            duration_ms=conn.age * 1000,
            timestamp=AccessLogger.now(),
        ))

        if response.status_code == 200:
            return HandleOutcome.SERVED
        return HandleOutcome.NOT_FOUND
