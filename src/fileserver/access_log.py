"""
=============================================================================
ACCESS LOG
=============================================================================

One log line per request that got a response (200 or 404). Requests that
are dropped without a response are logged at DEBUG by the handler instead.

=============================================================================
LOG FORMATS
=============================================================================

    TEXT (default, Apache-style):
    ┌─────────────────────────────────────────────────────────────────────┐
    │ 127.0.0.1 - - [19/Oct/2026:10:55:36 +0000] "GET /a.txt" 200 2 0.41ms│
    │ ─────────────────────────────────────────────────────────────────── │
    │ IP          Timestamp                 Target  Status Bytes Duration │
    └─────────────────────────────────────────────────────────────────────┘

    JSON (for log aggregators):
    {"connection_id": "a1b2c3d4", "method": "GET", "path": "/a.txt",
     "client_ip": "127.0.0.1", "status_code": 200, "content_length": 2,
     "duration_ms": 0.41, "timestamp": "19/Oct/2026:10:55:36 +0000"}

Access lines go to the "fileserver.access" logger, so they can be routed
separately from diagnostic logs:

    logging.getLogger("fileserver.access").addHandler(file_handler)

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass


logger = logging.getLogger("fileserver.access")


@dataclass
class AccessLogEntry:
    """
    Structured log entry for one request.

    Attributes:
        connection_id: Short id shared with the connection's debug logs.
        method: Always "GET" for requests that reach the log.
        path: Request target as sent, with its leading slash.
        client_ip: Client's IP address.
        status_code: 200 or 404.
        content_length: Body size announced in Content-Length.
        duration_ms: Time from accept to last byte written.
        timestamp: When the request finished.
    """

    connection_id: str
    method: str
    path: str
    client_ip: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        """Dictionary for JSON output."""
        return {
            "connection_id": self.connection_id,
            "method": self.method,
            "path": self.path,
            "client_ip": self.client_ip,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Apache-style single line."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Emits AccessLogEntry records in the configured format.

    Usage:
        access_log = AccessLogger(log_format="json")
        access_log.log(entry)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        """
        Args:
            log_format: "text" or "json".
            log_level: Level the access lines are logged at.
        """
        self.log_format = log_format
        self.log_level = log_level

    @staticmethod
    def now() -> str:
        """Timestamp in the access log's format."""
        return time.strftime("%d/%b/%Y:%H:%M:%S %z")

    def log(self, entry: AccessLogEntry) -> None:
        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())
