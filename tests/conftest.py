"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator
import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from fileserver import FileServer, ServerConfig
from fileserver.server import create_server
from fileserver.core.connection import Connection


@pytest.fixture
def doc_root(tmp_path: Path) -> Path:
    """Document root with a few files of each known type."""
    root = tmp_path / "www"
    root.mkdir()

    (root / "greeting.txt").write_bytes(b"hi")
    (root / "index.html").write_bytes(b"<h1>Hello</h1>")
    (root / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n" + bytes(range(256)))
    (root / "my file.txt").write_bytes(b"spaces")
    (root / "data.bin").write_bytes(b"\x00\x01\x02")

    sub = root / "docs"
    sub.mkdir()
    (sub / "guide.htm").write_bytes(b"<p>guide</p>")

    # A file right next to the root that must never be reachable
    (tmp_path / "secret.txt").write_bytes(b"top secret")

    return root


@pytest.fixture
def socket_pair() -> Generator[tuple, None, None]:
    """
    A Connection wired to a plain client socket.

    Yields (connection, client_socket). Both ends are closed afterwards.
    """
    server_side, client_side = socket.socketpair()
    conn = Connection(
        socket=server_side,
        address=("127.0.0.1", 50000),
        timeout=2.0,
        max_request_line=1024,
    )
    client_side.settimeout(2.0)

    yield conn, client_side

    conn.close()
    client_side.close()


def recv_all(sock: socket.socket) -> bytes:
    """Read until the peer closes."""
    chunks = []
    while True:
        try:
            chunk = sock.recv(65536)
        except ConnectionResetError:
            break
        if not chunk:
            break
        chunks.append(chunk)
    return b"".join(chunks)


def split_response(data: bytes) -> tuple:
    """Split raw response bytes into (status_line, headers dict, body)."""
    head, _, body = data.partition(b"\r\n\r\n")
    lines = head.decode("latin-1").split("\r\n")
    headers = {}
    for line in lines[1:]:
        name, _, value = line.partition(":")
        headers[name.strip()] = value.strip()
    return lines[0], headers, body


class RunningServer:
    """A FileServer running in a background thread."""

    def __init__(self, server: FileServer):
        self.server = server
        self._thread = threading.Thread(
            target=self.server.run,
            kwargs={"setup_logging": False},
            daemon=True,
        )

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread.start()
        if not self.server.wait_until_ready(5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.stop()
        self._thread.join(timeout=10.0)

    def request(self, raw: bytes) -> bytes:
        """Send raw bytes, return everything the server sends back."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(raw)
            return recv_all(sock)

    def get(self, path: str) -> bytes:
        return self.request(f"GET {path} HTTP/1.1\r\nHost: localhost\r\n\r\n".encode())


@pytest.fixture
def server_config(doc_root: Path) -> ServerConfig:
    """Test server configuration: ephemeral port, small pool."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        root_dir=str(doc_root),
        max_workers=4,
        queue_size=16,
        timeout=2.0,
        log_level="WARNING",
    )


@pytest.fixture
def running_server(server_config: ServerConfig) -> Generator[RunningServer, None, None]:
    """Start a file server for the duration of a test."""
    srv = RunningServer(create_server(server_config))
    srv.start()

    yield srv

    srv.stop()
