"""
=============================================================================
FILE SERVER
=============================================================================

Ties the transport layer and the static file handler together.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. CLIENT CONNECTS
       └── SocketServer accepts the TCP connection (main thread)

    2. QUEUE FOR PROCESSING
       └── Connection submitted to the ThreadPool
       └── Queue full? Close it right away, nothing written

    3. HANDLE (worker thread)
       └── StaticFileHandler: read line → parse → decode → MIME → build

    4. SEND AND CLOSE
       └── 200 or 404 written, connection closed, worker picks the next one

=============================================================================
"""

import logging
from typing import Optional, Tuple

from .config import ServerConfig
from .core import SocketServer, Connection, ThreadPool
from .handlers import StaticFileHandler
from .access_log import AccessLogger


logger = logging.getLogger(__name__)


class FileServer:
    """
    GET-only HTTP/1.x file server.

    =========================================================================
    USAGE
    =========================================================================

        server = FileServer(ServerConfig(port=8080, root_dir="./public"))
        server.run()              # blocks until Ctrl+C / SIGTERM

    From another thread (tests):

        thread = threading.Thread(target=server.run, daemon=True)
        thread.start()
        server.wait_until_ready(5.0)
        host, port = server.address
        ...
        server.stop()
        thread.join()

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None):
        """
        Args:
            config: Server configuration. Defaults serve the current
                    directory on 127.0.0.1:8080.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()  # Fail-fast on invalid config

        self._socket_server = SocketServer(self.config)

        self._thread_pool = ThreadPool(
            num_workers=self.config.max_workers,
            queue_size=self.config.queue_size,
        )

        self._handler = StaticFileHandler(
            self.config.root_dir,
            chunk_size=self.config.chunk_size,
            access_logger=AccessLogger(log_format=self.config.log_format),
        )

        self._running = False

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); valid once wait_until_ready() returned True."""
        return self._socket_server.address

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def handler(self) -> StaticFileHandler:
        return self._handler

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self, setup_logging: bool = True):
        """
        Start the server (blocking).

        Args:
            setup_logging: Configure the root logger from the config.
                           Embedding applications pass False.
        """
        if setup_logging:
            self._setup_logging()

        self._running = True
        self._thread_pool.start()

        logger.info(f"{self.config.server_name} serving {self._handler.root_dir}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            self._shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is bound."""
        return self._socket_server.wait_until_ready(timeout)

    def stop(self):
        """Ask the accept loop to exit; run() then shuts everything down."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("fileserver").setLevel(level)

    def _shutdown(self):
        """Stop accepting, drain queued connections, stop the workers."""
        logger.info("Shutting down server...")
        self._running = False

        self._thread_pool.shutdown(wait=True, timeout=30.0)

        logger.info("Server stopped")

    # =========================================================================
    # CONNECTION DISPATCH
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Queue a connection for a worker (runs in the accept loop).

        There is no 503: an overloaded server closes the connection
        without writing anything.
        """
        try:
            submitted = self._thread_pool.submit(self._handler.handle, args=(conn,))
        except RuntimeError as e:
            logger.warning(f"[{conn.id}] Not accepting work: {e}")
            conn.close()
            return

        if not submitted:
            logger.warning(f"[{conn.id}] Thread pool full, dropping connection from {conn.client_ip}")
            conn.close()


def create_server(config: Optional[ServerConfig] = None) -> FileServer:
    """Factory function for FileServer instances."""
    return FileServer(config)
