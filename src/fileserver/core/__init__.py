"""
=============================================================================
CORE MODULE
=============================================================================

The transport layer: everything that owns a socket or a thread.

    SocketServer   bind / listen / accept loop
    Connection     one client socket: read request line, send, close
    ThreadPool     bounded set of workers that run the connection handler

The HTTP logic in ``fileserver.http`` never imports from here. It only
needs an object with ``send_all(data)``, which Connection provides.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState, RequestLineTooLong
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "RequestLineTooLong",
    "ThreadPool",
]
