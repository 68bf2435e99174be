"""
=============================================================================
FILESERVER - Minimal HTTP/1.x File Server
=============================================================================

Serves files from one directory over plain HTTP, using raw Python sockets.
One GET request per connection; the answer is the file, a 404, or nothing.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    fileserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m fileserver)
    ├── server.py            # FileServer: wires everything together
    ├── config.py            # ServerConfig dataclass
    ├── access_log.py        # One log line per served request
    ├── core/                # Transport layer
    │   ├── socket_server.py # bind / listen / accept
    │   ├── connection.py    # read request line, send, close
    │   └── thread_pool.py   # bounded worker pool
    ├── http/                # Pure request/response logic
    │   ├── request.py       # GET request line → target
    │   ├── url.py           # %XX decoding
    │   ├── mime_types.py    # extension → Content-Type
    │   └── response.py      # 200 (streamed file) / 404
    └── handlers/
        └── static.py        # per-connection pipeline

=============================================================================
QUICK START
=============================================================================

    from fileserver import FileServer, ServerConfig

    server = FileServer(ServerConfig(port=8080, root_dir="./public"))
    server.run()

    $ curl -i http://127.0.0.1:8080/index.html
    HTTP/1.1 200 OK
    Content-Type: text/html
    Content-Length: 1024
    Connection: close

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer
from .config import ServerConfig

__all__ = ["FileServer", "ServerConfig", "__version__"]
