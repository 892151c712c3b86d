"""
=============================================================================
EXSERVER - Single-Threaded Static Responder
=============================================================================

A minimal TCP server that watches all of its sockets with one readiness
loop, reads the method token of each request, answers with a fixed header
block plus the contents of a static file, and closes the connection.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    exserver/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m exserver)
    ├── server.py            # ExServer orchestrator
    ├── config.py            # ServerConfig dataclass
    ├── core/
    │   ├── listener.py      # Listening socket setup
    │   ├── interest_set.py  # Watched descriptors (selectors)
    │   ├── connection.py    # One accepted client
    │   └── event_loop.py    # Accept/serve readiness loop
    ├── http/
    │   ├── request.py       # Method token extraction
    │   └── response.py      # Fixed response header block
    └── handlers/
        └── static.py        # Bounded static resource reads

=============================================================================
QUICK START
=============================================================================

    from exserver import ExServer, ServerConfig

    server = ExServer(ServerConfig(port="8080", resource_path="index.html"))
    server.run()

=============================================================================
"""

__version__ = "0.1.0"

from .server import ExServer
from .config import ServerConfig

__all__ = ["ExServer", "ServerConfig", "__version__"]
