"""HTTP session API and WebSocket relay for the Raptor editor.

The server hosts one chaos session per process, exposes it over a small
JSON API, and relays opaque editor events between connected clients.

Usage:
    # CLI - Start server
    raptor serve --preset=gentle --port=5000
"""

from raptor.relay.hub import RELAY_EVENTS, RelayHub, translate_event
from raptor.relay.server import RaptorServer, create_app, export_filename

__all__ = [
    "RELAY_EVENTS",
    "RaptorServer",
    "RelayHub",
    "create_app",
    "export_filename",
    "translate_event",
]
