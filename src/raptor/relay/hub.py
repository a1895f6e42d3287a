# src/raptor/relay/hub.py
"""WebSocket relay: rebroadcast opaque editor events to the other clients.

Incoming ``{"event": "code-update", "data": ...}`` goes out to every other
client as ``{"event": "code-updated", "data": ...}``; ``collapse-event``
goes out as ``collapse-occurred``. The data payload is never inspected.
"""

from __future__ import annotations

from typing import Any

import structlog
from starlette.websockets import WebSocket, WebSocketDisconnect

logger = structlog.get_logger(__name__)

# Incoming event name -> rebroadcast event name.
RELAY_EVENTS: dict[str, str] = {
    "code-update": "code-updated",
    "collapse-event": "collapse-occurred",
}


def translate_event(message: Any) -> dict[str, Any] | None:
    """Map an incoming relay message to its rebroadcast form.

    Returns:
        The outgoing message, or None if the message is not a known event.
    """
    if not isinstance(message, dict):
        return None
    event = message.get("event")
    if not isinstance(event, str) or event not in RELAY_EVENTS:
        return None
    return {"event": RELAY_EVENTS[event], "data": message.get("data")}


class RelayHub:
    """Tracks connected relay clients and fans messages out to them.

    All methods run on the server's event loop, so the client set needs no
    locking.
    """

    def __init__(self) -> None:
        self._clients: set[WebSocket] = set()

    @property
    def client_count(self) -> int:
        return len(self._clients)

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self._clients.add(websocket)
        logger.info("Relay client connected", clients=len(self._clients))

    def disconnect(self, websocket: WebSocket) -> None:
        self._clients.discard(websocket)
        logger.info("Relay client disconnected", clients=len(self._clients))

    async def broadcast(self, message: dict[str, Any], *, exclude: WebSocket | None = None) -> int:
        """Send message to every client except exclude.

        Clients that fail to receive are dropped from the hub.

        Returns:
            Number of clients the message was delivered to.
        """
        delivered = 0
        for client in list(self._clients):
            if client is exclude:
                continue
            try:
                await client.send_json(message)
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.warning("Dropping unreachable relay client", error=str(e), error_type=type(e).__name__)
                self._clients.discard(client)
                continue
            delivered += 1
        return delivered
