# src/raptor/relay/server.py
"""Starlette ASGI application hosting a chaos session and the relay.

Usage:
    from raptor.relay.server import create_app, RaptorServer
    from raptor.chaos.config import RaptorConfig

    config = RaptorConfig()
    app = create_app(config)

    # Or use the server class for more control
    server = RaptorServer(config)
    app = server.app

Routes:
    GET  /api/health           liveness
    GET  /api/session          current SessionView
    POST /api/session/text     keystroke: {"text": "..."}
    POST /api/session/collapse manual collapse
    POST /api/session/reset    reset the session
    GET  /api/session/history  collapse records
    GET  /api/session/export   text as raptor-gen<N>.py download
    POST /api/execute          simulated run: {"code": "..."} (default: session text)
    WS   /ws                   event relay
"""

import json
from datetime import UTC, datetime
from typing import Any

import structlog
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from raptor.chaos.config import RaptorConfig
from raptor.chaos.engine import ChaosEngine
from raptor.execution.latency import LatencySimulator
from raptor.execution.stub import ExecutionStub
from raptor.relay.hub import RelayHub, translate_event

logger = structlog.get_logger(__name__)


class RaptorServer:
    """Main Raptor server class.

    Owns one ChaosEngine (one shared session per server process), the
    execution stub and the relay hub.
    """

    def __init__(
        self,
        config: RaptorConfig,
        *,
        engine: ChaosEngine | None = None,
        execution_stub: ExecutionStub | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            config: Server configuration.
            engine: Chaos engine for testing (default: engine built from config
                    on the system clock and the running event loop).
            execution_stub: Execution stub for testing (default: built from
                    config.execution_latency).
        """
        self._config = config
        self._engine = engine if engine is not None else ChaosEngine(config)
        self._execution_stub = (
            execution_stub if execution_stub is not None else ExecutionStub(LatencySimulator(config.execution_latency))
        )
        self._hub = RelayHub()
        self._app = self._create_app()

    def _create_app(self) -> Starlette:
        """Create the Starlette application with all routes."""
        routes = [
            Route("/api/health", self._health_endpoint, methods=["GET"]),
            Route("/api/session", self._session_endpoint, methods=["GET"]),
            Route("/api/session/text", self._text_endpoint, methods=["POST"]),
            Route("/api/session/collapse", self._collapse_endpoint, methods=["POST"]),
            Route("/api/session/reset", self._reset_endpoint, methods=["POST"]),
            Route("/api/session/history", self._history_endpoint, methods=["GET"]),
            Route("/api/session/export", self._export_endpoint, methods=["GET"]),
            Route("/api/execute", self._execute_endpoint, methods=["POST"]),
            WebSocketRoute("/ws", self._relay_endpoint),
        ]
        middleware = [
            Middleware(
                CORSMiddleware,
                allow_origins=list(self._config.cors_origins),
                allow_methods=["GET", "POST"],
                allow_headers=["*"],
            ),
        ]
        return Starlette(debug=False, routes=routes, middleware=middleware)

    @property
    def app(self) -> Starlette:
        """Get the Starlette ASGI application."""
        return self._app

    @property
    def engine(self) -> ChaosEngine:
        return self._engine

    @property
    def hub(self) -> RelayHub:
        return self._hub

    # === Endpoint handlers ===

    async def _health_endpoint(self, request: Request) -> JSONResponse:
        """Handle GET /api/health."""
        return JSONResponse(
            {
                "status": "ok",
                "message": "Raptor chaos engine is running",
                "timestamp": datetime.now(UTC).isoformat(),
                "relay_clients": self._hub.client_count,
            }
        )

    async def _session_endpoint(self, request: Request) -> JSONResponse:
        """Handle GET /api/session."""
        return JSONResponse(self._engine.view().to_dict())

    async def _text_endpoint(self, request: Request) -> JSONResponse:
        """Handle POST /api/session/text."""
        body = await _read_json_object(request)
        if body is None or not isinstance(body.get("text"), str):
            return _bad_request('Expected a JSON object with a string "text" field')
        self._engine.update_text(body["text"])
        return JSONResponse(self._engine.view().to_dict())

    async def _collapse_endpoint(self, request: Request) -> JSONResponse:
        """Handle POST /api/session/collapse."""
        triggered = self._engine.force_collapse()
        return JSONResponse({"triggered": triggered, "session": self._engine.view().to_dict()})

    async def _reset_endpoint(self, request: Request) -> JSONResponse:
        """Handle POST /api/session/reset."""
        self._engine.reset()
        return JSONResponse(self._engine.view().to_dict())

    async def _history_endpoint(self, request: Request) -> JSONResponse:
        """Handle GET /api/session/history."""
        return JSONResponse({"collapses": [record.to_dict() for record in self._engine.collapse_history]})

    async def _export_endpoint(self, request: Request) -> PlainTextResponse:
        """Handle GET /api/session/export."""
        view = self._engine.view()
        return PlainTextResponse(
            view.text,
            headers={"Content-Disposition": f'attachment; filename="{export_filename(view.generation)}"'},
        )

    async def _execute_endpoint(self, request: Request) -> JSONResponse:
        """Handle POST /api/execute."""
        body = await _read_json_object(request)
        if body is None:
            return _bad_request("Expected a JSON object")
        code = body.get("code", self._engine.view().text)
        if not isinstance(code, str):
            return _bad_request('"code" must be a string')
        result = await self._execution_stub.execute(code)
        return JSONResponse({"output": result.output, "delay_sec": result.delay_sec})

    async def _relay_endpoint(self, websocket: WebSocket) -> None:
        """Handle WS /ws: rebroadcast known events to every other client."""
        await self._hub.connect(websocket)
        try:
            while True:
                frame = await websocket.receive()
                if frame["type"] == "websocket.disconnect":
                    raise WebSocketDisconnect(frame.get("code", 1000))
                raw = frame.get("text")
                if raw is None:
                    logger.warning("Ignored binary relay frame", length=len(frame.get("bytes") or b""))
                    continue
                try:
                    message = json.loads(raw)
                except ValueError:
                    logger.warning("Ignored malformed relay message", length=len(raw))
                    continue
                outgoing = translate_event(message)
                if outgoing is None:
                    logger.warning("Ignored unknown relay event", event=_event_name(message))
                    continue
                await self._hub.broadcast(outgoing, exclude=websocket)
        except WebSocketDisconnect:
            pass
        finally:
            self._hub.disconnect(websocket)


def export_filename(generation: int) -> str:
    """Download name for the session text at a generation."""
    return f"raptor-gen{generation}.py"


async def _read_json_object(request: Request) -> dict[str, Any] | None:
    """Parse the request body as a JSON object, or None if it is not one.

    An empty body reads as an empty object.
    """
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=400)


def _event_name(message: Any) -> str | None:
    if isinstance(message, dict):
        event = message.get("event")
        return event if isinstance(event, str) else None
    return None


def create_app(config: RaptorConfig) -> Starlette:
    """Create a Starlette ASGI application from config.

    Convenience function for simple use cases. For more control
    (engine injection, hub access), use RaptorServer directly.
    """
    server = RaptorServer(config)
    server.app.state.server = server
    return server.app
