"""Starlette app: status routes + the playback WebSocket."""
import asyncio
import contextlib
import json
import logging
import uuid

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect, WebSocketState

from ..config import ALLOWED_ORIGINS
from ..engine import RadioEngine

logger = logging.getLogger(__name__)

# Policy violation
WS_ORIGIN_REJECTED = 1008


def origin_allowed(origin, allowed: list[str]) -> bool:
    """Browsers always send Origin; anything without one is a non-browser client."""
    if origin is None:
        return True
    return "*" in allowed or origin in allowed


def create_app(engine: RadioEngine, allowed_origins: list[str] = ALLOWED_ORIGINS) -> Starlette:

    # ── Status ───────────────────────────────────────────────────────────────

    async def status(request):
        return JSONResponse(engine.get_status())

    async def health(request):
        return JSONResponse(engine.get_health())

    # ── WebSocket ────────────────────────────────────────────────────────────

    async def websocket_endpoint(websocket: WebSocket):
        origin = websocket.headers.get("origin")
        if not origin_allowed(origin, allowed_origins):
            logger.warning("WS rejected origin: %s", origin)
            await websocket.close(code=WS_ORIGIN_REJECTED)
            return

        await websocket.accept()
        client_id = str(uuid.uuid4())
        # Queues the initial snapshot before any broadcast can land
        queue = engine.on_connect(client_id)
        logger.info("New client connected: %s", client_id)

        # Two tasks: one reads from client, one writes from queue
        async def _reader():
            try:
                while True:
                    message = await websocket.receive()
                    if message["type"] == "websocket.disconnect":
                        return
                    text = message.get("text")
                    if text is None:
                        logger.warning("Ignoring binary WS frame from %s", client_id)
                        continue
                    _handle_ws_message(client_id, text)
            except WebSocketDisconnect:
                pass
            except Exception as e:
                logger.error("WS reader error (%s): %s", client_id, e)

        async def _writer():
            try:
                while True:
                    event, data = await queue.get()
                    await websocket.send_json({"type": event, "data": data})
            except Exception as e:
                logger.debug("WS writer stopped (%s): %s", client_id, e)

        reader_task = asyncio.create_task(_reader())
        writer_task = asyncio.create_task(_writer())

        try:
            done, pending = await asyncio.wait(
                [reader_task, writer_task],
                return_when=asyncio.FIRST_COMPLETED,
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
        finally:
            engine.on_disconnect(client_id)
            await _close_quietly(websocket, client_id)
            logger.info("Client disconnected: %s", client_id)

    async def _close_quietly(websocket: WebSocket, client_id: str):
        """Close our side if the client is still there (reader or writer died on an error)."""
        if (websocket.client_state != WebSocketState.CONNECTED
                or websocket.application_state != WebSocketState.CONNECTED):
            return
        try:
            await websocket.close()
        except RuntimeError as e:
            logger.debug("WS close failed (%s): %s", client_id, e)

    def _handle_ws_message(client_id: str, text: str):
        """Route incoming WebSocket messages to engine commands."""
        try:
            data = json.loads(text)
        except ValueError:
            logger.warning("Malformed WS message from %s", client_id)
            return
        if not isinstance(data, dict):
            logger.warning("Malformed WS message from %s", client_id)
            return

        msg_type = data.get("type", "")

        if msg_type == "togglePlay":
            engine.toggle_play()
        else:
            logger.warning("Unknown WS message type: %s", msg_type)

    # ── App ──────────────────────────────────────────────────────────────────

    @contextlib.asynccontextmanager
    async def lifespan(app):
        engine.start()
        try:
            yield
        finally:
            await engine.stop()
            logger.info("Radio engine stopped")

    routes = [
        Route("/status", status),
        Route("/api/health", health),
        WebSocketRoute("/ws", websocket_endpoint),
    ]

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_methods=["GET", "POST"],
        ),
    ]

    return Starlette(routes=routes, middleware=middleware, lifespan=lifespan)
