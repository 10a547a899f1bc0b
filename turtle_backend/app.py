# turtle_backend/app.py
import asyncio
import json
import logging
from typing import Any, Dict

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from . import config as C
from .api.deps import get_shared
from .api.routes import router as api_router
from .store.path_store import PathStore

logging.basicConfig(level=C.LOG_LEVEL, format=C.LOG_FORMAT)
logger = logging.getLogger(__name__)

app = FastAPI(title="Turtle Mission Dashboard")

# CORS for both HTTP and WS (allow all origins; credentials False to keep wildcard)
app.add_middleware(
    CORSMiddleware,
    allow_origins=C.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


# ---------------------- Lifecycle ----------------------
@app.on_event("startup")
async def on_startup():
    shared = get_shared()
    if shared.store is None:
        shared.attach_store(PathStore(C.PATH_DB))


@app.on_event("shutdown")
async def on_shutdown():
    shared = get_shared()
    shared.sessions.shutdown()
    if shared.store is not None:
        shared.store.close()


# ---------------------- WS: Turtle control ------------
async def _pump(ws: WebSocket, queue: "asyncio.Queue[Dict[str, Any]]"):
    """Drain one client's outbound queue onto its socket, in order."""
    while True:
        msg = await queue.get()
        try:
            await ws.send_text(json.dumps(msg))
        except (WebSocketDisconnect, RuntimeError) as e:
            logger.debug("[ws] writer stopped: %s", e)
            return


@app.websocket("/ws/turtle")
async def ws_turtle(ws: WebSocket):
    """
    One session per connection. Inbound frames are handled one at a time in
    arrival order; outbound frames go through the session manager's queue.
    """
    await ws.accept()
    sessions = get_shared().sessions
    session, queue = sessions.connect()
    writer = asyncio.create_task(_pump(ws, queue))

    try:
        while True:
            msg = await ws.receive()
            if msg["type"] == "websocket.disconnect":
                break
            raw = msg.get("text")
            if raw is None:
                # binary frames carry no command
                logger.warning("[ws] %s sent a non-text frame", session.id)
                session.notify_error("Malformed command")
                continue
            await session.handle(raw)
    except WebSocketDisconnect:
        pass
    finally:
        sessions.disconnect(session.id)
        writer.cancel()
        await asyncio.gather(writer, return_exceptions=True)
