"""
Socket.IO layer: pushes every store change event to connected clients.

Uses python-socketio in ASGI mode so it can wrap FastAPI.
``create_socket_app(fastapi_app, emitter)`` returns the composite ASGI
application to pass to uvicorn.
"""
from __future__ import annotations

import asyncio
from logging import getLogger
from typing import Any, List, Union

import socketio

from .event_emitter import EventEmitter
from .event_types import StoreEvent

logger = getLogger(__name__)

STORE_EVENT = "store"


def create_socket_server(cors_origins: Union[str, List[str]] = "*") -> socketio.AsyncServer:
    sio = socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=cors_origins,
        logger=False,
        engineio_logger=False,
    )

    @sio.event
    async def connect(sid: str, environ: dict) -> None:
        logger.debug(f"Socket client connected: {sid}")

    @sio.event
    async def disconnect(sid: str) -> None:
        logger.debug(f"Socket client disconnected: {sid}")

    return sio


def forward_events(sio: socketio.AsyncServer, emitter: EventEmitter) -> None:
    """Subscribe *sio* to *emitter*: each event becomes a ``store`` emit."""

    def _on_event(event: StoreEvent) -> None:
        # Called synchronously by EventEmitter.fire(); schedule the async emit.
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop, not broadcasting {event.get('type')}")
            return
        loop.create_task(sio.emit(STORE_EVENT, event))

    emitter.on_event(_on_event)


def create_socket_app(
    fastapi_app: Any,
    emitter: EventEmitter,
    cors_origins: Union[str, List[str]] = "*",
) -> socketio.ASGIApp:
    """Wrap *fastapi_app* inside a Socket.IO ASGI application."""
    sio = create_socket_server(cors_origins)
    forward_events(sio, emitter)
    return socketio.ASGIApp(sio, other_asgi_app=fastapi_app)
