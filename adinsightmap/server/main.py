"""
FastAPI + Socket.IO server.

Start with:
    python -m adinsightmap.server.main

Or via uvicorn directly:
    uvicorn adinsightmap.server.main:create_socket_app_from_env --factory --port 3001 --reload
"""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from adinsightmap.config import Settings
from adinsightmap.core.LayerRegistry import LayerNotFoundError

from .events.socket_server import create_socket_app
from .routes import api_router, graph_router, layer_router
from .state import AppState, build_app_state

LOG_FORMAT = '[%(asctime)s]:%(name)s:(%(levelname)s) - %(message)s'


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)


def describe_validation_errors(exc: RequestValidationError) -> str:
    """``body.companyName: Field required; ...``"""
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def create_app(settings: Optional[Settings] = None, state: Optional[AppState] = None) -> FastAPI:
    """Build the FastAPI application around one AppState."""
    if state is None:
        state = build_app_state(settings)
    settings = state.settings

    app = FastAPI(title="AdInsightMap API", version="0.1.0")
    app.state.app_state = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix="/api")
    app.include_router(layer_router, prefix="/api")
    app.include_router(graph_router, prefix="/api")

    @app.exception_handler(LayerNotFoundError)
    async def layer_not_found(request: Request, exc: LayerNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={
            "error": "Invalid request body",
            "details": describe_validation_errors(exc),
        })

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


def create_socket_app_from_env():
    """uvicorn factory: settings from the environment, Socket.IO wrapped around the API."""
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    app = create_app(settings)
    # socket_app is the top-level ASGI app passed to uvicorn.
    # Socket.IO connections are handled at the root; all other requests are
    # forwarded to the inner FastAPI app.
    return create_socket_app(app, app.state.app_state.emitter, settings.cors_origins)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "adinsightmap.server.main:create_socket_app_from_env",
        factory=True,
        host="0.0.0.0",
        port=3001,
        reload=True,
    )
