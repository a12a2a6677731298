"""
Layer REST routes: list, create, inspect, activate, rename, delete, save.

Mounted under /api by main.py. Unknown layer ids surface as
LayerNotFoundError, which main.py maps to 404 ``{error}``.
"""
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..serializers.graph_serializer import serialize_graph, serialize_layer, serialize_layers
from ..state import AppState, get_app_state
from .api_routes import error_response

router = APIRouter()


class CreateLayerBody(BaseModel):
    companyName: str


class RenameLayerBody(BaseModel):
    name: str


# ── GET /layers ───────────────────────────────────────────────────────────────

@router.get("/layers")
async def list_layers(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return serialize_layers(state.registry)


# ── POST /layers ──────────────────────────────────────────────────────────────

@router.post("/layers", status_code=201)
async def create_layer(body: CreateLayerBody, state: AppState = Depends(get_app_state)):
    company_name = body.companyName.strip()
    if not company_name:
        return error_response(400, "Company name is required")
    # Keep unsaved edits of the layer being left.
    state.registry.save_current_layer()
    layer = state.registry.create_layer(company_name)
    return serialize_layer(layer)


# ── POST /layers/current/save ─────────────────────────────────────────────────

@router.post("/layers/current/save")
async def save_current_layer(state: AppState = Depends(get_app_state)):
    layer = state.registry.save_current_layer()
    if layer is None:
        return error_response(404, "No active layer")
    return serialize_layer(layer)


# ── GET /layers/:id ───────────────────────────────────────────────────────────

@router.get("/layers/{layer_id}")
async def get_layer(layer_id: str, state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    layer = state.registry.require_layer(layer_id)
    return serialize_layer(layer, include_graph=True)


# ── PUT /layers/:id/activate ──────────────────────────────────────────────────

@router.put("/layers/{layer_id}/activate")
async def activate_layer(layer_id: str, state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    layer = state.registry.switch_layer(layer_id)
    return {
        "layer": serialize_layer(layer),
        "graph": serialize_graph(state.store, state.registry.current_layer_id),
    }


# ── PATCH /layers/:id ─────────────────────────────────────────────────────────

@router.patch("/layers/{layer_id}")
async def rename_layer(layer_id: str, body: RenameLayerBody, state: AppState = Depends(get_app_state)):
    name = body.name.strip()
    if not name:
        return error_response(400, "Layer name is required")
    layer = state.registry.rename_layer(layer_id, name)
    return serialize_layer(layer)


# ── DELETE /layers/:id ────────────────────────────────────────────────────────

@router.delete("/layers/{layer_id}")
async def delete_layer(layer_id: str, state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    state.registry.delete_layer(layer_id)
    return serialize_layers(state.registry)
