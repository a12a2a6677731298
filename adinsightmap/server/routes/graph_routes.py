"""
Working-graph REST routes: the canvas view of the current layer.

Mounted under /api by main.py. Every structural change made here is saved to
the current layer straight away, as the canvas does after a drag or connect.
"""
from __future__ import annotations

from logging import getLogger
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from adinsightmap.core.Layout import get_layouted_elements
from adinsightmap.core.Types import LayoutDirection

from ..analysis_workflow import AnalysisResult
from ..serializers.graph_serializer import serialize_edge, serialize_graph, serialize_layer, serialize_node
from ..state import AppState, get_app_state
from .api_routes import error_response

logger = getLogger(__name__)

router = APIRouter()


class AnalyzeCompanyBody(BaseModel):
    companyName: str


class ConnectBody(BaseModel):
    source: str
    target: str


class SelectionBody(BaseModel):
    nodeId: Optional[str] = None


class PositionBody(BaseModel):
    x: float
    y: float


class LayoutBody(BaseModel):
    direction: str = LayoutDirection.TOP_BOTTOM.value


def _graph(state: AppState) -> Dict[str, Any]:
    return serialize_graph(state.store, state.registry.current_layer_id)


# ── GET /graph ────────────────────────────────────────────────────────────────

@router.get("/graph")
async def get_graph(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    return _graph(state)


# ── POST /graph/analyze ───────────────────────────────────────────────────────

@router.post("/graph/analyze")
async def analyze_company(body: AnalyzeCompanyBody, state: AppState = Depends(get_app_state)):
    if not body.companyName.strip():
        return error_response(400, "Company name is required")
    try:
        result: AnalysisResult = await state.workflow.run(body.companyName)
    except ValueError as exc:
        return error_response(400, str(exc))
    except Exception as exc:
        logger.error(f"Analysis failed for '{body.companyName}': {exc}")
        return error_response(500, "Failed to analyze competitors", str(exc) or "Unknown error")

    return {
        "layer": serialize_layer(result.layer),
        "competitors": [c.to_dict() for c in result.competitors],
        "graph": _graph(state),
    }


# ── POST /graph/edges ─────────────────────────────────────────────────────────

@router.post("/graph/edges", status_code=201)
async def connect_nodes(body: ConnectBody, state: AppState = Depends(get_app_state)):
    for node_id in (body.source, body.target):
        if state.store.get_node(node_id) is None:
            return error_response(404, f"Node '{node_id}' not found")
    edge = state.store.connect(body.source, body.target)
    state.registry.save_current_layer()
    return serialize_edge(edge)


# ── PUT /graph/selection ──────────────────────────────────────────────────────

@router.put("/graph/selection")
async def select_node(body: SelectionBody, state: AppState = Depends(get_app_state)):
    if body.nodeId is not None and state.store.get_node(body.nodeId) is None:
        return error_response(404, f"Node '{body.nodeId}' not found")
    enriched = await state.orchestrator.select(body.nodeId)
    node = state.store.selected_node
    return {
        "selectedNodeId": state.store.selected_node_id,
        "node": serialize_node(node) if node is not None else None,
        "enriched": enriched,
    }


# ── PUT /graph/nodes/:id/position ─────────────────────────────────────────────

@router.put("/graph/nodes/{node_id}/position")
async def move_node(node_id: str, body: PositionBody, state: AppState = Depends(get_app_state)):
    node = state.store.move_node(node_id, body.x, body.y)
    if node is None:
        return error_response(404, f"Node '{node_id}' not found")
    state.registry.save_current_layer()
    return serialize_node(node)


# ── POST /graph/nodes/:id/enrich ──────────────────────────────────────────────

@router.post("/graph/nodes/{node_id}/enrich")
async def enrich_node(node_id: str, state: AppState = Depends(get_app_state)):
    if state.store.get_node(node_id) is None:
        return error_response(404, f"Node '{node_id}' not found")
    enriched = await state.orchestrator.enrich(node_id)
    node = state.store.get_node(node_id)
    return {
        "node": serialize_node(node) if node is not None else None,
        "enriched": enriched,
    }


# ── POST /graph/layout ────────────────────────────────────────────────────────

@router.post("/graph/layout")
async def relayout(body: LayoutBody, state: AppState = Depends(get_app_state)):
    try:
        direction = LayoutDirection.parse(body.direction)
    except ValueError as exc:
        return error_response(400, str(exc))
    state.store.apply_layout(get_layouted_elements, direction)
    state.registry.save_current_layer()
    return _graph(state)
