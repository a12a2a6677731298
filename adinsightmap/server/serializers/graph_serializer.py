"""
Graph serializer: CompanyNode / Edge / Layer objects to JSON-safe dicts.

The wire shape is the one the React Flow canvas consumes, so keys are
camelCase.

SerializedNode keys: id, type, position, data{label, type, images,
                     insights, isAnalyzing}
SerializedEdge keys: id, source, target, type, animated
SerializedLayer keys: id, name, companyName, createdAt, nodeCount, edgeCount
                      (plus nodes, edges when requested)
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from adinsightmap.core.GraphPrimitives import CompanyNode, Edge
from adinsightmap.core.GraphStore import GraphStore
from adinsightmap.core.LayerRegistry import Layer, LayerRegistry


def serialize_node(node: CompanyNode) -> Dict[str, Any]:
    data = node.data
    return {
        "id": node.id,
        "type": node.type,
        "position": {"x": node.position["x"], "y": node.position["y"]},
        "data": {
            "label": data.label,
            "type": data.kind.value,
            "images": list(data.images),
            "insights": data.insights.to_dict() if data.insights is not None else None,
            "isAnalyzing": data.is_analyzing,
        },
    }


def serialize_edge(edge: Edge) -> Dict[str, Any]:
    return {
        "id": edge.id,
        "source": edge.source,
        "target": edge.target,
        "type": edge.type,
        "animated": edge.animated,
    }


def serialize_layer(layer: Layer, include_graph: bool = False) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "id": layer.id,
        "name": layer.name,
        "companyName": layer.company_name,
        "createdAt": layer.created_at,
        "nodeCount": len(layer.nodes),
        "edgeCount": len(layer.edges),
    }
    if include_graph:
        result["nodes"] = [serialize_node(n) for n in layer.nodes]
        result["edges"] = [serialize_edge(e) for e in layer.edges]
    return result


def serialize_layers(registry: LayerRegistry) -> Dict[str, Any]:
    return {
        "layers": [serialize_layer(layer) for layer in registry.layers],
        "currentLayerId": registry.current_layer_id,
    }


def serialize_graph(store: GraphStore, current_layer_id: Optional[str] = None) -> Dict[str, Any]:
    """The working copy, as the canvas renders it."""
    nodes: List[Dict[str, Any]] = [serialize_node(n) for n in store.nodes]
    edges: List[Dict[str, Any]] = [serialize_edge(e) for e in store.edges]
    return {
        "layerId": current_layer_id,
        "nodes": nodes,
        "edges": edges,
        "selectedNodeId": store.selected_node_id,
    }
