"""
In-memory graph model: company nodes, edges, the working GraphStore and the
LayerRegistry that snapshots it per analysis session.
"""

from .Types import LayoutDirection, NodeKind, Platform
from .GraphPrimitives import CompanyNode, Edge, InsightBundle, NodeData, edge_id, generate_id
from .GraphStore import GraphStore
from .LayerRegistry import Layer, LayerNotFoundError, LayerRegistry
from .Layout import get_layouted_elements

__all__ = [
    "CompanyNode",
    "Edge",
    "GraphStore",
    "InsightBundle",
    "Layer",
    "LayerNotFoundError",
    "LayerRegistry",
    "LayoutDirection",
    "NodeData",
    "NodeKind",
    "Platform",
    "edge_id",
    "generate_id",
    "get_layouted_elements",
]
