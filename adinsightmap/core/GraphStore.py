from __future__ import annotations

import copy
from logging import getLogger
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .GraphPrimitives import CompanyNode, Edge
from .Types import LayoutDirection

logger = getLogger(__name__)

ChangeHook = Callable[[Dict[str, Any]], None]
LayoutFunction = Callable[[List[CompanyNode], List[Edge], LayoutDirection], List[CompanyNode]]


class GraphStore:
    """
    Working copy of the current layer's nodes and edges plus the selected node.

    The store is the authoritative live copy of the current layer; the
    LayerRegistry snapshot for that layer is only refreshed on save.

    Nodes are treated as immutable values: update_node swaps in a new
    CompanyNode rather than editing the old one, so a snapshot that still
    references an old node never observes later updates.

    Duplicate edges: adding an edge whose id already exists overwrites the
    stored entry in place. The edge list never holds two entries with the
    same id.
    """

    def __init__(self, on_change: Optional[ChangeHook] = None) -> None:
        self._nodes: List[CompanyNode] = []
        self._edges: List[Edge] = []
        self.selected_node_id: Optional[str] = None
        self.on_change = on_change

    # ── Read access ──────────────────────────────────────────────────────────

    @property
    def nodes(self) -> List[CompanyNode]:
        return list(self._nodes)

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    def get_node(self, node_id: str) -> Optional[CompanyNode]:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        for edge in self._edges:
            if edge.id == edge_id:
                return edge
        return None

    @property
    def selected_node(self) -> Optional[CompanyNode]:
        if self.selected_node_id is None:
            return None
        return self.get_node(self.selected_node_id)

    def is_empty(self) -> bool:
        return not self._nodes and not self._edges

    def snapshot(self) -> Tuple[List[CompanyNode], List[Edge]]:
        """Deep copy of (nodes, edges), safe to keep after further mutation."""
        return copy.deepcopy(self._nodes), list(self._edges)

    # ── Bulk mutation ────────────────────────────────────────────────────────

    def replace_all(self, nodes: Iterable[CompanyNode], edges: Iterable[Edge]) -> None:
        self._nodes = list(nodes)
        self._edges = []
        for edge in edges:
            self._insert_edge(edge)
        logger.debug(f"Replaced graph: {len(self._nodes)} nodes, {len(self._edges)} edges")
        self._fire("GRAPH_REPLACED", nodeCount=len(self._nodes), edgeCount=len(self._edges))

    def set_nodes(self, nodes: Iterable[CompanyNode]) -> None:
        self._nodes = list(nodes)
        logger.debug(f"Setting nodes in store: {len(self._nodes)} nodes")
        self._fire("NODES_SET", nodeCount=len(self._nodes))

    def set_edges(self, edges: Iterable[Edge]) -> None:
        self._edges = []
        for edge in edges:
            self._insert_edge(edge)
        logger.debug(f"Setting edges in store: {len(self._edges)} edges")
        self._fire("EDGES_SET", edgeCount=len(self._edges))

    def clear(self) -> None:
        self._nodes = []
        self._edges = []
        self.selected_node_id = None
        self._fire("GRAPH_CLEARED")

    def load(self, nodes: Iterable[CompanyNode], edges: Iterable[Edge]) -> None:
        """Load a layer snapshot as the working copy and drop the selection."""
        self._nodes = copy.deepcopy(list(nodes))
        self._edges = list(edges)
        self.selected_node_id = None
        self._fire("GRAPH_LOADED", nodeCount=len(self._nodes), edgeCount=len(self._edges))

    # ── Node / edge mutation ─────────────────────────────────────────────────

    def add_node(self, node: CompanyNode) -> None:
        # Callers supply unique ids; no duplicate check here.
        self._nodes.append(node)
        self._fire("NODE_ADDED", nodeId=node.id)

    def add_edge(self, edge: Edge) -> Edge:
        self._insert_edge(edge)
        self._fire("EDGE_ADDED", edgeId=edge.id, source=edge.source, target=edge.target)
        return edge

    def connect(self, source: str, target: str) -> Edge:
        """Create (or overwrite) the edge source -> target."""
        return self.add_edge(Edge(source, target))

    def update_node(self, node_id: str, **changes) -> Optional[CompanyNode]:
        """
        Merge *changes* into the node's data.

        Returns the updated node, or None (and changes nothing) when no node
        has *node_id*.
        """
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                updated = node.with_data(**changes)
                self._nodes[index] = updated
                self._fire("NODE_UPDATED", nodeId=node_id, fields=sorted(changes))
                return updated
        logger.debug(f"update_node: no node '{node_id}' in working copy")
        return None

    def move_node(self, node_id: str, x: float, y: float) -> Optional[CompanyNode]:
        """Set a node's position (a canvas drag). Returns None for unknown ids."""
        for index, node in enumerate(self._nodes):
            if node.id == node_id:
                moved = node.with_position(x, y)
                self._nodes[index] = moved
                self._fire("NODE_MOVED", nodeId=node_id, x=x, y=y)
                return moved
        return None

    def select(self, node_id: Optional[str]) -> None:
        self.selected_node_id = node_id
        self._fire("SELECTION_CHANGED", nodeId=node_id)

    def apply_layout(
        self,
        layout_fn: LayoutFunction,
        direction: LayoutDirection = LayoutDirection.TOP_BOTTOM,
    ) -> None:
        self._nodes = list(layout_fn(self._nodes, self._edges, direction))
        self._fire("LAYOUT_CHANGED", direction=direction.value)

    # ── Internals ────────────────────────────────────────────────────────────

    def _insert_edge(self, edge: Edge) -> None:
        for index, existing in enumerate(self._edges):
            if existing.id == edge.id:
                self._edges[index] = edge
                return
        self._edges.append(edge)

    def _fire(self, event_type: str, **payload) -> None:
        if self.on_change is not None:
            self.on_change({"type": event_type, **payload})
