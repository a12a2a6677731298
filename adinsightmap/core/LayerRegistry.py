from __future__ import annotations

import copy
import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import Any, Callable, Dict, List, Optional

from .GraphPrimitives import CompanyNode, Edge, generate_id
from .GraphStore import GraphStore

logger = getLogger(__name__)


class LayerNotFoundError(KeyError):
    def __init__(self, layer_id: str):
        super().__init__(layer_id)
        self.layer_id = layer_id

    def __str__(self):
        return f"Layer '{self.layer_id}' not found"


@dataclass
class Layer:
    id: str
    name: str
    company_name: str
    created_at: int
    nodes: List[CompanyNode] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)


class LayerRegistry:
    """
    Owns every Layer record and tracks which one is current.

    The GraphStore holds the working copy of the current layer only. Every
    transition that moves the store onto another layer flushes the working
    copy first; nothing is persisted implicitly in between.
    """

    def __init__(self, store: GraphStore, on_change: Optional[Callable[[Dict[str, Any]], None]] = None) -> None:
        self.store = store
        self._layers: List[Layer] = []
        self.current_layer_id: Optional[str] = None
        self.on_change = on_change

    # ── Read access ──────────────────────────────────────────────────────────

    @property
    def layers(self) -> List[Layer]:
        return list(self._layers)

    def get_layer(self, layer_id: str) -> Optional[Layer]:
        for layer in self._layers:
            if layer.id == layer_id:
                return layer
        return None

    def require_layer(self, layer_id: str) -> Layer:
        layer = self.get_layer(layer_id)
        if layer is None:
            raise LayerNotFoundError(layer_id)
        return layer

    @property
    def current_layer(self) -> Optional[Layer]:
        if self.current_layer_id is None:
            return None
        return self.get_layer(self.current_layer_id)

    # ── Transitions ──────────────────────────────────────────────────────────

    def create_layer(self, company_name: str) -> Layer:
        """Append an empty layer, make it current and clear the working copy."""
        layer = Layer(
            id=generate_id(),
            name=f"{company_name} 분석",
            company_name=company_name,
            created_at=int(time.time() * 1000),
        )
        logger.info(f"Creating new layer {layer.id} for '{company_name}'")

        self._layers.append(layer)
        self.current_layer_id = layer.id
        self.store.clear()
        self._fire("LAYER_CREATED", layerId=layer.id, name=layer.name)
        return layer

    def ensure_layer(self, company_name: str) -> Layer:
        """Return the current layer, creating one for *company_name* if none is active."""
        current = self.current_layer
        if current is not None:
            return current
        return self.create_layer(company_name)

    def switch_layer(self, layer_id: str) -> Layer:
        """
        Flush the working copy into the current layer, then load *layer_id*.

        Raises LayerNotFoundError, with no side effects at all, when the
        target does not exist.
        """
        target = self.require_layer(layer_id)

        self.save_current_layer()
        self.current_layer_id = target.id
        self.store.load(target.nodes, target.edges)
        logger.info(f"Switched to layer {target.id} ('{target.name}')")
        self._fire("LAYER_SWITCHED", layerId=target.id)
        return target

    def delete_layer(self, layer_id: str) -> None:
        """
        Remove a layer. Deleting the current layer moves the registry onto the
        first remaining layer (or none) and reloads the store from it.
        Deleting any other layer leaves the current layer and store alone.
        """
        layer = self.require_layer(layer_id)
        self._layers.remove(layer)
        logger.info(f"Deleted layer {layer_id}")

        if layer_id == self.current_layer_id:
            if self._layers:
                successor = self._layers[0]
                self.current_layer_id = successor.id
                self.store.load(successor.nodes, successor.edges)
            else:
                self.current_layer_id = None
                self.store.clear()

        self._fire("LAYER_DELETED", layerId=layer_id, currentLayerId=self.current_layer_id)

    def rename_layer(self, layer_id: str, name: str) -> Layer:
        layer = self.require_layer(layer_id)
        layer.name = name
        self._fire("LAYER_RENAMED", layerId=layer_id, name=name)
        return layer

    def save_current_layer(self) -> Optional[Layer]:
        """Copy the working graph into the current layer. No-op without one."""
        layer = self.current_layer
        if layer is None:
            return None
        layer.nodes, layer.edges = self.store.snapshot()
        logger.debug(f"Saved layer {layer.id}: {len(layer.nodes)} nodes, {len(layer.edges)} edges")
        self._fire("LAYER_SAVED", layerId=layer.id)
        return layer

    def update_snapshot(self, layer_id: str, nodes: List[CompanyNode], edges: List[Edge]) -> bool:
        """
        Replace the stored snapshot of a layer that is not the working copy.

        Returns False if the layer is gone.
        """
        layer = self.get_layer(layer_id)
        if layer is None:
            return False
        layer.nodes = copy.deepcopy(list(nodes))
        layer.edges = list(edges)
        logger.debug(f"Replaced snapshot of layer {layer_id}: {len(layer.nodes)} nodes, {len(layer.edges)} edges")
        self._fire("LAYER_SAVED", layerId=layer_id)
        return True

    def update_snapshot_node(self, layer_id: str, node_id: str, **changes) -> bool:
        """
        Merge *changes* into a node of a stored (non-working) snapshot.

        Used when an async result lands after the user switched away from the
        layer it belongs to. Returns False if the layer or node is gone.
        """
        layer = self.get_layer(layer_id)
        if layer is None:
            return False
        for index, node in enumerate(layer.nodes):
            if node.id == node_id:
                layer.nodes[index] = copy.deepcopy(node.with_data(**changes))
                self._fire("LAYER_NODE_UPDATED", layerId=layer_id, nodeId=node_id)
                return True
        return False

    def _fire(self, event_type: str, **payload) -> None:
        if self.on_change is not None:
            self.on_change({"type": event_type, **payload})
