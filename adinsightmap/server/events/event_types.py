"""
Store change events as they go over the wire.

All events are plain dicts so they can be emitted over Socket.IO as-is.
"""
from typing import List, Literal, Optional, TypedDict, Union


class GraphReplacedEvent(TypedDict):
    type: Literal["GRAPH_REPLACED"]
    nodeCount: int
    edgeCount: int
    ts: int


class GraphLoadedEvent(TypedDict):
    type: Literal["GRAPH_LOADED"]
    nodeCount: int
    edgeCount: int
    ts: int


class GraphClearedEvent(TypedDict):
    type: Literal["GRAPH_CLEARED"]
    ts: int


class NodesSetEvent(TypedDict):
    type: Literal["NODES_SET"]
    nodeCount: int
    ts: int


class EdgesSetEvent(TypedDict):
    type: Literal["EDGES_SET"]
    edgeCount: int
    ts: int


class NodeAddedEvent(TypedDict):
    type: Literal["NODE_ADDED"]
    nodeId: str
    ts: int


class EdgeAddedEvent(TypedDict):
    type: Literal["EDGE_ADDED"]
    edgeId: str
    source: str
    target: str
    ts: int


class NodeUpdatedEvent(TypedDict):
    type: Literal["NODE_UPDATED"]
    nodeId: str
    fields: List[str]
    ts: int


class NodeMovedEvent(TypedDict):
    type: Literal["NODE_MOVED"]
    nodeId: str
    x: float
    y: float
    ts: int


class SelectionChangedEvent(TypedDict):
    type: Literal["SELECTION_CHANGED"]
    nodeId: Optional[str]
    ts: int


class LayoutChangedEvent(TypedDict):
    type: Literal["LAYOUT_CHANGED"]
    direction: str
    ts: int


class LayerCreatedEvent(TypedDict):
    type: Literal["LAYER_CREATED"]
    layerId: str
    name: str
    ts: int


class LayerSwitchedEvent(TypedDict):
    type: Literal["LAYER_SWITCHED"]
    layerId: str
    ts: int


class LayerDeletedEvent(TypedDict):
    type: Literal["LAYER_DELETED"]
    layerId: str
    currentLayerId: Optional[str]
    ts: int


class LayerRenamedEvent(TypedDict):
    type: Literal["LAYER_RENAMED"]
    layerId: str
    name: str
    ts: int


class LayerSavedEvent(TypedDict):
    type: Literal["LAYER_SAVED"]
    layerId: str
    ts: int


class LayerNodeUpdatedEvent(TypedDict):
    type: Literal["LAYER_NODE_UPDATED"]
    layerId: str
    nodeId: str
    ts: int


StoreEvent = Union[
    GraphReplacedEvent,
    GraphLoadedEvent,
    GraphClearedEvent,
    NodesSetEvent,
    EdgesSetEvent,
    NodeAddedEvent,
    EdgeAddedEvent,
    NodeUpdatedEvent,
    NodeMovedEvent,
    SelectionChangedEvent,
    LayoutChangedEvent,
    LayerCreatedEvent,
    LayerSwitchedEvent,
    LayerDeletedEvent,
    LayerRenamedEvent,
    LayerSavedEvent,
    LayerNodeUpdatedEvent,
]
