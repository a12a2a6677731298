from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, NamedTuple, Optional

import time
import uuid

from .Types import NodeKind


def generate_id(prefix: str = "node") -> str:
    """Time-ordered opaque id, e.g. ``node_1760000000000_3f9a2c1``."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:7]}"


def edge_id(source: str, target: str) -> str:
    # Must stay a pure function of the pair: reconnecting the same endpoints
    # yields the same id.
    return f"edge_{source}_{target}"


@dataclass(frozen=True)
class InsightBundle:
    brand: str
    visual: str
    sales: str

    FIELDS = ("brand", "visual", "sales")

    @classmethod
    def from_dict(cls, payload: Any) -> 'InsightBundle':
        """
        Build a bundle from a decoded JSON object.

        Partial bundles are never accepted: every one of the three fields must
        be present and be a string, otherwise ValueError is raised.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Insight payload must be an object, got {type(payload).__name__}")
        missing = [name for name in cls.FIELDS if not isinstance(payload.get(name), str)]
        if missing:
            raise ValueError(f"Insight payload missing fields: {', '.join(missing)}")
        return cls(brand=payload["brand"], visual=payload["visual"], sales=payload["sales"])

    def to_dict(self) -> Dict[str, str]:
        return {"brand": self.brand, "visual": self.visual, "sales": self.sales}


@dataclass
class NodeData:
    label: str
    kind: NodeKind
    images: List[str] = field(default_factory=list)
    insights: Optional[InsightBundle] = None
    is_analyzing: bool = False  # volatile, set while an enrichment request is in flight


@dataclass
class CompanyNode:
    id: str
    data: NodeData
    position: Dict[str, float] = field(default_factory=lambda: {"x": 0.0, "y": 0.0})
    type: str = "company"

    @classmethod
    def create(cls, label: str, kind: NodeKind, images: Optional[List[str]] = None,
               node_id: Optional[str] = None) -> 'CompanyNode':
        return cls(
            id=node_id or generate_id(),
            data=NodeData(label=label, kind=kind, images=list(images or [])),
        )

    @property
    def is_root(self) -> bool:
        return self.data.kind == NodeKind.ROOT

    def with_data(self, **changes) -> 'CompanyNode':
        """Return a copy whose data has *changes* merged in."""
        unknown = set(changes) - set(NodeData.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown node data fields: {sorted(unknown)}")
        return replace(self, data=replace(self.data, **changes))

    def with_position(self, x: float, y: float) -> 'CompanyNode':
        return replace(self, position={"x": x, "y": y})


class Edge(NamedTuple):
    source: str
    target: str

    # Render hints carried through to the UI; not part of the edge identity.
    type: str = "smoothstep"
    animated: bool = True

    @property
    def id(self) -> str:
        return edge_id(self.source, self.target)

    def __repr__(self):
        return f"Edge({self.source} -> {self.target})"
