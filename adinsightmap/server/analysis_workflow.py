"""
"Analyze company" flow: competitors -> layer -> images -> layout -> commit.

Nothing touches the store until the competitor list is known, so a failed
analysis leaves the current layer and working copy exactly as they were.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import Callable, List, Protocol

from adinsightmap.core.GraphPrimitives import CompanyNode, Edge, generate_id
from adinsightmap.core.GraphStore import GraphStore
from adinsightmap.core.LayerRegistry import Layer, LayerRegistry
from adinsightmap.core.Layout import get_layouted_elements
from adinsightmap.core.Types import LayoutDirection, NodeKind
from adinsightmap.scrapers.ad_fetch_chain import AdFetchChain

from .llm_client import AnalysisError, Competitor

logger = getLogger(__name__)


class CompetitorAnalyzer(Protocol):
    async def analyze_competitors(self, company_name: str) -> List[Competitor]:
        ...


@dataclass
class AnalysisResult:
    layer: Layer
    root: CompanyNode
    competitors: List[Competitor] = field(default_factory=list)
    nodes: List[CompanyNode] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)


class AnalysisWorkflow:

    def __init__(
        self,
        store: GraphStore,
        registry: LayerRegistry,
        analyzer: CompetitorAnalyzer,
        fetch_chain: AdFetchChain,
        layout_fn: Callable = get_layouted_elements,
        direction: LayoutDirection = LayoutDirection.TOP_BOTTOM,
    ) -> None:
        self.store = store
        self.registry = registry
        self.analyzer = analyzer
        self.fetch_chain = fetch_chain
        self.layout_fn = layout_fn
        self.direction = direction

    async def run(self, company_name: str) -> AnalysisResult:
        company_name = (company_name or "").strip()
        if not company_name:
            raise ValueError("Company name is required")

        logger.info(f"Starting analysis for '{company_name}'")
        competitors = await self.analyzer.analyze_competitors(company_name)
        if not competitors:
            raise AnalysisError(f"No competitors found for '{company_name}'")

        layer = self.registry.ensure_layer(company_name)
        logger.info(f"Analysis target layer: {layer.id}")

        # Ids are fixed before the fan-out so they don't depend on completion order.
        root_id = generate_id()
        competitor_ids = [generate_id() for _ in competitors]

        brands = [company_name] + [c.name for c in competitors]
        image_lists = await asyncio.gather(*(self._fetch_urls(brand) for brand in brands))

        root = CompanyNode.create(company_name, NodeKind.ROOT, image_lists[0], node_id=root_id)
        competitor_nodes = [
            CompanyNode.create(c.name, NodeKind.COMPETITOR, images, node_id=node_id)
            for c, images, node_id in zip(competitors, image_lists[1:], competitor_ids)
        ]
        edges = [Edge(root_id, node.id) for node in competitor_nodes]

        nodes = self.layout_fn([root] + competitor_nodes, edges, self.direction)
        logger.info(f"Layout calculated: {len(nodes)} nodes, {len(edges)} edges")

        self._commit(layer, nodes, edges)
        logger.info(f"Analysis complete for '{company_name}'")

        return AnalysisResult(
            layer=layer,
            root=nodes[0],
            competitors=list(competitors),
            nodes=list(nodes),
            edges=edges,
        )

    def _commit(self, layer: Layer, nodes: List[CompanyNode], edges: List[Edge]) -> None:
        if self.registry.current_layer_id == layer.id:
            self.store.replace_all(nodes, edges)
            self.registry.save_current_layer()
            return

        # The user moved to another layer while images were loading.
        if not self.registry.update_snapshot(layer.id, nodes, edges):
            logger.info(f"Dropping analysis result: layer {layer.id} no longer exists")

    async def _fetch_urls(self, brand_name: str) -> List[str]:
        # One brand's failure only empties that node's image list.
        try:
            return await self.fetch_chain.fetch_image_urls(brand_name)
        except Exception as exc:
            logger.warning(f"Image fetch failed for '{brand_name}', using empty list: {exc}")
            return []
