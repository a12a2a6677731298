"""
On-demand insight enrichment for a single node.

The node's ``is_analyzing`` flag is the per-node mutex: it is checked and set
synchronously (no await in between) so two selections of the same node can
never start two requests. An in-flight id set backs the flag up for the case
where the working copy is reloaded from a snapshot while a request is
suspended.
"""
from __future__ import annotations

from logging import getLogger
from typing import List, Optional, Protocol, Set

from adinsightmap.core.GraphPrimitives import CompanyNode, InsightBundle
from adinsightmap.core.GraphStore import GraphStore
from adinsightmap.core.LayerRegistry import LayerRegistry

logger = getLogger(__name__)


class InsightGenerator(Protocol):
    async def generate_insights(self, brand_name: str, descriptions: List[str]) -> InsightBundle:
        ...


def describe_images(node: CompanyNode) -> List[str]:
    # Placeholder for a vision step: one templated line per image.
    return [f"{node.data.label}의 광고 이미지 - 전문적인 비주얼과 강렬한 메시지" for _ in node.data.images]


class InsightOrchestrator:

    def __init__(self, store: GraphStore, registry: LayerRegistry, generator: InsightGenerator) -> None:
        self.store = store
        self.registry = registry
        self.generator = generator
        self._in_flight: Set[str] = set()

    def should_enrich(self, node: Optional[CompanyNode]) -> bool:
        if node is None:
            return False
        return (
            node.data.insights is None
            and not node.data.is_analyzing
            and node.id not in self._in_flight
            and len(node.data.images) > 0
        )

    def is_in_flight(self, node_id: str) -> bool:
        return node_id in self._in_flight

    async def select(self, node_id: Optional[str]) -> bool:
        """
        Select *node_id* and enrich it when eligible.

        Returns True if an enrichment request was issued.
        """
        self.store.select(node_id)
        if node_id is None or not self.should_enrich(self.store.get_node(node_id)):
            return False
        return await self.enrich(node_id)

    async def enrich(self, node_id: str) -> bool:
        """
        Fetch and store insights for *node_id*.

        No-op (returns False) when the node is missing or not eligible.
        Failures are logged and leave the node without insights; nothing is
        retried until the node is selected again.
        """
        node = self.store.get_node(node_id)
        if not self.should_enrich(node):
            return False

        # Claim before the first await.
        self._in_flight.add(node_id)
        self.store.update_node(node_id, is_analyzing=True)
        origin_layer_id = self.registry.current_layer_id

        insights: Optional[InsightBundle] = None
        try:
            insights = await self.generator.generate_insights(node.data.label, describe_images(node))
        except Exception as exc:
            logger.error(f"Insight generation error for '{node.data.label}' ({node_id}): {exc}")
        finally:
            self._in_flight.discard(node_id)
            # Runs on cancellation too, so the node never stays stuck in progress.
            if insights is None:
                self._commit(origin_layer_id, node_id, is_analyzing=False)

        if insights is not None:
            self._commit(origin_layer_id, node_id, insights=insights, is_analyzing=False)
            logger.info(f"Stored insights for '{node.data.label}'")
        return True

    def _commit(self, origin_layer_id: Optional[str], node_id: str, **changes) -> None:
        if origin_layer_id == self.registry.current_layer_id:
            if self.store.update_node(node_id, **changes) is not None:
                self.registry.save_current_layer()
            return

        # The user moved to another layer while the request was suspended.
        if origin_layer_id is None or not self.registry.update_snapshot_node(origin_layer_id, node_id, **changes):
            logger.info(f"Dropping enrichment result for {node_id}: layer {origin_layer_id} no longer holds it")
