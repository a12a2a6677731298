import asyncio

import pytest

from adinsightmap.core.GraphPrimitives import CompanyNode, Edge, InsightBundle
from adinsightmap.core.GraphStore import GraphStore
from adinsightmap.core.LayerRegistry import LayerRegistry
from adinsightmap.core.Types import NodeKind
from adinsightmap.server.insight_orchestrator import InsightOrchestrator, describe_images
from adinsightmap.server.llm_client import InsightError

BUNDLE = InsightBundle(brand="brand", visual="visual", sales="sales")


class CountingGenerator:
    """Rejects overlapping calls for the same brand; can be held open with a gate."""

    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []
        self.active = set()
        self.gate = None

    async def generate_insights(self, brand_name, descriptions):
        assert brand_name not in self.active, f"overlapping request for {brand_name}"
        self.active.add(brand_name)
        self.calls.append((brand_name, list(descriptions)))
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
            if self.fail:
                raise InsightError("model down")
            return BUNDLE
        finally:
            self.active.discard(brand_name)


class TestInsightOrchestrator:

    def setup_method(self):
        self.store = GraphStore()
        self.registry = LayerRegistry(self.store)
        self.layer = self.registry.create_layer("Kakao")
        self.root = CompanyNode.create("Kakao", NodeKind.ROOT, ["a.png", "b.png"], node_id="root")
        self.bare = CompanyNode.create("Line", NodeKind.COMPETITOR, [], node_id="bare")
        self.other = CompanyNode.create("Naver", NodeKind.COMPETITOR, ["c.png"], node_id="other")
        self.store.replace_all([self.root, self.bare, self.other], [Edge("root", "bare"), Edge("root", "other")])
        self.registry.save_current_layer()
        self.generator = CountingGenerator()
        self.orchestrator = InsightOrchestrator(self.store, self.registry, self.generator)

    def test_describe_images(self):
        assert describe_images(self.root) == ["Kakao의 광고 이미지 - 전문적인 비주얼과 강렬한 메시지"] * 2

    def test_enrich_stores_insights_and_saves(self):
        issued = asyncio.run(self.orchestrator.enrich("root"))

        assert issued is True
        node = self.store.get_node("root")
        assert node.data.insights == BUNDLE
        assert node.data.is_analyzing is False
        assert self.registry.get_layer(self.layer.id).nodes[0].data.insights == BUNDLE
        assert self.generator.calls == [("Kakao", describe_images(self.root))]

    def test_node_without_images_is_never_enriched(self):
        issued = asyncio.run(self.orchestrator.select("bare"))

        assert issued is False
        assert self.store.selected_node_id == "bare"
        assert self.generator.calls == []
        assert self.store.get_node("bare").data.insights is None

    def test_node_with_insights_is_not_enriched_again(self):
        asyncio.run(self.orchestrator.enrich("root"))
        assert asyncio.run(self.orchestrator.select("root")) is False
        assert len(self.generator.calls) == 1

    def test_unknown_node_is_noop(self):
        assert asyncio.run(self.orchestrator.enrich("missing")) is False
        assert self.generator.calls == []

    def test_concurrent_selections_issue_one_request(self):
        async def run():
            return await asyncio.gather(
                self.orchestrator.select("root"),
                self.orchestrator.select("root"),
                self.orchestrator.enrich("root"),
            )

        results = asyncio.run(run())

        assert sorted(results) == [False, False, True]
        assert len(self.generator.calls) == 1
        assert self.store.get_node("root").data.insights == BUNDLE

    def test_different_nodes_run_concurrently(self):
        async def run():
            self.generator.gate = asyncio.Event()
            first = asyncio.ensure_future(self.orchestrator.enrich("root"))
            second = asyncio.ensure_future(self.orchestrator.enrich("other"))
            await asyncio.sleep(0)
            in_flight = set(self.generator.active)
            self.generator.gate.set()
            await asyncio.gather(first, second)
            return in_flight

        assert asyncio.run(run()) == {"Kakao", "Naver"}

    def test_analyzing_flag_set_while_in_flight(self):
        async def run():
            self.generator.gate = asyncio.Event()
            task = asyncio.ensure_future(self.orchestrator.enrich("root"))
            await asyncio.sleep(0)
            flagged = self.store.get_node("root").data.is_analyzing
            in_flight = self.orchestrator.is_in_flight("root")
            self.generator.gate.set()
            await task
            return flagged, in_flight

        assert asyncio.run(run()) == (True, True)
        assert self.store.get_node("root").data.is_analyzing is False
        assert not self.orchestrator.is_in_flight("root")

    def test_failure_clears_flag_and_leaves_insights_absent(self):
        self.generator.fail = True

        issued = asyncio.run(self.orchestrator.enrich("root"))

        assert issued is True
        node = self.store.get_node("root")
        assert node.data.insights is None
        assert node.data.is_analyzing is False
        assert not self.orchestrator.is_in_flight("root")

        # Selecting again is a fresh attempt.
        self.generator.fail = False
        assert asyncio.run(self.orchestrator.select("root")) is True
        assert len(self.generator.calls) == 2

    def test_result_lands_in_originating_layer_after_switch(self):
        async def run():
            self.generator.gate = asyncio.Event()
            task = asyncio.ensure_future(self.orchestrator.enrich("root"))
            await asyncio.sleep(0)
            other_layer = self.registry.create_layer("Other")
            self.store.replace_all([CompanyNode.create("Other", NodeKind.ROOT, ["x.png"], node_id="root")], [])
            self.generator.gate.set()
            await task
            return other_layer

        other_layer = asyncio.run(run())

        # The unrelated working copy is untouched.
        assert self.registry.current_layer_id == other_layer.id
        assert self.store.get_node("root").data.label == "Other"
        assert self.store.get_node("root").data.insights is None

        stored = self.registry.get_layer(self.layer.id).nodes[0]
        assert stored.data.insights == BUNDLE
        assert stored.data.is_analyzing is False

        self.registry.switch_layer(self.layer.id)
        assert self.store.get_node("root").data.insights == BUNDLE

    def test_result_dropped_when_layer_deleted(self):
        async def run():
            self.generator.gate = asyncio.Event()
            task = asyncio.ensure_future(self.orchestrator.enrich("root"))
            await asyncio.sleep(0)
            self.registry.create_layer("Other")
            self.registry.delete_layer(self.layer.id)
            self.generator.gate.set()
            await task

        asyncio.run(run())

        assert self.registry.get_layer(self.layer.id) is None
        assert self.store.is_empty()

    def test_cancelled_request_clears_flag(self):
        async def run():
            self.generator.gate = asyncio.Event()
            with pytest.raises(asyncio.TimeoutError):
                await asyncio.wait_for(self.orchestrator.enrich("root"), timeout=0.01)

        asyncio.run(run())

        node = self.store.get_node("root")
        assert node.data.is_analyzing is False
        assert node.data.insights is None
        assert not self.orchestrator.is_in_flight("root")
        assert self.orchestrator.should_enrich(node)

        # The node can be enriched again.
        self.generator.gate = None
        assert asyncio.run(self.orchestrator.enrich("root")) is True
        assert self.store.get_node("root").data.insights == BUNDLE
