import pytest

from adinsightmap.core.GraphPrimitives import CompanyNode, Edge
from adinsightmap.core.GraphStore import GraphStore
from adinsightmap.core.LayerRegistry import LayerNotFoundError, LayerRegistry
from adinsightmap.core.Types import NodeKind


def graph_for(company, *competitors):
    root = CompanyNode.create(company, NodeKind.ROOT, [f"{company}.png"])
    comps = [CompanyNode.create(name, NodeKind.COMPETITOR, [f"{name}.png"]) for name in competitors]
    return [root] + comps, [Edge(root.id, comp.id) for comp in comps]


def as_comparable(nodes, edges):
    return (
        [(n.id, n.data.label, n.data.kind, tuple(n.data.images), n.data.insights) for n in nodes],
        [e.id for e in edges],
    )


class TestLayerRegistry:

    def setup_method(self):
        self.events = []
        self.store = GraphStore()
        self.registry = LayerRegistry(self.store, on_change=self.events.append)

    def test_create_layer_sets_current_and_empties_store(self):
        self.store.replace_all(*graph_for("Old", "X"))
        self.store.select(self.store.nodes[0].id)

        layer = self.registry.create_layer("Acme")

        assert layer.name == "Acme 분석"
        assert layer.company_name == "Acme"
        assert layer.nodes == [] and layer.edges == []
        assert self.registry.current_layer_id == layer.id
        assert self.store.is_empty()
        assert self.store.selected_node_id is None

    def test_ensure_layer_reuses_current(self):
        first = self.registry.ensure_layer("Acme")
        second = self.registry.ensure_layer("Other")
        assert first is second
        assert len(self.registry.layers) == 1

    def test_save_without_current_layer_is_noop(self):
        self.store.replace_all(*graph_for("Acme", "X"))
        assert self.registry.save_current_layer() is None

    def test_switch_restores_last_saved_state_not_later_edits(self):
        acme = self.registry.create_layer("Acme")
        nodes, edges = graph_for("Acme", "X", "Y")
        self.store.replace_all(nodes, edges)
        self.registry.save_current_layer()
        saved = as_comparable(self.store.nodes, self.store.edges)

        other = self.registry.create_layer("Other")
        self.registry.switch_layer(acme.id)
        assert as_comparable(self.store.nodes, self.store.edges) == saved

        # Mutations after a switch are only kept once the layer is left or saved.
        self.store.add_node(CompanyNode.create("Z", NodeKind.COMPETITOR))
        assert len(self.registry.get_layer(acme.id).nodes) == 3
        self.registry.switch_layer(other.id)
        assert len(self.registry.get_layer(acme.id).nodes) == 4

    def test_kakao_round_trip(self):
        kakao = self.registry.create_layer("Kakao")
        nodes, edges = graph_for("Kakao", "Naver", "Line")
        self.store.replace_all(nodes, edges)
        self.registry.save_current_layer()
        before = as_comparable(self.store.nodes, self.store.edges)

        other = self.registry.create_layer("Other")
        self.registry.switch_layer(kakao.id)
        self.registry.switch_layer(other.id)
        self.registry.switch_layer(kakao.id)

        assert as_comparable(self.store.nodes, self.store.edges) == before

    def test_switch_clears_selection(self):
        acme = self.registry.create_layer("Acme")
        self.store.replace_all(*graph_for("Acme", "X"))
        self.store.select(self.store.nodes[0].id)
        self.registry.create_layer("Other")
        self.registry.switch_layer(acme.id)
        assert self.store.selected_node_id is None

    def test_switch_to_unknown_layer_raises_without_side_effects(self):
        acme = self.registry.create_layer("Acme")
        self.store.replace_all(*graph_for("Acme", "X"))
        self.store.select(self.store.nodes[0].id)
        self.events.clear()

        with pytest.raises(LayerNotFoundError):
            self.registry.switch_layer("nope")

        assert self.registry.current_layer_id == acme.id
        assert self.store.selected_node_id is not None
        assert len(self.store.nodes) == 2
        # Nothing was flushed.
        assert acme.nodes == []
        assert self.events == []

    def test_delete_only_layer(self):
        layer = self.registry.create_layer("Acme")
        self.store.replace_all(*graph_for("Acme", "X"))

        self.registry.delete_layer(layer.id)

        assert self.registry.current_layer_id is None
        assert self.registry.layers == []
        assert self.store.is_empty()

    def test_delete_current_layer_moves_to_first_remaining(self):
        first = self.registry.create_layer("First")
        self.store.replace_all(*graph_for("First", "X"))
        self.registry.save_current_layer()
        saved = as_comparable(self.store.nodes, self.store.edges)

        second = self.registry.create_layer("Second")
        self.registry.delete_layer(second.id)

        assert self.registry.current_layer_id == first.id
        assert as_comparable(self.store.nodes, self.store.edges) == saved

    def test_delete_non_current_layer_leaves_store_alone(self):
        first = self.registry.create_layer("First")
        second = self.registry.create_layer("Second")
        self.store.replace_all(*graph_for("Second", "X"))
        self.store.select(self.store.nodes[1].id)
        working = as_comparable(self.store.nodes, self.store.edges)
        selected = self.store.selected_node_id

        self.registry.delete_layer(first.id)

        assert self.registry.current_layer_id == second.id
        assert as_comparable(self.store.nodes, self.store.edges) == working
        assert self.store.selected_node_id == selected
        assert [l.id for l in self.registry.layers] == [second.id]

    def test_delete_unknown_layer_raises(self):
        self.registry.create_layer("Acme")
        with pytest.raises(LayerNotFoundError):
            self.registry.delete_layer("nope")

    def test_rename_layer(self):
        layer = self.registry.create_layer("Acme")
        self.registry.rename_layer(layer.id, "Q3 review")
        assert self.registry.get_layer(layer.id).name == "Q3 review"
        assert self.events[-1] == {"type": "LAYER_RENAMED", "layerId": layer.id, "name": "Q3 review"}

    def test_saved_snapshot_is_not_aliased(self):
        layer = self.registry.create_layer("Acme")
        self.store.replace_all(*graph_for("Acme", "X"))
        self.registry.save_current_layer()
        root_id = self.store.nodes[0].id

        self.store.update_node(root_id, is_analyzing=True)

        assert layer.nodes[0].data.is_analyzing is False

    def test_update_snapshot_node(self):
        acme = self.registry.create_layer("Acme")
        self.store.replace_all(*graph_for("Acme", "X"))
        self.registry.save_current_layer()
        node_id = self.store.nodes[1].id
        self.registry.create_layer("Other")

        assert self.registry.update_snapshot_node(acme.id, node_id, is_analyzing=True) is True
        assert self.registry.get_layer(acme.id).nodes[1].data.is_analyzing is True
        # The working copy belongs to "Other" and is untouched.
        assert self.store.is_empty()

        assert self.registry.update_snapshot_node(acme.id, "missing", is_analyzing=True) is False
        assert self.registry.update_snapshot_node("nope", node_id, is_analyzing=True) is False

    def test_update_snapshot(self):
        acme = self.registry.create_layer("Acme")
        self.registry.create_layer("Other")
        nodes, edges = graph_for("Acme", "X")

        assert self.registry.update_snapshot(acme.id, nodes, edges) is True
        assert as_comparable(acme.nodes, acme.edges) == as_comparable(nodes, edges)
        assert self.store.is_empty()

        # Stored copies are independent of the caller's objects.
        nodes[0].data.images.append("late.png")
        assert acme.nodes[0].data.images == ["Acme.png"]

        assert self.registry.update_snapshot("nope", nodes, edges) is False
