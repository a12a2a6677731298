"""
Automatic layered layout for the company graph.

The layering itself is delegated to networkx: ranks are the topological
generations of the graph's condensation (strongly connected components
collapsed), so user-drawn cycles still produce a valid ranking. Within a
rank, nodes keep their input order and are centred on the rank axis.
"""
from __future__ import annotations

from typing import Dict, List, Union

import networkx as nx

from .GraphPrimitives import CompanyNode, Edge
from .Types import LayoutDirection

NODE_WIDTH = 280
NODE_HEIGHT = 200
NODE_SEP = 100
RANK_SEP = 150


def compute_ranks(nodes: List[CompanyNode], edges: List[Edge]) -> Dict[str, int]:
    graph = nx.DiGraph()
    graph.add_nodes_from(node.id for node in nodes)
    # Edges pointing at unknown nodes are ignored rather than creating phantoms.
    graph.add_edges_from(
        (edge.source, edge.target)
        for edge in edges
        if edge.source in graph and edge.target in graph
    )

    condensed = nx.condensation(graph)
    ranks: Dict[str, int] = {}
    for rank, generation in enumerate(nx.topological_generations(condensed)):
        for component in generation:
            for node_id in condensed.nodes[component]["members"]:
                ranks[node_id] = rank
    return ranks


def get_layouted_elements(
    nodes: List[CompanyNode],
    edges: List[Edge],
    direction: Union[LayoutDirection, str] = LayoutDirection.TOP_BOTTOM,
) -> List[CompanyNode]:
    """
    Return copies of *nodes* with ``position`` set to the top-left corner of
    each node box. Input nodes are not modified.
    """
    direction = LayoutDirection.parse(direction)
    if not nodes:
        return []

    ranks = compute_ranks(nodes, edges)

    by_rank: Dict[int, List[CompanyNode]] = {}
    for node in nodes:
        by_rank.setdefault(ranks[node.id], []).append(node)

    horizontal = direction == LayoutDirection.LEFT_RIGHT
    # Extent of one slot along the rank axis and across it.
    along = NODE_HEIGHT if horizontal else NODE_WIDTH
    across = NODE_WIDTH if horizontal else NODE_HEIGHT

    centres: Dict[str, tuple] = {}
    for rank, members in by_rank.items():
        span = len(members) * along + (len(members) - 1) * NODE_SEP
        start = -span / 2 + along / 2
        rank_centre = rank * (across + RANK_SEP) + across / 2
        for index, node in enumerate(members):
            offset = start + index * (along + NODE_SEP)
            centres[node.id] = (rank_centre, offset) if horizontal else (offset, rank_centre)

    layouted = []
    for node in nodes:
        cx, cy = centres[node.id]
        layouted.append(node.with_position(cx - NODE_WIDTH / 2, cy - NODE_HEIGHT / 2))
    return layouted
