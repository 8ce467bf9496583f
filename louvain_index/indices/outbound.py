"""Outbound neighborhood index."""

from __future__ import annotations

from typing import Any, Dict, Hashable, List, Sequence, Tuple

import networkx as nx

from louvain_index.types import HostGraph
from louvain_index.utils.arrays import pointer_array
from louvain_index.utils.graph import index_nodes, validate_graph


class OutboundNeighborhoodIndex:
    """Packed outbound neighbors of every node, without any community logic.

    Node ``i``'s neighbors are ``neighborhood[starts[i]:stops[i]]`` (node
    indices). Outbound means successors in a directed graph and neighbors in
    an undirected one.
    """

    def __init__(self, graph: HostGraph) -> None:
        graph = validate_graph(graph)
        directed = graph.is_directed()

        # Upper bound for the neighborhood size
        upper_bound = graph.number_of_edges() * (1 if directed else 2)

        self.graph = graph
        self.nodes, ids = index_nodes(graph)

        order = len(self.nodes)
        self.neighborhood = pointer_array(upper_bound, order - 1)
        self.starts = pointer_array(order, upper_bound)
        self.stops = pointer_array(order, upper_bound)

        neighbors_of = graph.successors if directed else graph.neighbors

        n = 0
        for i, node in enumerate(self.nodes):
            self.starts[i] = n
            for neighbor in neighbors_of(node):
                self.neighborhood[n] = ids[neighbor]
                n += 1
            self.stops[i] = n

        self.neighborhood = self.neighborhood[:n]

    def bounds(self, i: int) -> Tuple[int, int]:
        return int(self.starts[i]), int(self.stops[i])

    def project(self) -> Dict[Hashable, List[Hashable]]:
        projection = {}
        for i, node in enumerate(self.nodes):
            start, stop = self.bounds(i)
            projection[node] = [self.nodes[j] for j in self.neighborhood[start:stop]]
        return projection

    def collect(self, results: Sequence[Any]) -> Dict[Hashable, Any]:
        """Key per-index ``results`` by node label."""
        return {self.nodes[i]: result for i, result in enumerate(results)}

    def assign(self, prop: str, results: Sequence[Any]) -> None:
        """Write per-index ``results`` onto the host graph node attributes."""
        nx.set_node_attributes(self.graph, self.collect(results), name=prop)
