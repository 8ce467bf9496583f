"""Host graph reading utilities."""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Callable, Dict, Hashable, Iterator, List, Mapping, Tuple

import numpy as np

from louvain_index.types import HostGraph, InvalidGraphError

WeightGetter = Callable[[Mapping[str, Any]], float]

_REQUIRED = ("nodes", "edges", "is_directed", "number_of_nodes", "number_of_edges")


def validate_graph(graph: Any, directed: bool | None = None) -> HostGraph:
    """Check that ``graph`` exposes the traversal contract, optionally its direction."""
    missing = [name for name in _REQUIRED if not hasattr(graph, name)]
    if missing:
        raise InvalidGraphError(
            f"Expected a networkx-like graph, got {type(graph).__name__} (missing: {', '.join(missing)})."
        )
    if directed is True and not graph.is_directed():
        raise InvalidGraphError("A directed graph is required, got an undirected one.")
    return graph


def weight_getter(weighted: bool, attribute: str) -> WeightGetter:
    """Build the edge weight lookup.

    Unweighted lookups always return 1. Weighted lookups fall back to 1 when the
    attribute is missing, non-numeric (booleans included) or NaN.
    """
    if not weighted:
        return lambda attr: 1.0

    def get_weight(attr: Mapping[str, Any]) -> float:
        weight = attr.get(attribute)
        if isinstance(weight, bool) or not isinstance(weight, Real):
            return 1.0
        weight = float(weight)
        if math.isnan(weight):
            return 1.0
        return weight

    return get_weight


def index_nodes(graph: HostGraph) -> Tuple[List[Hashable], Dict[Hashable, int]]:
    """Assign every node a dense index in enumeration order."""
    nodes = list(graph.nodes)
    ids = {node: i for i, node in enumerate(nodes)}
    return nodes, ids


def iter_weighted_edges(
    graph: HostGraph, ids: Mapping[Hashable, int], get_weight: WeightGetter
) -> Iterator[Tuple[int, int, float]]:
    """Yield ``(source, target, weight)`` index triples, once per edge."""
    for source, target, attr in graph.edges(data=True):
        yield ids[source], ids[target], get_weight(attr)


def arc_counts(graph: HostGraph, ids: Mapping[Hashable, int]) -> Tuple[np.ndarray, np.ndarray]:
    """Count non-loop arcs leaving and entering each node.

    For undirected use, the sum of both counts is the number of arcs a node owns.
    """
    n = len(ids)
    out_counts = np.zeros(n, dtype=np.int64)
    in_counts = np.zeros(n, dtype=np.int64)
    for source, target in graph.edges():
        s, t = ids[source], ids[target]
        if s == t:
            continue
        out_counts[s] += 1
        in_counts[t] += 1
    return out_counts, in_counts
