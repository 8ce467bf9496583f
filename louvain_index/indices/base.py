"""Shared CSR core of the Louvain indices.

Both indices store the graph of the current level as packed arcs: node ``i``
owns the slice ``[starts[i], starts[i + 1])`` of ``neighborhood`` (target
node index) and ``weights`` (arc weight). Every array is allocated once at
construction, sized from the level-0 upper bounds, and coarsening only ever
rewrites a shorter used prefix of it.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Hashable, List, Optional, Set, Tuple

import networkx as nx
import numpy as np
from scipy import sparse

from louvain_index.config import HistoryMode, LouvainIndexConfig
from louvain_index.indices.history import make_history
from louvain_index.types import HostGraph
from louvain_index.utils.arrays import pointer_array
from louvain_index.utils.graph import index_nodes, validate_graph, weight_getter


def resolve_config(config: Optional[LouvainIndexConfig], overrides: Dict[str, Any]) -> LouvainIndexConfig:
    """Merge keyword overrides into a (default) configuration."""
    config = config or LouvainIndexConfig()
    if overrides:
        config = replace(config, **overrides)
    return config


class BaseLouvainIndex:
    """Operations common to the undirected and directed Louvain indices.

    Subclasses allocate their community aggregates, fill the packed arrays in
    ``_build`` and provide the direction-specific parts of coarsening
    (``_carry_aggregates``, ``_induce`` and ``_rewrite``).
    """

    directed = False

    def __init__(self, graph: HostGraph, config: Optional[LouvainIndexConfig] = None, **overrides: Any) -> None:
        graph = validate_graph(graph, directed=self.directed or None)
        self.config = resolve_config(config, overrides)
        self.graph = graph
        self.resolution = self.config.resolution
        self._get_weight = weight_getter(self.config.weighted, self.config.weight_attribute)

        self.nodes, self._ids = index_nodes(graph)
        order = len(self.nodes)

        # Upper bound on the number of arcs, self loops excluded later.
        upper_bound = 2 * graph.number_of_edges()

        self.C = order
        self.M = 0.0
        self.E = upper_bound
        self.level = 0

        # Edge-level
        self.neighborhood = pointer_array(upper_bound, order - 1)
        self.weights = np.zeros(upper_bound, dtype=np.float64)

        # Node-level
        self.loops = np.zeros(order, dtype=np.float64)
        self.starts = pointer_array(order + 1, upper_bound)
        self.belongings = pointer_array(order, order - 1)
        self.belongings[:] = np.arange(order)

        # Community-level
        self.internal_weights = np.zeros(order, dtype=np.float64)
        self._allocate_aggregates(order)

        self._build(graph)

        self._history = make_history(self.config.history_mode, self.belongings)

    # -------------------------- construction --------------------------------

    def _allocate_aggregates(self, order: int) -> None:
        raise NotImplementedError

    def _build(self, graph: HostGraph) -> None:
        raise NotImplementedError

    # ----------------------------- history ----------------------------------

    @property
    def keep_dendrogram(self) -> bool:
        return self._history.mode is HistoryMode.FULL

    @property
    def dendrogram(self) -> Optional[List[np.ndarray]]:
        """Per-level mappings when a dendrogram is kept, else ``None``."""
        return self._history.levels if self.keep_dendrogram else None

    @property
    def mapping(self) -> Optional[np.ndarray]:
        """Flattened mapping when no dendrogram is kept, else ``None``."""
        return None if self.keep_dendrogram else self._history.mapping

    def _mapping_at(self, level: Optional[int]) -> np.ndarray:
        return self._history.mapping_at(self.level if level is None else int(level))

    def collect(self, level: Optional[int] = None) -> Dict[Hashable, int]:
        """Map every original node label to its community id at ``level``."""
        mapping = self._mapping_at(level)
        return {node: int(c) for node, c in zip(self.nodes, mapping)}

    def assign(self, prop: str, level: Optional[int] = None) -> None:
        """Write the community ids at ``level`` onto the host graph node attributes."""
        nx.set_node_attributes(self.graph, self.collect(level), name=prop)

    def communities(self, level: Optional[int] = None) -> List[Set[Hashable]]:
        """Partition of the original node labels at ``level``, in community id order."""
        mapping = self._mapping_at(level)
        n_communities = int(mapping.max()) + 1 if mapping.size else 0
        groups: List[Set[Hashable]] = [set() for _ in range(n_communities)]
        for node, c in zip(self.nodes, mapping):
            groups[c].add(node)
        return groups

    # ---------------------------- adjacency ---------------------------------

    def bounds(self, i: int) -> Tuple[int, int]:
        """Packed slice ``[start, end)`` holding the arcs of node ``i``."""
        return int(self.starts[i]), int(self.starts[i + 1])

    def _label(self, i: int) -> Hashable:
        return self.nodes[i] if self.level == 0 else i

    def _project(self, lows: np.ndarray, highs: np.ndarray) -> Dict[Hashable, List[Hashable]]:
        projection = {}
        for i in range(self.C):
            targets = self.neighborhood[int(lows[i]):int(highs[i])]
            projection[self._label(i)] = [self._label(int(j)) for j in targets]
        return projection

    def project(self) -> Dict[Hashable, List[Hashable]]:
        """Materialize the full neighborhood of every node of the current level.

        Keys and neighbors are original node labels at level 0 and community
        ids afterwards.
        """
        return self._project(self.starts[:self.C], self.starts[1:self.C + 1])

    def _arc_owners(self) -> np.ndarray:
        counts = np.diff(self.starts[:self.C + 1].astype(np.int64))
        return np.repeat(np.arange(self.C), counts)

    def to_csr(self) -> sparse.csr_matrix:
        raise NotImplementedError

    # --------------------------- coarsening ---------------------------------

    def _carry_aggregates(self, kept: np.ndarray) -> None:
        raise NotImplementedError

    def _induce(self, n_communities: int):
        raise NotImplementedError

    def _rewrite(self, induced, n_communities: int) -> None:
        raise NotImplementedError

    def zoom_out(self) -> None:
        """Collapse the current communities into the nodes of the next level."""
        C = self.C
        belongings = self.belongings

        # Renumber communities in order of first appearance
        renumbering = np.full(C, -1, dtype=np.int64)
        kept = []
        for i in range(C):
            ci = int(belongings[i])
            if renumbering[ci] < 0:
                renumbering[ci] = len(kept)
                kept.append(ci)
            belongings[i] = renumbering[ci]

        n_communities = len(kept)

        self._history.record(belongings[:C], n_communities)

        self._carry_aggregates(np.asarray(kept, dtype=np.int64))
        induced = self._induce(n_communities)
        self._rewrite(induced, n_communities)

        self.loops[:n_communities] = self.internal_weights[:n_communities]
        self.belongings[:n_communities] = np.arange(n_communities)
        self.C = n_communities
        self.level += 1

    # ----------------------------- display ----------------------------------

    _edge_fields: Tuple[str, ...] = ("neighborhood", "weights")
    _community_fields: Tuple[str, ...] = ()

    def summary(self) -> Dict[str, Any]:
        """Truncated views of the live state, used prefixes only."""
        out: Dict[str, Any] = {
            "C": self.C,
            "M": self.M,
            "E": self.E,
            "resolution": self.resolution,
            "level": self.level,
            "nodes": self.nodes,
            "starts": self.starts[:self.C + 1],
        }
        for key in self._edge_fields:
            out[key] = getattr(self, key)[:self.E]
        for key in self._community_fields:
            out[key] = getattr(self, key)[:self.C]
        if self.keep_dendrogram:
            out["dendrogram"] = self.dendrogram
        else:
            out["mapping"] = self.mapping
        return out

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(C={self.C}, M={self.M:g}, E={self.E}, "
            f"level={self.level}, resolution={self.resolution:g})"
        )
