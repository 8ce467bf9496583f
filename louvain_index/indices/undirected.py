"""Undirected Louvain index.

Modularity of a partition, with ``m`` the total edge weight and resolution
``γ``, summed over communities ``c``::

    Q = Σ_c [ Σ_in(c) / 2m - γ (Σ_tot(c) / 2m)² ]

where ``Σ_in`` counts every internal edge twice (once per endpoint, self
loops included) and ``Σ_tot`` is the total degree of the community.

Moving a node ``i`` with degree ``d`` (self loops excluded), self-loop weight
``l`` and ``k`` weight towards community ``t`` from isolation into ``t``
changes the modularity by::

    ΔQ = k / m - γ Σ_tot(t) (d + l) / 2m²

which only needs figures the caller already has at hand. Gains are measured
against the isolated state rather than between two memberships, so the gain
of staying in one's own community must discount the node's own contribution
from ``Σ_tot`` (:meth:`UndirectedLouvainIndex.delta_with_own_community`).

References
----------
Blondel, V. D. et al. Fast unfolding of communities in large networks.
J. Stat. Mech. (2008) P10008.
Newman, M. E. J. Modularity and community structure in networks.
PNAS 103 (23) (2006) 8577-8582.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

import numpy as np
from scipy import sparse

from louvain_index.indices.base import BaseLouvainIndex
from louvain_index.types import HostGraph
from louvain_index.utils.graph import arc_counts, iter_weighted_edges

MoveFigures = Tuple[int, float, float, float, int]


class UndirectedLouvainIndex(BaseLouvainIndex):
    """Packed, mutable Louvain state of an undirected graph.

    Directed host graphs are read as undirected: every edge, whatever its
    orientation, contributes one arc to each endpoint.

    Parameters
    ----------
    graph : networkx graph
        Host graph, read once and never mutated (except by :meth:`assign`).
    config : LouvainIndexConfig, optional
        Index options; keyword overrides (``weighted``, ``attributes``,
        ``resolution``, ``keep_dendrogram``) are merged into it.

    Attributes
    ----------
    C, E, M : int, int, float
        Number of communities (nodes) at this level, number of arcs, total
        edge weight (self loops counted once).
    total_weights : np.ndarray
        ``Σ_tot`` per community id.
    internal_weights : np.ndarray
        ``Σ_in`` per community id, internal edges counted twice.
    """

    directed = False
    _community_fields = ("loops", "belongings", "internal_weights", "total_weights")

    def _allocate_aggregates(self, order: int) -> None:
        self.total_weights = np.zeros(order, dtype=np.float64)

    def _build(self, graph: HostGraph) -> None:
        """Lay out the arcs exactly, sized by a counting pass rather than host degrees.

        Counting skips self loops and sees every parallel edge, so the used
        prefix of ``neighborhood`` has no gaps for multigraphs or looped nodes.
        """
        out_counts, in_counts = arc_counts(graph, self._ids)

        # Every node's write cursor starts at the end of its slot and moves back
        ends = np.cumsum(out_counts + in_counts)
        cursors = np.empty(self.C + 1, dtype=np.int64)
        cursors[:self.C] = ends
        cursors[self.C] = ends[-1] if self.C else 0

        for source, target, weight in iter_weighted_edges(graph, self._ids, self._get_weight):
            self.M += weight

            if source == target:
                self.total_weights[source] += weight * 2
                self.internal_weights[source] += weight * 2
                self.loops[source] += weight * 2
                continue

            self.total_weights[source] += weight
            self.total_weights[target] += weight

            cursors[source] -= 1
            cursors[target] -= 1
            p, q = cursors[source], cursors[target]

            self.neighborhood[p] = target
            self.neighborhood[q] = source
            self.weights[p] = weight
            self.weights[q] = weight

        self.starts[:] = cursors
        self.E = int(cursors[self.C])

    # ------------------------------ moves -----------------------------------

    def move(
        self,
        i: int,
        degree: float,
        current_community_degree: float,
        target_community_degree: float,
        target_community: int,
    ) -> None:
        """Move node ``i`` to ``target_community`` in O(1).

        ``degree`` is the weight of ``i``'s arcs, the community degrees the part
        of it landing in the current and target communities.
        """
        current_community = int(self.belongings[i])
        loops = self.loops[i]

        if current_community == target_community:
            self.internal_weights[current_community] += (
                (target_community_degree - current_community_degree) * 2
            )
            return

        self.total_weights[current_community] -= degree + loops
        self.total_weights[target_community] += degree + loops

        self.internal_weights[current_community] -= current_community_degree * 2 + loops
        self.internal_weights[target_community] += target_community_degree * 2 + loops

        self.belongings[i] = target_community

    def expensive_move(self, i: int, target_community: int, dry_run: bool = False):
        """Compute the move figures of ``i`` from live memberships, then move.

        With ``dry_run``, return the ``move`` arguments instead of applying them.
        """
        degree = 0.0
        current_community_degree = 0.0
        target_community_degree = 0.0

        c = self.belongings[i]

        start, end = self.bounds(i)
        for o in range(start, end):
            weight = self.weights[o]
            cn = self.belongings[self.neighborhood[o]]

            degree += weight

            if cn == target_community:
                target_community_degree += weight

            if cn == c:
                current_community_degree += weight

        args: MoveFigures = (
            i,
            float(degree),
            float(current_community_degree),
            float(target_community_degree),
            int(target_community),
        )

        if dry_run:
            return args

        self.move(*args)

    # --------------------------- modularity ---------------------------------

    def modularity(self) -> float:
        """Modularity of the current partition, O(C)."""
        if self.M == 0:
            return 0.0
        M2 = self.M * 2
        internal = self.internal_weights[:self.C]
        total = self.total_weights[:self.C]
        return float(np.sum(internal / M2 - self.resolution * (total / M2) ** 2))

    def delta(self, i: int, degree: float, target_community_degree: float, target_community: int) -> float:
        """Modularity gain of moving an isolated node ``i`` into ``target_community``.

        Meaningless when ``target_community`` is ``i``'s own community; use
        :meth:`delta_with_own_community` there.
        """
        M = self.M
        if M == 0:
            return 0.0

        target_community_total_weight = self.total_weights[target_community]

        degree += self.loops[i]

        # target_community_degree is not doubled, hence 1 / M
        return float(
            (target_community_degree / M)
            - self.resolution * (target_community_total_weight * degree) / (2 * M * M)
        )

    def delta_with_own_community(
        self, i: int, degree: float, target_community_degree: float, target_community: int
    ) -> float:
        """Modularity gain of ``i`` being in ``target_community``, which already holds it."""
        M = self.M
        if M == 0:
            return 0.0

        target_community_total_weight = self.total_weights[target_community]

        degree += self.loops[i]

        return float(
            (target_community_degree / M)
            - self.resolution * ((target_community_total_weight - degree) * degree) / (2 * M * M)
        )

    # --------------------------- coarsening ---------------------------------

    def _carry_aggregates(self, kept: np.ndarray) -> None:
        n = kept.size
        self.total_weights[:n] = self.total_weights[kept]
        self.internal_weights[:n] = self.internal_weights[kept]

    def _induce(self, n_communities: int) -> List[Dict[int, float]]:
        induced: List[Dict[int, float]] = [{} for _ in range(n_communities)]

        for i in range(self.C):
            ci = int(self.belongings[i])
            adj = induced[ci]

            start, end = self.bounds(i)
            for j in range(start, end):
                cj = int(self.belongings[self.neighborhood[j]])

                if ci == cj:
                    continue

                adj[cj] = adj.get(cj, 0.0) + self.weights[j]

        return induced

    def _rewrite(self, induced: List[Dict[int, float]], n_communities: int) -> None:
        n = 0
        for ci, adj in enumerate(induced):
            self.starts[ci] = n
            for cj, weight in adj.items():
                self.neighborhood[n] = cj
                self.weights[n] = weight
                n += 1

        self.starts[n_communities] = n
        self.E = n

    def to_csr(self) -> sparse.csr_matrix:
        """Symmetric adjacency of the current level, self loops on the diagonal."""
        C, E = self.C, self.E
        rows = np.concatenate([self._arc_owners(), np.arange(C)])
        cols = np.concatenate([self.neighborhood[:E].astype(np.int64), np.arange(C)])
        data = np.concatenate([self.weights[:E], self.loops[:C]])
        return sparse.csr_matrix((data, (rows, cols)), shape=(C, C))
