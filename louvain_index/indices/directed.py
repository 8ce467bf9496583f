"""Directed Louvain index.

Directed modularity (Dugué & Perez, 2015), with ``m`` the total arc weight::

    Q = Σ_c [ Σ_in(c) / m - γ Σ_tot_in(c) Σ_tot_out(c) / m² ]

Each node stores its outgoing arcs, then its incoming arcs:
``[starts[i], offsets[i])`` are outbound, ``[offsets[i], starts[i + 1])``
inbound. A node ``i`` with in/out degrees ``d_in``/``d_out``, self-loop
weight ``l`` and ``k`` weight (both directions) towards community ``t`` gains,
when moved from isolation into ``t``::

    ΔQ = k / m - γ [ (d_out + l) Σ_tot_in(t) + (d_in + l) Σ_tot_out(t) ] / m²

References
----------
Dugué, N., Perez, A. Directed Louvain: maximizing modularity in directed
networks. Université d'Orléans (2015), hal-01231784.
"""

from __future__ import annotations

from typing import Dict, List, Tuple

import numpy as np
from scipy import sparse

from louvain_index.indices.base import BaseLouvainIndex
from louvain_index.types import HostGraph
from louvain_index.utils.arrays import pointer_array
from louvain_index.utils.graph import arc_counts, iter_weighted_edges

MoveFigures = Tuple[int, float, float, float, float, float, float, int]
Adjacency = Dict[int, float]


class DirectedLouvainIndex(BaseLouvainIndex):
    """Packed, mutable Louvain state of a directed graph.

    Same options as :class:`~louvain_index.indices.undirected.UndirectedLouvainIndex`.
    The community total weight is split into ``total_in_weights`` and
    ``total_out_weights``; ``internal_weights`` counts each internal arc once.
    """

    directed = True
    _community_fields = (
        "offsets",
        "loops",
        "belongings",
        "internal_weights",
        "total_in_weights",
        "total_out_weights",
    )

    def _allocate_aggregates(self, order: int) -> None:
        self.offsets = pointer_array(order, self.E)
        self.total_in_weights = np.zeros(order, dtype=np.float64)
        self.total_out_weights = np.zeros(order, dtype=np.float64)

    def _build(self, graph: HostGraph) -> None:
        out_counts, in_counts = arc_counts(graph, self._ids)

        # Outbound cursors start at the out/in boundary, inbound ones at the
        # slot end; both move back so they meet the slot start and the boundary.
        out_cursors = np.cumsum(out_counts + in_counts) - in_counts
        in_cursors = out_cursors + in_counts

        for source, target, weight in iter_weighted_edges(graph, self._ids, self._get_weight):
            self.M += weight

            if source == target:
                self.internal_weights[source] += weight
                self.loops[source] += weight
                self.total_in_weights[source] += weight
                self.total_out_weights[source] += weight
                continue

            self.total_out_weights[source] += weight
            self.total_in_weights[target] += weight

            out_cursors[source] -= 1
            in_cursors[target] -= 1
            p, q = out_cursors[source], in_cursors[target]

            self.neighborhood[p] = target
            self.neighborhood[q] = source
            self.weights[p] = weight
            self.weights[q] = weight

        self.E = int(out_counts.sum() + in_counts.sum())
        self.starts[:self.C] = out_cursors
        self.starts[self.C] = self.E
        self.offsets[:] = in_cursors

    # ---------------------------- adjacency ---------------------------------

    def in_bounds(self, i: int) -> Tuple[int, int]:
        """Packed slice of node ``i``'s inbound arcs."""
        return int(self.offsets[i]), int(self.starts[i + 1])

    def out_bounds(self, i: int) -> Tuple[int, int]:
        """Packed slice of node ``i``'s outbound arcs."""
        return int(self.starts[i]), int(self.offsets[i])

    def project_in(self):
        return self._project(self.offsets[:self.C], self.starts[1:self.C + 1])

    def project_out(self):
        return self._project(self.starts[:self.C], self.offsets[:self.C])

    # ------------------------------ moves -----------------------------------

    def move(
        self,
        i: int,
        in_degree: float,
        out_degree: float,
        current_community_in_degree: float,
        current_community_out_degree: float,
        target_community_in_degree: float,
        target_community_out_degree: float,
        target_community: int,
    ) -> None:
        """Move node ``i`` to ``target_community`` in O(1)."""
        current_community = int(self.belongings[i])
        loops = self.loops[i]

        if current_community == target_community:
            self.internal_weights[current_community] += (
                (target_community_in_degree + target_community_out_degree)
                - (current_community_in_degree + current_community_out_degree)
            )
            return

        self.total_in_weights[current_community] -= in_degree + loops
        self.total_in_weights[target_community] += in_degree + loops

        self.total_out_weights[current_community] -= out_degree + loops
        self.total_out_weights[target_community] += out_degree + loops

        self.internal_weights[current_community] -= (
            current_community_in_degree + current_community_out_degree + loops
        )
        self.internal_weights[target_community] += (
            target_community_in_degree + target_community_out_degree + loops
        )

        self.belongings[i] = target_community

    def expensive_move(self, i: int, target_community: int, dry_run: bool = False):
        """Compute the move figures of ``i`` from live memberships, then move.

        With ``dry_run``, return the ``move`` arguments instead of applying them.
        """
        in_degree = out_degree = 0.0
        current_community_in_degree = current_community_out_degree = 0.0
        target_community_in_degree = target_community_out_degree = 0.0

        c = self.belongings[i]
        s = int(self.offsets[i])

        start, end = self.bounds(i)
        for o in range(start, end):
            weight = self.weights[o]
            cn = self.belongings[self.neighborhood[o]]

            if o < s:
                out_degree += weight
                if cn == target_community:
                    target_community_out_degree += weight
                if cn == c:
                    current_community_out_degree += weight
            else:
                in_degree += weight
                if cn == target_community:
                    target_community_in_degree += weight
                if cn == c:
                    current_community_in_degree += weight

        args: MoveFigures = (
            i,
            float(in_degree),
            float(out_degree),
            float(current_community_in_degree),
            float(current_community_out_degree),
            float(target_community_in_degree),
            float(target_community_out_degree),
            int(target_community),
        )

        if dry_run:
            return args

        self.move(*args)

    # --------------------------- modularity ---------------------------------

    def modularity(self) -> float:
        """Directed modularity of the current partition, O(C)."""
        M = self.M
        if M == 0:
            return 0.0
        internal = self.internal_weights[:self.C]
        total_in = self.total_in_weights[:self.C]
        total_out = self.total_out_weights[:self.C]
        return float(np.sum(internal / M - self.resolution * (total_in * total_out) / (M * M)))

    def delta(
        self,
        i: int,
        in_degree: float,
        out_degree: float,
        target_community_degree: float,
        target_community: int,
    ) -> float:
        """Modularity gain of moving an isolated node ``i`` into ``target_community``.

        ``target_community_degree`` sums the in and out weight towards the target.
        """
        M = self.M
        if M == 0:
            return 0.0

        target_community_total_in_weight = self.total_in_weights[target_community]
        target_community_total_out_weight = self.total_out_weights[target_community]

        loops = self.loops[i]
        in_degree += loops
        out_degree += loops

        return float(
            (target_community_degree / M)
            - self.resolution
            * (
                out_degree * target_community_total_in_weight
                + in_degree * target_community_total_out_weight
            )
            / (M * M)
        )

    def delta_with_own_community(
        self,
        i: int,
        in_degree: float,
        out_degree: float,
        target_community_degree: float,
        target_community: int,
    ) -> float:
        """Modularity gain of ``i`` being in ``target_community``, which already holds it."""
        M = self.M
        if M == 0:
            return 0.0

        target_community_total_in_weight = self.total_in_weights[target_community]
        target_community_total_out_weight = self.total_out_weights[target_community]

        loops = self.loops[i]
        in_degree += loops
        out_degree += loops

        return float(
            (target_community_degree / M)
            - self.resolution
            * (
                out_degree * (target_community_total_in_weight - in_degree)
                + in_degree * (target_community_total_out_weight - out_degree)
            )
            / (M * M)
        )

    # --------------------------- coarsening ---------------------------------

    def _carry_aggregates(self, kept: np.ndarray) -> None:
        n = kept.size
        self.total_in_weights[:n] = self.total_in_weights[kept]
        self.total_out_weights[:n] = self.total_out_weights[kept]
        self.internal_weights[:n] = self.internal_weights[kept]

    def _induce(self, n_communities: int) -> List[Tuple[Adjacency, Adjacency]]:
        induced: List[Tuple[Adjacency, Adjacency]] = [({}, {}) for _ in range(n_communities)]

        for i in range(self.C):
            ci = int(self.belongings[i])
            offset = int(self.offsets[i])
            out_adj, in_adj = induced[ci]

            start, end = self.bounds(i)
            for j in range(start, end):
                cj = int(self.belongings[self.neighborhood[j]])

                if ci == cj:
                    continue

                adj = out_adj if j < offset else in_adj
                adj[cj] = adj.get(cj, 0.0) + self.weights[j]

        return induced

    def _rewrite(self, induced: List[Tuple[Adjacency, Adjacency]], n_communities: int) -> None:
        n = 0
        for ci, (out_adj, in_adj) in enumerate(induced):
            self.starts[ci] = n

            for cj, weight in out_adj.items():
                self.neighborhood[n] = cj
                self.weights[n] = weight
                n += 1

            self.offsets[ci] = n

            for cj, weight in in_adj.items():
                self.neighborhood[n] = cj
                self.weights[n] = weight
                n += 1

        self.starts[n_communities] = n
        self.E = n

    def to_csr(self) -> sparse.csr_matrix:
        """Outbound adjacency of the current level, self loops on the diagonal."""
        C, E = self.C, self.E
        owners = self._arc_owners()
        outbound = np.arange(E) < self.offsets[:C].astype(np.int64)[owners]
        rows = np.concatenate([owners[outbound], np.arange(C)])
        cols = np.concatenate([self.neighborhood[:E][outbound].astype(np.int64), np.arange(C)])
        data = np.concatenate([self.weights[:E][outbound], self.loops[:C]])
        return sparse.csr_matrix((data, (rows, cols)), shape=(C, C))
