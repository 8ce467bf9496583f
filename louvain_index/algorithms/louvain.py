"""Louvain community detection driven by the packed Louvain indices."""

from __future__ import annotations

from typing import Any, Dict, Hashable, List, Optional, Set, Tuple

import numpy as np
from tqdm.auto import tqdm

from louvain_index.config import LouvainIndexConfig
from louvain_index.indices.directed import DirectedLouvainIndex
from louvain_index.indices.undirected import UndirectedLouvainIndex
from louvain_index.types import HostGraph


class Louvain:
    """
    Multi-level Louvain with resolution parameter, on undirected or directed graphs.

    Parameters
    ----------
    resolution : float
        Modularity resolution γ.
    weighted : bool
        Read edge weights from ``weight_attribute`` (falls back to 1 per edge).
    weight_attribute : str
        Name of the edge attribute holding weights.
    tol_optimization : float
        Minimum modularity increase of a sweep to keep optimizing at a level.
    max_sweeps : int
        Maximum number of local moving sweeps per level (-1 means unlimited).
    n_aggregations : int
        Maximum number of coarsenings (-1 means unlimited).
    keep_dendrogram : bool
        Keep every level's mapping in ``dendrogram_``.
    random_state : Optional[int]
        Seed for node shuffling inside local moving.
    verbose : bool
        Print per-level summaries and show a progress bar.

    Attributes
    ----------
    labels_ : np.ndarray
        Final community of every original node, in graph node order.
    modularity_ : float
        Modularity of the final partition.
    dendrogram_ : Optional[list[np.ndarray]]
        Per-level mappings when ``keep_dendrogram`` is set.
    n_levels_ : int
        Number of coarsenings performed.
    index_ : UndirectedLouvainIndex | DirectedLouvainIndex
        Index left in its final state.
    """

    def __init__(self,
                 resolution: float = 1.0,
                 weighted: bool = True,
                 weight_attribute: str = "weight",
                 tol_optimization: float = 1e-7,
                 max_sweeps: int = -1,
                 n_aggregations: int = -1,
                 keep_dendrogram: bool = False,
                 random_state: Optional[int] = None,
                 verbose: bool = False):
        self.resolution = float(resolution)
        self.weighted = bool(weighted)
        self.weight_attribute = weight_attribute
        self.tol_optimization = float(tol_optimization)
        self.max_sweeps = int(max_sweeps)
        self.n_aggregations = int(n_aggregations)
        self.keep_dendrogram = bool(keep_dendrogram)
        self.random_state = int(random_state) if random_state is not None else None
        self.verbose = bool(verbose)

        self.labels_: Optional[np.ndarray] = None
        self.modularity_: Optional[float] = None
        self.dendrogram_: Optional[List[np.ndarray]] = None
        self.n_levels_: int = 0
        self.index_ = None

    def _config(self) -> LouvainIndexConfig:
        return LouvainIndexConfig(
            weighted=self.weighted,
            attributes={"weight": self.weight_attribute},
            resolution=self.resolution,
            keep_dendrogram=self.keep_dendrogram,
        )

    def fit(self, graph: HostGraph) -> "Louvain":
        """Run Louvain on ``graph``; directed graphs use directed modularity."""
        rng = np.random.RandomState(self.random_state)

        index_cls = DirectedLouvainIndex if graph.is_directed() else UndirectedLouvainIndex
        index = index_cls(graph, self._config())
        local_move = _local_move_directed if index.directed else _local_move_undirected

        with tqdm(desc="louvain levels", disable=not self.verbose) as pbar:
            while True:
                q_start = index.modularity()
                n_moves = 0
                sweeps = 0
                q_prev = q_start

                while self.max_sweeps < 0 or sweeps < self.max_sweeps:
                    moves = local_move(index, rng)
                    sweeps += 1
                    n_moves += moves
                    q_now = index.modularity()
                    if moves == 0 or q_now - q_prev <= self.tol_optimization:
                        break
                    q_prev = q_now

                if self.verbose:
                    print(
                        f"Level {index.level}: {index.C} nodes, {sweeps} sweeps, "
                        f"{n_moves} moves, Q {q_start:.6f} -> {index.modularity():.6f}"
                    )
                pbar.update(1)

                if n_moves == 0:
                    break
                if self.n_aggregations >= 0 and index.level >= self.n_aggregations:
                    break

                index.zoom_out()

                if index.C <= 1:
                    break

        # A capped run stops before coarsening its last level, whose moves
        # only live in the belongings
        mapping = index.dendrogram[-1] if index.keep_dendrogram else index.mapping
        self.labels_ = index.belongings[mapping].astype(int)
        self.modularity_ = index.modularity()
        self.dendrogram_ = [level.copy() for level in index.dendrogram] if index.keep_dendrogram else None
        self.n_levels_ = index.level
        self.index_ = index
        return self

    def predict(self) -> np.ndarray:
        if self.labels_ is None:
            raise RuntimeError("Model not fitted.")
        return self.labels_

    def fit_predict(self, graph: HostGraph) -> np.ndarray:
        return self.fit(graph).predict()


def _local_move_undirected(index: UndirectedLouvainIndex, rng: np.random.RandomState) -> int:
    """One sweep of local moving; returns the number of nodes that changed community."""
    belongings = index.belongings
    neighborhood = index.neighborhood
    weights = index.weights

    moves = 0
    nodes = np.arange(index.C)
    rng.shuffle(nodes)

    for i in nodes:
        i = int(i)
        start, end = index.bounds(i)
        if start == end:
            continue

        degree = 0.0
        community_degrees: Dict[int, float] = {}
        for o in range(start, end):
            weight = float(weights[o])
            c = int(belongings[neighborhood[o]])
            degree += weight
            community_degrees[c] = community_degrees.get(c, 0.0) + weight

        current_community = int(belongings[i])
        current_community_degree = community_degrees.get(current_community, 0.0)

        best_community = current_community
        best_delta = index.delta_with_own_community(i, degree, current_community_degree, current_community)

        for c, target_community_degree in community_degrees.items():
            if c == current_community:
                continue
            delta = index.delta(i, degree, target_community_degree, c)
            if delta > best_delta:
                best_delta = delta
                best_community = c

        if best_community != current_community:
            index.move(
                i,
                degree,
                current_community_degree,
                community_degrees[best_community],
                best_community,
            )
            moves += 1

    return moves


def _local_move_directed(index: DirectedLouvainIndex, rng: np.random.RandomState) -> int:
    """Directed counterpart of :func:`_local_move_undirected`."""
    belongings = index.belongings
    neighborhood = index.neighborhood
    weights = index.weights

    moves = 0
    nodes = np.arange(index.C)
    rng.shuffle(nodes)

    for i in nodes:
        i = int(i)
        start, end = index.bounds(i)
        if start == end:
            continue
        offset = int(index.offsets[i])

        in_degree = out_degree = 0.0
        in_degrees: Dict[int, float] = {}
        out_degrees: Dict[int, float] = {}
        for o in range(start, end):
            weight = float(weights[o])
            c = int(belongings[neighborhood[o]])
            if o < offset:
                out_degree += weight
                out_degrees[c] = out_degrees.get(c, 0.0) + weight
            else:
                in_degree += weight
                in_degrees[c] = in_degrees.get(c, 0.0) + weight

        current_community = int(belongings[i])
        current_in = in_degrees.get(current_community, 0.0)
        current_out = out_degrees.get(current_community, 0.0)

        best_community = current_community
        best_delta = index.delta_with_own_community(
            i, in_degree, out_degree, current_in + current_out, current_community
        )

        for c in set(in_degrees) | set(out_degrees):
            if c == current_community:
                continue
            delta = index.delta(
                i, in_degree, out_degree, in_degrees.get(c, 0.0) + out_degrees.get(c, 0.0), c
            )
            if delta > best_delta:
                best_delta = delta
                best_community = c

        if best_community != current_community:
            index.move(
                i,
                in_degree,
                out_degree,
                current_in,
                current_out,
                in_degrees.get(best_community, 0.0),
                out_degrees.get(best_community, 0.0),
                best_community,
            )
            moves += 1

    return moves


def louvain_communities(graph: HostGraph, **kwargs: Any) -> List[Set[Hashable]]:
    """Run :class:`Louvain` and return the final partition as node label sets."""
    model = Louvain(**kwargs).fit(graph)
    groups: Dict[int, Set[Hashable]] = {}
    for node, label in zip(model.index_.nodes, model.labels_.tolist()):
        groups.setdefault(label, set()).add(node)
    return list(groups.values())


def louvain_partition(graph: HostGraph, **kwargs: Any) -> Tuple[Dict[Hashable, int], float]:
    """Run :class:`Louvain` and return ``(node -> community, modularity)``."""
    model = Louvain(**kwargs).fit(graph)
    return dict(zip(model.index_.nodes, model.labels_.tolist())), model.modularity_
