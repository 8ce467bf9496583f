import networkx as nx
import numpy as np
import pytest
from scipy import sparse

from louvain_index import InvalidGraphError, UndirectedLouvainIndex


def random_weighted_graph(seed, n=25, m=70):
    rng = np.random.RandomState(seed)
    G = nx.gnm_random_graph(n, m, seed=seed)
    for u, v in G.edges:
        G[u][v]["weight"] = float(rng.randint(1, 10))
    hub = max(G.degree, key=lambda item: item[1])[0]
    G.add_edge(hub, hub, weight=2.5)
    G.add_edge(0, 0, weight=1.0)
    return G, hub


def plan_moves(index, rng, n_moves=40, exclude=None):
    """Random moves towards neighbor communities, never touching ``exclude``'s community."""
    moves = []
    for _ in range(n_moves):
        i = int(rng.randint(index.C))
        if i == exclude:
            continue
        start, end = index.bounds(i)
        if start == end:
            continue
        target = int(index.belongings[index.neighborhood[rng.randint(start, end)]])
        if exclude is not None and target == int(index.belongings[exclude]):
            continue
        index.expensive_move(i, target)
        moves.append((i, target))
    return moves


def replay(index, moves):
    for i, target in moves:
        index.expensive_move(i, target)
    return index


def current_partition(index):
    """Communities of original nodes under the current level's belongings."""
    groups = {}
    for node, c in zip(index.nodes, index.mapping):
        groups.setdefault(int(index.belongings[c]), set()).add(node)
    return list(groups.values())


def test_rejects_non_graph_input():
    with pytest.raises(InvalidGraphError):
        UndirectedLouvainIndex(object())
    with pytest.raises(TypeError):
        UndirectedLouvainIndex([(0, 1)])


def test_packed_layout_matches_graph():
    G, _ = random_weighted_graph(0)
    index = UndirectedLouvainIndex(G, weighted=True)

    n_loops = nx.number_of_selfloops(G)
    assert index.C == G.number_of_nodes()
    assert index.E == 2 * (G.number_of_edges() - n_loops)
    assert index.M == pytest.approx(G.size(weight="weight"))
    assert np.all(np.diff(index.starts[:index.C + 1].astype(np.int64)) >= 0)
    assert index.starts[index.C] == index.E

    projection = index.project()
    for node in G:
        expected = sorted(v for v in G.neighbors(node) if v != node)
        assert sorted(projection[node]) == expected

    degrees = dict(G.degree(weight="weight"))
    for i, node in enumerate(index.nodes):
        assert index.total_weights[i] == pytest.approx(degrees[node])
    assert index.loops[0] == 2.0


def test_arrays_use_narrow_dtypes():
    index = UndirectedLouvainIndex(nx.path_graph(10))
    assert index.belongings.dtype == np.uint8
    assert index.neighborhood.dtype == np.uint8
    assert index.weights.dtype == np.float64

    big = UndirectedLouvainIndex(nx.path_graph(300))
    assert big.belongings.dtype == np.uint16
    assert big.starts.dtype == np.uint16


def test_initial_modularity_matches_networkx():
    G, _ = random_weighted_graph(1)
    index = UndirectedLouvainIndex(G, weighted=True, resolution=0.8)
    singletons = [{node} for node in G]
    assert index.modularity() == pytest.approx(
        nx.community.modularity(G, singletons, weight="weight", resolution=0.8)
    )


@pytest.mark.parametrize("seed", range(4))
def test_conservation_across_moves_and_zooms(seed):
    G, _ = random_weighted_graph(seed)
    index = UndirectedLouvainIndex(G, weighted=True)
    rng = np.random.RandomState(seed)

    for _ in range(3):
        plan_moves(index, rng)
        assert index.total_weights[:index.C].sum() == pytest.approx(2 * index.M)
        assert index.modularity() == pytest.approx(
            nx.community.modularity(G, current_partition(index), weight="weight")
        )
        index.zoom_out()
        assert index.total_weights[:index.C].sum() == pytest.approx(2 * index.M)


def test_null_move_is_exact():
    G, _ = random_weighted_graph(2)
    index = UndirectedLouvainIndex(G, weighted=True)
    plan_moves(index, np.random.RandomState(2))

    for i in range(index.C):
        figures = index.expensive_move(i, int(index.belongings[i]), dry_run=True)
        belongings = index.belongings.copy()
        total = index.total_weights.copy()
        internal = index.internal_weights.copy()

        index.move(*figures)

        assert np.array_equal(index.belongings, belongings)
        assert np.array_equal(index.total_weights, total)
        assert np.array_equal(index.internal_weights, internal)


def test_expensive_move_matches_manual_figures():
    G, hub = random_weighted_graph(3)
    moves = plan_moves(UndirectedLouvainIndex(G, weighted=True), np.random.RandomState(3))
    a = replay(UndirectedLouvainIndex(G, weighted=True), moves)
    b = replay(UndirectedLouvainIndex(G, weighted=True), moves)

    i = index_of(a, hub)
    start, end = a.bounds(i)
    target = int(a.belongings[a.neighborhood[start]])

    a.expensive_move(i, target)

    own = b.belongings[i]
    degree = current = in_target = 0.0
    for o in range(*b.bounds(i)):
        weight = b.weights[o]
        community = b.belongings[b.neighborhood[o]]
        degree += weight
        if community == own:
            current += weight
        if community == target:
            in_target += weight
    b.move(i, degree, current, in_target, target)

    assert np.array_equal(a.belongings, b.belongings)
    assert np.allclose(a.total_weights, b.total_weights)
    assert np.allclose(a.internal_weights, b.internal_weights)


def index_of(index, node):
    return index.nodes.index(node)


@pytest.mark.parametrize("seed,resolution", [(0, 1.0), (1, 1.0), (2, 0.5), (3, 1.7), (4, 1.0)])
def test_delta_matches_modularity_change(seed, resolution):
    G, hub = random_weighted_graph(seed)
    options = dict(weighted=True, resolution=resolution)
    i = index_of(UndirectedLouvainIndex(G, **options), hub)
    moves = plan_moves(UndirectedLouvainIndex(G, **options), np.random.RandomState(seed), exclude=i)

    isolated = replay(UndirectedLouvainIndex(G, **options), moves)
    start, end = isolated.bounds(i)
    target = int(isolated.belongings[isolated.neighborhood[end - 1]])
    assert target != isolated.belongings[i]

    in_target = replay(UndirectedLouvainIndex(G, **options), moves)
    in_target.expensive_move(i, target)

    expected = in_target.modularity() - isolated.modularity()

    _, degree, _, target_degree, _ = isolated.expensive_move(i, target, dry_run=True)
    assert isolated.delta(i, degree, target_degree, target) == pytest.approx(expected, rel=1e-4, abs=1e-12)

    _, degree, current_degree, target_degree, _ = in_target.expensive_move(i, target, dry_run=True)
    assert current_degree == target_degree
    assert in_target.delta_with_own_community(i, degree, target_degree, target) == pytest.approx(
        expected, rel=1e-4, abs=1e-12
    )


@pytest.mark.parametrize("seed", range(3))
def test_zoom_out_matches_membership_aggregate(seed):
    G, _ = random_weighted_graph(seed)
    index = UndirectedLouvainIndex(G, weighted=True, keep_dendrogram=True)
    plan_moves(index, np.random.RandomState(seed))

    A = index.to_csr()
    assert np.allclose(np.asarray(A.sum(axis=1)).ravel(), index.total_weights[:index.C])
    q_before = index.modularity()

    index.zoom_out()

    labels = index.dendrogram[1].astype(np.int64)
    n = labels.size
    P = sparse.csr_matrix((np.ones(n), (np.arange(n), labels)), shape=(n, index.C))
    expected = (P.T @ A @ P).toarray()

    assert np.allclose(index.to_csr().toarray(), expected)
    assert np.allclose(np.diag(expected), index.internal_weights[:index.C])
    assert index.modularity() == pytest.approx(q_before)
    assert list(index.belongings[:index.C]) == list(range(index.C))
    assert index.modularity() == pytest.approx(
        nx.community.modularity(G, index.communities(), weight="weight")
    )


def test_graph_without_edges():
    G = nx.empty_graph(4)
    index = UndirectedLouvainIndex(G)

    assert index.M == 0
    assert index.E == 0
    assert index.modularity() == 0.0
    assert index.delta(0, 0.0, 0.0, 1) == 0.0
    assert index.bounds(3) == (0, 0)

    index.zoom_out()
    assert index.C == 4
    assert index.level == 1
    assert index.collect() == {0: 0, 1: 1, 2: 2, 3: 3}


def test_empty_graph():
    index = UndirectedLouvainIndex(nx.Graph())
    assert index.C == 0
    assert index.modularity() == 0.0
    index.zoom_out()
    assert index.C == 0
    assert index.collect() == {}


def test_multigraph_parallel_edges_keep_their_own_arcs():
    G = nx.MultiGraph()
    G.add_edge("a", "b", weight=2)
    G.add_edge("a", "b", weight=3)
    G.add_edge("b", "c", weight=1)
    index = UndirectedLouvainIndex(G, weighted=True)

    assert index.E == 6
    assert index.M == 6
    assert sorted(index.project()["a"]) == ["b", "b"]
    assert index.to_csr().toarray()[0, 1] == 5

    index.expensive_move(0, 1)
    assert index.internal_weights[1] == 10
    index.zoom_out()
    assert index.C == 2
    assert list(index.weights[:index.E]) == [1, 1]


def test_assign_writes_node_attributes(scenario_graph):
    index = UndirectedLouvainIndex(scenario_graph)
    index.expensive_move(1, 2)
    index.zoom_out()
    index.assign("community")

    assert nx.get_node_attributes(scenario_graph, "community") == index.collect()
    assert scenario_graph.nodes[2]["community"] == scenario_graph.nodes[3]["community"]


def test_repr_and_summary(scenario_graph):
    index = UndirectedLouvainIndex(scenario_graph)
    assert repr(index) == "UndirectedLouvainIndex(C=6, M=6, E=12, level=0, resolution=1)"

    summary = index.summary()
    assert summary["starts"].size == 7
    assert summary["neighborhood"].size == 12
    assert summary["total_weights"].size == 6
    assert "mapping" in summary
