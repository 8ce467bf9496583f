import math

import networkx as nx
import numpy as np
import pytest

from louvain_index import InvalidGraphError, UndirectedLouvainIndex
from louvain_index.utils.arrays import pointer_array, pointer_dtype
from louvain_index.utils.graph import arc_counts, index_nodes, validate_graph, weight_getter


@pytest.mark.parametrize("value,dtype", [
    (-1, np.uint8),
    (0, np.uint8),
    (255, np.uint8),
    (256, np.uint16),
    (65535, np.uint16),
    (65536, np.uint32),
    (2**32 - 1, np.uint32),
    (2**32, np.uint64),
])
def test_pointer_dtype(value, dtype):
    assert pointer_dtype(value) == np.dtype(dtype)


def test_pointer_array_is_zeroed():
    arr = pointer_array(4, 1000)
    assert arr.dtype == np.uint16
    assert not arr.any()


def test_weight_getter_fallbacks():
    get_weight = weight_getter(True, "weight")
    assert get_weight({"weight": 2.5}) == 2.5
    assert get_weight({"weight": np.int64(3)}) == 3.0
    assert get_weight({}) == 1.0
    assert get_weight({"weight": "heavy"}) == 1.0
    assert get_weight({"weight": math.nan}) == 1.0
    assert get_weight({"weight": True}) == 1.0
    assert weight_getter(False, "weight")({"weight": 7}) == 1.0


def test_malformed_weights_never_fail_the_build():
    G = nx.Graph()
    G.add_edge("a", "b", weight="x")
    G.add_edge("b", "c", weight=float("nan"))
    G.add_edge("c", "d", weight=4)
    index = UndirectedLouvainIndex(G, weighted=True)
    assert index.M == 6


def test_index_nodes_follows_enumeration_order():
    G = nx.Graph([("z", "y"), ("y", "x")])
    nodes, ids = index_nodes(G)
    assert nodes == ["z", "y", "x"]
    assert ids == {"z": 0, "y": 1, "x": 2}


def test_arc_counts_skip_self_loops():
    G = nx.DiGraph([(0, 1), (1, 2), (2, 2), (2, 0)])
    _, ids = index_nodes(G)
    out_counts, in_counts = arc_counts(G, ids)
    assert list(out_counts) == [1, 1, 1]
    assert list(in_counts) == [1, 1, 1]


def test_validate_graph():
    G = nx.DiGraph()
    assert validate_graph(G, directed=True) is G
    with pytest.raises(InvalidGraphError):
        validate_graph(nx.Graph(), directed=True)
    with pytest.raises(InvalidGraphError):
        validate_graph({"nodes": []})
