import networkx as nx
import pytest

SCENARIO_EDGES = [
    (1, 2, 30),
    (1, 5, 1),
    (2, 3, 15),
    (3, 4, 10),
    (4, 2, 1),
    (5, 1, 5),
    (6, 3, 100),
]


def _build(graph):
    graph.add_nodes_from(range(1, 7))
    for source, target, weight in SCENARIO_EDGES:
        graph.add_edge(source, target, weight=weight)
    return graph


@pytest.fixture
def scenario_graph():
    return _build(nx.Graph())


@pytest.fixture
def scenario_digraph():
    return _build(nx.DiGraph())
