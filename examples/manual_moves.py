import networkx as nx

from louvain_index import UndirectedLouvainIndex


def main():
    G = nx.Graph([(1, 2), (1, 5), (2, 3), (3, 4), (4, 2), (6, 3)])
    index = UndirectedLouvainIndex(G, keep_dendrogram=True)

    # Figures for node 2 (index 1) joining node 3's community, then commit
    i, degree, current, target_degree, target = index.expensive_move(1, 2, dry_run=True)
    print("delta:", index.delta(i, degree, target_degree, target))
    index.move(i, degree, current, target_degree, target)

    for node in (6, 4):
        index.expensive_move(node - 1, 2)
    index.expensive_move(0, 4)

    print("modularity before zoom:", index.modularity())
    index.zoom_out()
    print("modularity after zoom:", index.modularity())
    print(index)
    print(index.collect())


if __name__ == "__main__":
    main()
