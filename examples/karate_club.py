import networkx as nx

from louvain_index import Louvain


def main():
    G = nx.karate_club_graph()
    model = Louvain(random_state=42, keep_dendrogram=True, verbose=True).fit(G)
    print("levels:", model.n_levels_)
    print("modularity:", round(model.modularity_, 4))
    for c, group in enumerate(model.index_.communities()):
        print(c, sorted(group))
    model.index_.assign("community")


if __name__ == "__main__":
    main()
