"""Public algorithm exports."""

from louvain_index.algorithms.louvain import Louvain, louvain_communities, louvain_partition

__all__ = ["Louvain", "louvain_communities", "louvain_partition"]
