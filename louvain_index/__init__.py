"""louvain_index: packed adjacency indices for Louvain community detection."""

from louvain_index.algorithms.louvain import Louvain, louvain_communities, louvain_partition
from louvain_index.config import HistoryMode, LouvainIndexConfig
from louvain_index.indices.directed import DirectedLouvainIndex
from louvain_index.indices.outbound import OutboundNeighborhoodIndex
from louvain_index.indices.undirected import UndirectedLouvainIndex
from louvain_index.types import HostGraph, InvalidGraphError

__all__ = [
    "DirectedLouvainIndex",
    "HistoryMode",
    "HostGraph",
    "InvalidGraphError",
    "Louvain",
    "LouvainIndexConfig",
    "OutboundNeighborhoodIndex",
    "UndirectedLouvainIndex",
    "louvain_communities",
    "louvain_partition",
]
