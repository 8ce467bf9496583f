"""Public index exports."""

from louvain_index.indices.directed import DirectedLouvainIndex
from louvain_index.indices.history import DendrogramHistory, FlattenedHistory, make_history
from louvain_index.indices.outbound import OutboundNeighborhoodIndex
from louvain_index.indices.undirected import UndirectedLouvainIndex

__all__ = [
    "DendrogramHistory",
    "DirectedLouvainIndex",
    "FlattenedHistory",
    "OutboundNeighborhoodIndex",
    "UndirectedLouvainIndex",
    "make_history",
]
