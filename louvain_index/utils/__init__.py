"""Array and host graph utilities used across louvain_index."""

from louvain_index.utils.arrays import pointer_array, pointer_dtype
from louvain_index.utils.graph import (
    arc_counts,
    index_nodes,
    iter_weighted_edges,
    validate_graph,
    weight_getter,
)

__all__ = [
    "arc_counts",
    "index_nodes",
    "iter_weighted_edges",
    "pointer_array",
    "pointer_dtype",
    "validate_graph",
    "weight_getter",
]
