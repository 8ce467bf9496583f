"""Core types and protocols for louvain_index."""

from __future__ import annotations

from typing import Any, Dict, Hashable, Iterable, Protocol, Tuple


class HostGraph(Protocol):
    """Read-only traversal contract consumed by the indices.

    Any ``networkx`` graph class satisfies it. Multigraphs are accepted,
    each parallel edge contributing its own arcs.
    """

    def is_directed(self) -> bool: ...

    def number_of_nodes(self) -> int: ...

    def number_of_edges(self) -> int: ...

    @property
    def nodes(self) -> Iterable[Hashable]: ...

    def edges(self, *args: Any, **kwargs: Any) -> Iterable[Tuple[Hashable, Hashable, Dict[str, Any]]]: ...


class InvalidGraphError(TypeError):
    """Raised when an object cannot be indexed as a graph."""
