"""Community history across coarsening levels.

Two strategies share one interface so that the coarsening walk is written once:

- :class:`DendrogramHistory` keeps one mapping array per level, where
  ``levels[k][i]`` is the community of original node ``i`` at level ``k``.
- :class:`FlattenedHistory` keeps a single mapping composed in place, which
  only answers for the current level.
"""

from __future__ import annotations

from typing import List

import numpy as np

from louvain_index.config import HistoryMode
from louvain_index.utils.arrays import pointer_dtype


class DendrogramHistory:
    """Full per-level record of original node -> community id."""

    mode = HistoryMode.FULL

    def __init__(self, belongings: np.ndarray) -> None:
        self.levels: List[np.ndarray] = [belongings.copy()]

    @property
    def level(self) -> int:
        return len(self.levels) - 1

    def record(self, renumbering: np.ndarray, n_communities: int) -> None:
        """Push a new level, composing the last one with ``renumbering``.

        ``renumbering[c]`` is the new id of the community ``c`` of the last level.
        """
        dtype = pointer_dtype(n_communities - 1)
        self.levels.append(renumbering[self.levels[-1]].astype(dtype))

    def mapping_at(self, level: int) -> np.ndarray:
        if not 0 <= level <= self.level:
            raise ValueError(f"Level {level} is out of range [0, {self.level}].")
        return self.levels[level]


class FlattenedHistory:
    """Single original node -> community mapping, rewritten at each level."""

    mode = HistoryMode.FLATTENED

    def __init__(self, belongings: np.ndarray) -> None:
        self.mapping = belongings.copy()
        self._level = 0

    @property
    def level(self) -> int:
        return self._level

    def record(self, renumbering: np.ndarray, n_communities: int) -> None:
        del n_communities
        self.mapping[:] = renumbering[self.mapping]
        self._level += 1

    def mapping_at(self, level: int) -> np.ndarray:
        if level != self._level:
            raise ValueError(
                f"Only the current level ({self._level}) is available without a dendrogram, got {level}."
            )
        return self.mapping


def make_history(mode: HistoryMode, belongings: np.ndarray):
    """Instantiate the history strategy matching ``mode``."""
    if mode is HistoryMode.FULL:
        return DendrogramHistory(belongings)
    if mode is HistoryMode.FLATTENED:
        return FlattenedHistory(belongings)
    raise NotImplementedError(f"Invalid history mode: {mode}")
