"""Configuration dataclasses."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Dict

DEFAULT_WEIGHT_ATTRIBUTE = "weight"


class HistoryMode(Enum):
    """How successive community levels are remembered across coarsenings."""

    FULL = "full"
    FLATTENED = "flattened"


@dataclass
class LouvainIndexConfig:
    """Configuration container for the Louvain indices.

    ``attributes`` maps attribute roles to attribute names on the host graph;
    only the ``"weight"`` role is read. Invalid values are normalized rather
    than rejected.
    """

    weighted: bool = False
    attributes: Dict[str, str] = field(default_factory=lambda: {"weight": DEFAULT_WEIGHT_ATTRIBUTE})
    resolution: float = 1.0
    keep_dendrogram: bool = False

    def __post_init__(self) -> None:
        self.weighted = bool(self.weighted)
        self.keep_dendrogram = bool(self.keep_dendrogram)

        resolution = self.resolution
        if isinstance(resolution, bool) or not isinstance(resolution, Real) or not math.isfinite(resolution):
            resolution = 1.0
        self.resolution = float(resolution)

        attributes = dict(self.attributes or {})
        if not attributes.get("weight"):
            attributes["weight"] = DEFAULT_WEIGHT_ATTRIBUTE
        self.attributes = attributes

    @property
    def weight_attribute(self) -> str:
        return self.attributes["weight"]

    @property
    def history_mode(self) -> HistoryMode:
        return HistoryMode.FULL if self.keep_dendrogram else HistoryMode.FLATTENED
