"""Typed array helpers."""

from __future__ import annotations

import numpy as np

_UNSIGNED_DTYPES = (np.uint8, np.uint16, np.uint32, np.uint64)


def pointer_dtype(max_value: int) -> np.dtype:
    """Return the narrowest unsigned integer dtype able to hold ``max_value``."""
    max_value = max(int(max_value), 0)
    for dtype in _UNSIGNED_DTYPES:
        if max_value <= np.iinfo(dtype).max:
            return np.dtype(dtype)
    raise OverflowError(f"{max_value} does not fit in any unsigned integer dtype.")


def pointer_array(size: int, max_value: int) -> np.ndarray:
    """Allocate a zeroed array of ``size`` pointers bounded by ``max_value``."""
    return np.zeros(size, dtype=pointer_dtype(max_value))
