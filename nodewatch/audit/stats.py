"""Order statistics used by the cross-submission audit."""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np


def median(values: Sequence[float]) -> float:
    """Conventional median: middle value, or mean of the two middle values.

    Raises:
        ValueError: if ``values`` is empty.
    """
    if len(values) == 0:
        raise ValueError("median of an empty sequence")
    return float(np.median(np.asarray(values, dtype=np.float64)))


def within_tolerance(value: float, center: float, tolerance: float) -> bool:
    """True when ``|value - center| <= tolerance`` (boundary inclusive)."""
    return abs(value - center) <= tolerance


__all__ = ["median", "within_tolerance"]
