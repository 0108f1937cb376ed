"""Statistics kernel shared by the live and batch feature extractors.

Both extraction paths call these two functions so that a window fed through
either path yields identical numbers.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean.  Returns 0.0 for an empty sequence."""
    if len(values) == 0:
        return 0.0
    arr = np.asarray(values, dtype=np.float64)
    return float(np.mean(arr))


def std_dev(values: Sequence[float]) -> float:
    """Sample standard deviation (n - 1 denominator).

    Returns 0.0 if fewer than 2 values are provided.
    """
    if len(values) < 2:
        return 0.0
    arr = np.asarray(values, dtype=np.float64)
    return float(np.std(arr, ddof=1))
