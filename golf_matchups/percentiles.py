"""
Percentile ranking of a field of scalar values.
"""

from typing import Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .config import EXCLUDED_SG, PERCENTILE_PRECISION


def _usable(value) -> bool:
    return value is not None and value == value and value != EXCLUDED_SG


def percentiles(values: Sequence[Optional[float]]) -> List[Optional[float]]:
    """
    Percentile rank of each value within the field, aligned to input order.

    Nulls are dropped before ranking and come back as None. Values are rounded
    to two decimals first so floating-point noise does not split ties.
    percentile = (values strictly below) / (field size - 1); a single-value
    field ranks at 0.5.
    """
    present = [float(v) for v in values if _usable(v)]
    if not present:
        return [None] * len(values)

    field = np.round(np.asarray(present, dtype=float), PERCENTILE_PRECISION)
    n = len(field)

    ranks: List[Optional[float]] = []
    for v in values:
        if not _usable(v):
            ranks.append(None)
            continue
        if n == 1:
            ranks.append(0.5)
            continue
        rounded = float(np.round(float(v), PERCENTILE_PRECISION))
        below = int(np.count_nonzero(field < rounded))
        ranks.append(below / (n - 1))
    return ranks


def percentile_map(pairs: Iterable[Tuple[Hashable, Optional[float]]]) -> Dict[Hashable, Optional[float]]:
    """Keyed variant: {key: percentile} for (key, value) pairs."""
    pairs = list(pairs)
    ranks = percentiles([v for _, v in pairs])
    return {key: rank for (key, _), rank in zip(pairs, ranks)}
