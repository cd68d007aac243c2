"""
In-place key/value sorting for parallel term arrays.

Documents keep their term identifiers and counts in two aligned arrays.
Sorting must move both together, so ``np.argsort`` followed by fancy indexing
would allocate two new arrays; the partition-exchange sort below works in place
on any mutable sequence (lists or NumPy arrays).

Usage:
    from termvec.sorting import sort_by_key, merge_duplicate_keys
"""

from __future__ import annotations

from collections.abc import MutableSequence
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


def _partition(keys: MutableSequence, values: MutableSequence, low: int, high: int) -> int:
    """Hoare partition around the midpoint key. Returns the split index."""
    pivot = keys[(low + high) // 2]
    i = low - 1
    j = high + 1
    while True:
        i += 1
        while keys[i] < pivot:
            i += 1
        j -= 1
        while keys[j] > pivot:
            j -= 1
        if i >= j:
            return j
        keys[i], keys[j] = keys[j], keys[i]
        values[i], values[j] = values[j], values[i]


def sort_by_key(
    keys: MutableSequence,
    values: MutableSequence,
    low: int = 0,
    high: int | None = None,
) -> None:
    """
    Sort ``keys[low:high + 1]`` ascending in place, moving ``values`` alongside.

    Args:
        keys: Sort keys (term identifiers).
        values: Values paired with each key (counts or weights).
        low: First index of the range.
        high: Last index of the range (inclusive). Defaults to the last element.

    Duplicate keys are allowed; their relative order is unspecified.
    """
    if len(keys) != len(values):
        raise ValueError(f"keys and values differ in length: {len(keys)} != {len(values)}")
    if high is None:
        high = len(keys) - 1

    # pending (low, high) ranges
    stack = [(low, high)]
    while stack:
        lo, hi = stack.pop()
        if lo >= hi:
            continue
        split = _partition(keys, values, lo, hi)
        stack.append((lo, split))
        stack.append((split + 1, hi))


def merge_duplicate_keys(
    keys: NDArray[np.int64],
    values: NDArray[np.int64],
) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """
    Collapse runs of equal keys in sorted arrays, summing their values.

    Returns the inputs unchanged when every key is already unique.
    """
    if len(keys) < 2:
        return keys, values
    starts = np.flatnonzero(np.r_[True, keys[1:] != keys[:-1]])
    if len(starts) == len(keys):
        return keys, values
    return keys[starts], np.add.reduceat(values, starts)
