"""
Counting kernels for the chunked aggregation path.

This module is compiled with Cython when the package is built with a C
compiler available; the functions keep the same behaviour either way.
"""
from collections import Counter


def count_chunk(chunk):
    """Return the frequency map of one chunk of sequences."""
    counts = Counter()
    for sequence in chunk:
        counts[sequence] += 1
    return counts


def merge_counts(left, right):
    """
    Merge two frequency maps by adding counts of shared sequences.

    The larger map is used as the accumulator and is updated in place, so
    both arguments must be owned by the caller. The result does not depend
    on argument order.

    :param left: First frequency map.
    :param right: Second frequency map.
    :returns: The merged frequency map.
    """
    if len(right) > len(left):
        left, right = right, left
    for sequence, count in right.items():
        left[sequence] = left.get(sequence, 0) + count
    return left
