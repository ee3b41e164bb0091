# ranking.py
"""
Tie-aware rank assignment.

Ranks are assigned in two passes: a stable sort that remembers each value's
original position, then a forward scan that groups equal neighbours and gives
every member of a group the mean of the rank positions the group occupies.
Whatever the tie structure, the ranks of n observations sum to n(n + 1) / 2.

Ascending order (smallest value gets rank 1) is used by the rank-sum test;
descending order (largest value gets rank 1) by Spearman's coefficient.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence


@dataclass(frozen=True)
class RankedValue:
    """One observation with its rank information."""

    value: float
    index: int        # position in the input sample
    base_rank: int    # first 1-indexed position of the tie group in sorted order
    tie_count: int    # number of observations sharing this value
    rank: float       # mean of base_rank .. base_rank + tie_count - 1

    @property
    def tied(self) -> bool:
        return self.tie_count > 1


def rank(data: Sequence[float], descending: bool = False) -> List[RankedValue]:
    """
    Rank a sample, averaging the ranks of tied values.

    Parameters
    ----------
    data : sequence of float
        Sample to rank. Input order is preserved in the output.
    descending : bool, optional
        If True the largest value gets rank 1, by default False.

    Returns
    -------
    list of RankedValue
        One entry per observation, in the order of `data`.
    """
    values = list(data)
    n = len(values)
    # sorted() keeps equal values in input order, also with reverse=True
    order = sorted(range(n), key=lambda i: values[i], reverse=descending)

    ranked: List[RankedValue] = [None] * n
    start = 0
    while start < n:
        stop = start + 1
        while stop < n and values[order[stop]] == values[order[start]]:
            stop += 1
        tie_count = stop - start
        base_rank = start + 1
        mean_rank = base_rank + (tie_count - 1) / 2.0
        for position in range(start, stop):
            idx = order[position]
            ranked[idx] = RankedValue(values[idx], idx, base_rank, tie_count, mean_rank)
        start = stop
    return ranked


def rank_values(data: Sequence[float], descending: bool = False) -> List[float]:
    """Tie-adjusted ranks of `data`, in input order."""
    return [item.rank for item in rank(data, descending=descending)]


def tie_counts(data: Sequence[float]) -> Dict[float, int]:
    """Number of observations at each distinct value."""
    return dict(Counter(data))


def has_ties(data: Sequence[float]) -> bool:
    return any(count > 1 for count in tie_counts(data).values())
