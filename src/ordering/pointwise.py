"""Pointwise ranks of curve values at a single argument position.

Rank 1 marks the most extreme value in the tested direction. Discrete ranks
average ties; continuous ranks interpolate between integer ranks using the
gaps between neighbouring order statistics.
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from scipy.stats import rankdata

from utils.config import Alternative, Measure

RankFunction = Callable[[np.ndarray], np.ndarray]


def value_runs(sorted_values: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return start indices and lengths of runs of equal values in a sorted vector."""

    n = sorted_values.shape[0]
    if n == 0:
        return np.empty(0, dtype=int), np.empty(0, dtype=int)
    breaks = np.flatnonzero(sorted_values[1:] != sorted_values[:-1]) + 1
    starts = np.concatenate(([0], breaks))
    lengths = np.diff(np.concatenate((starts, [n])))
    return starts, lengths


def rank_discrete(values: np.ndarray, alternative: Alternative | str = Alternative.TWO_SIDED) -> np.ndarray:
    """Tie-averaged ranks of ``values``.

    ``less`` ranks the smallest value first, ``greater`` the largest and
    ``two.sided`` takes the smaller of the two.
    """

    alternative = Alternative(alternative)
    x = np.asarray(values, dtype=float)
    lo = rankdata(x, method="average")
    if alternative is Alternative.LESS:
        return lo
    hi = x.shape[0] + 1 - lo
    if alternative is Alternative.GREATER:
        return hi
    return np.minimum(lo, hi)


def _contrank_descending(y: np.ndarray) -> np.ndarray:
    """Continuous ranks with the largest value the most extreme."""

    n = y.shape[0]
    order = np.argsort(-y, kind="stable")
    ys = y[order]
    rr = np.arange(n, dtype=float)

    # Most extreme value: exp(-(y1 - y2) / (y2 - yN)), which tends to 0 as the
    # spread below it vanishes.
    spread = ys[1] - ys[-1]
    if spread > 0:
        rr[0] = np.exp(-(ys[0] - ys[1]) / spread)
    elif ys[0] > ys[1]:
        rr[0] = 0.0

    if n > 2:
        prev, cur, nxt = ys[:-2], ys[1:-1], ys[2:]
        gap = prev - nxt
        frac = np.divide(prev - cur, gap, out=np.zeros_like(gap), where=gap != 0)
        rr[1:-1] = np.arange(1, n - 1) + frac

    # Runs of three or more equal values (or a fully tied vector) leave the
    # interpolation undefined; they share the mean of their 1-based positions,
    # so the run still sums to its positions. For runs of four or more this differs
    # from adding each position to a running sum before advancing the index:
    # [5, 2, 2, 2, 2, 0] gives the run 3.5 here, not 3.75.
    starts, lengths = value_runs(ys)
    for start, length in zip(starts, lengths):
        if length >= 3 or length == n:
            rr[start : start + length] = start + (length + 1) / 2.0

    ranks = np.empty(n, dtype=float)
    ranks[order] = rr
    return ranks


def rank_continuous(values: np.ndarray, alternative: Alternative | str = Alternative.TWO_SIDED) -> np.ndarray:
    """Continuous pointwise ranks; ``two.sided`` is the elementwise minimum of both directions."""

    alternative = Alternative(alternative)
    y = np.asarray(values, dtype=float)
    if y.shape[0] < 2:
        raise ValueError("At least two values are needed for continuous ranks")
    if alternative is Alternative.GREATER:
        return _contrank_descending(y)
    if alternative is Alternative.LESS:
        return _contrank_descending(-y)
    return np.minimum(_contrank_descending(y), _contrank_descending(-y))


def pointwise_rank_function(measure: Measure, alternative: Alternative) -> RankFunction:
    """Select the pointwise rank function for a rank-based measure."""

    if measure in (Measure.RANK, Measure.ERL):
        return lambda x: rank_discrete(x, alternative)
    if measure in (Measure.CONT, Measure.AREA):
        return lambda x: rank_continuous(x, alternative)
    raise ValueError(f"Measure {measure.value!r} has no pointwise ranks")


def pointwise_ranks(funcs: np.ndarray, measure: Measure, alternative: Alternative) -> np.ndarray:
    """Rank every row of an ``(nr, Nfunc)`` curve table among its ``Nfunc`` values."""

    table = np.asarray(funcs, dtype=float)
    if measure in (Measure.RANK, Measure.ERL):
        lo = rankdata(table, method="average", axis=1)
        if alternative is Alternative.LESS:
            return lo
        hi = table.shape[1] + 1 - lo
        return hi if alternative is Alternative.GREATER else np.minimum(lo, hi)
    rank_fn = pointwise_rank_function(measure, alternative)
    return np.vstack([rank_fn(row) for row in table])
