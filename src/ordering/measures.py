"""Extremity measures ordering curves from the most to the least extreme.

Rank-based measures (rank, erl, cont, area) are smallest for the most extreme
curves. Each of them is computed in two steps: a reduction of the pointwise
rank matrix to a per-curve partial statistic, and a finalisation of that
statistic into the extremity value. Partial statistics of disjoint argument
ranges can be merged before finalisation, see :mod:`ordering.partial`.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Sequence

import numpy as np
import pandas as pd

from curves.curve_set import CurveSet
from ordering.deviation import deviation_measure
from ordering.pointwise import pointwise_ranks, value_runs
from utils.config import Alternative, EnvelopeConfig, Measure

logger = logging.getLogger(__name__)


def rank_matrix_cols(x: np.ndarray) -> np.ndarray:
    """Tie-averaged ranks of the columns of ``x`` in lexicographic order.

    The first row is the primary key. Missing entries (NaN) sort after every
    number and compare equal to each other.
    """

    arr = np.asarray(x, dtype=float)
    if arr.ndim == 1:
        arr = arr[None, :]
    arr = np.where(np.isnan(arr), np.inf, arr)
    n = arr.shape[1]
    perm = np.lexsort(arr[::-1])
    ordered = arr[:, perm]
    new_group = np.any(ordered[:, 1:] != ordered[:, :-1], axis=0)
    starts = np.concatenate(([0], np.flatnonzero(new_group) + 1))
    lengths = np.diff(np.concatenate((starts, [n])))
    average = starts + (lengths + 1) / 2.0
    ranks = np.empty(n, dtype=float)
    ranks[perm] = np.repeat(average, lengths)
    return ranks


def erl_histogram(ranks: np.ndarray, n: int) -> np.ndarray:
    """Run-length encode the ``n`` smallest distinct ranks of every curve.

    Returns a ``(2n, Nfunc)`` matrix with rows ``r1, -c1, r2, -c2, ...``;
    lexicographic order of its columns matches the order of the sorted rank
    vectors as long as curves are separated within the first ``n`` values.
    Curves with fewer than ``n`` distinct ranks are padded with NaN.
    """

    sorted_ranks = np.sort(ranks, axis=0)
    out = np.full((2 * n, sorted_ranks.shape[1]), np.nan)
    for j in range(sorted_ranks.shape[1]):
        col = sorted_ranks[:, j]
        starts, lengths = value_runs(col)
        k = min(n, starts.shape[0])
        out[0 : 2 * k : 2, j] = col[starts[:k]]
        out[1 : 2 * k : 2, j] = -lengths[:k]
    return out


def _reduce_min(ranks: np.ndarray, hist_n: int) -> np.ndarray:
    return np.min(ranks, axis=0)


def _reduce_erl(ranks: np.ndarray, hist_n: int) -> np.ndarray:
    if hist_n > 0:
        return erl_histogram(ranks, hist_n)
    return np.sort(ranks, axis=0)


def _reduce_area(ranks: np.ndarray, hist_n: int) -> np.ndarray:
    rank = np.ceil(np.min(ranks, axis=0))
    area = np.sum(np.where(ranks <= rank, rank - ranks, 0.0), axis=0)
    return np.vstack([rank, area])


def _merge_min(parts: Sequence[np.ndarray], hist_n: int) -> np.ndarray:
    return np.minimum.reduce([np.asarray(p, dtype=float) for p in parts])


def _merge_erl_curve(column: np.ndarray, n: int) -> np.ndarray:
    values = column[0::2]
    counts = column[1::2]
    keep = ~np.isnan(values)
    uniq, inverse = np.unique(values[keep], return_inverse=True)
    totals = np.bincount(inverse, weights=counts[keep], minlength=uniq.shape[0])
    k = min(n, uniq.shape[0])
    out = np.full(2 * n, np.nan)
    out[0 : 2 * k : 2] = uniq[:k]
    out[1 : 2 * k : 2] = totals[:k]
    return out


def _merge_erl(parts: Sequence[np.ndarray], hist_n: int) -> np.ndarray:
    if hist_n == 0:
        return np.sort(np.vstack(parts), axis=0)
    stacked = np.vstack(parts)
    return np.column_stack([_merge_erl_curve(stacked[:, j], hist_n) for j in range(stacked.shape[1])])


def _merge_area(parts: Sequence[np.ndarray], hist_n: int) -> np.ndarray:
    ranks = np.vstack([p[0] for p in parts])
    areas = np.vstack([p[1] for p in parts])
    rank = np.min(ranks, axis=0)
    # Only parts whose minimum is the global minimum hold ties at that minimum.
    area = np.sum(np.where(ranks == rank, areas, 0.0), axis=0)
    return np.vstack([rank, area])


def _cont_normaliser(nfunc: int, alternative: Alternative) -> float:
    if alternative is Alternative.TWO_SIDED:
        return float(math.ceil(nfunc / 2))
    return float(nfunc - 1)


def _finalize_rank(data: np.ndarray, nr: int, nfunc: int, alternative: Alternative) -> np.ndarray:
    return np.asarray(data, dtype=float)


def _finalize_erl(data: np.ndarray, nr: int, nfunc: int, alternative: Alternative) -> np.ndarray:
    return rank_matrix_cols(data) / nfunc


def _finalize_cont(data: np.ndarray, nr: int, nfunc: int, alternative: Alternative) -> np.ndarray:
    return np.asarray(data, dtype=float) / _cont_normaliser(nfunc, alternative)


def _finalize_area(data: np.ndarray, nr: int, nfunc: int, alternative: Alternative) -> np.ndarray:
    return (data[0] - data[1] / nr) / _cont_normaliser(nfunc, alternative)


@dataclass(frozen=True, slots=True)
class MeasureOps:
    """Reduction, merge and finalisation steps of one rank-based measure."""

    reduce: Callable[[np.ndarray, int], np.ndarray]
    merge: Callable[[Sequence[np.ndarray], int], np.ndarray]
    finalize: Callable[[np.ndarray, int, int, Alternative], np.ndarray]


MEASURE_OPS: dict[Measure, MeasureOps] = {
    Measure.RANK: MeasureOps(_reduce_min, _merge_min, _finalize_rank),
    Measure.ERL: MeasureOps(_reduce_erl, _merge_erl, _finalize_erl),
    Measure.CONT: MeasureOps(_reduce_min, _merge_min, _finalize_cont),
    Measure.AREA: MeasureOps(_reduce_area, _merge_area, _finalize_area),
}


def measure_ops(measure: Measure) -> MeasureOps:
    try:
        return MEASURE_OPS[measure]
    except KeyError:
        raise ValueError(f"Measure {measure.value!r} is not rank-based") from None


def partial_statistic(curve_set: CurveSet, measure: Measure, alternative: Alternative, hist_n: int = 0) -> np.ndarray:
    """Per-curve statistic of ``measure`` over the argument positions of ``curve_set``."""

    ops = measure_ops(measure)
    ranks = pointwise_ranks(curve_set.funcs, measure, alternative)
    return ops.reduce(ranks, hist_n)


def erl_histogram_size(curve_set: CurveSet, config: EnvelopeConfig) -> int:
    """Histogram size for the erl measure: 0 (exact) unless the curve table is large."""

    n = int(config.erl_hist_n)
    if n > 0 and curve_set.funcs.size > config.erl_hist_threshold and curve_set.nr > 2 * n:
        logger.debug(
            "Using erl histogram approximation | n=%d | nr=%d | nfunc=%d",
            n,
            curve_set.nr,
            curve_set.nfunc,
        )
        return n
    return 0


def individual_measure(curve_set: CurveSet, config: EnvelopeConfig | None = None) -> np.ndarray:
    """Extremity value of every function in ``curve_set`` under ``config.measure``."""

    config = config or EnvelopeConfig()
    measure = config.measure
    if measure.is_deviation:
        return deviation_measure(
            curve_set,
            measure,
            config.scaling,
            use_theo=config.use_theo,
            probs=config.probs,
            quantile_type=config.quantile_type,
        )
    hist_n = erl_histogram_size(curve_set, config) if measure is Measure.ERL else 0
    data = partial_statistic(curve_set, measure, config.alternative, hist_n)
    return measure_ops(measure).finalize(data, curve_set.nr, curve_set.nfunc, config.alternative)


def individual_forder(curve_set: CurveSet, config: EnvelopeConfig | None = None) -> pd.Series:
    """Functional ordering of a single curve set, indexed by function name."""

    config = config or EnvelopeConfig()
    values = individual_measure(curve_set, config)
    return pd.Series(values, index=list(curve_set.names), name=config.measure.value)
