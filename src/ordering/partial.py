"""Functional ordering computed in parts over disjoint argument ranges.

When a curve table does not fit in memory, split its argument positions into
blocks, call :func:`partial_forder` on each block (all blocks must come from
the same simulations, i.e. the same random seed) and merge the results with
:func:`combine_forder`. The combination is exact for rank, cont and area and
for erl as long as curves separate within the first ``erl_hist_n`` distinct
ranks.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from curves.curve_set import CurveSet
from ordering.measures import measure_ops, partial_statistic
from utils.config import Alternative, EnvelopeConfig, Measure
from utils.errors import IncompatiblePartsError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PartialOrdering:
    """Per-curve statistic of one block of argument positions."""

    data: np.ndarray
    measure: Measure
    alternative: Alternative
    nr: int
    hist_n: int
    names: tuple[str, ...]

    @property
    def nfunc(self) -> int:
        return len(self.names)


def partial_forder(curve_set: CurveSet, config: EnvelopeConfig | None = None) -> PartialOrdering:
    """Compute the partial statistic of ``config.measure`` for one block of a curve set.

    rank, cont and area parts combine exactly. For erl the part keeps the
    run-length histogram of each curve's ``config.erl_hist_n`` smallest
    distinct ranks. With ``erl_hist_n=0`` the full sorted rank vectors are
    kept and the combination is exact. Otherwise the combined ordering equals
    :func:`ordering.combined.forder` whenever the curves are told apart within
    their first ``erl_hist_n`` distinct ranks (in particular when no curve has
    more distinct ranks than that), and may differ when two curves tie on the
    whole kept histogram but not on the ranks beyond it.
    """

    config = config or EnvelopeConfig()
    measure = config.measure
    if measure.is_deviation:
        raise ValueError(f"Measure {measure.value!r} cannot be computed in parts")
    hist_n = int(config.erl_hist_n) if measure is Measure.ERL else 0
    data = partial_statistic(curve_set, measure, config.alternative, hist_n)
    return PartialOrdering(
        data=data,
        measure=measure,
        alternative=config.alternative,
        nr=curve_set.nr,
        hist_n=hist_n,
        names=curve_set.names,
    )


def _check_compatible(parts: Sequence[PartialOrdering]) -> None:
    first = parts[0]
    for part in parts[1:]:
        if part.measure is not first.measure:
            raise IncompatiblePartsError("All parts must have been produced using the same measure")
        if part.alternative is not first.alternative:
            raise IncompatiblePartsError("All parts must have been produced using the same alternative")
        if part.hist_n != first.hist_n:
            raise IncompatiblePartsError("All parts must use the same erl histogram size")
        if part.names != first.names:
            raise IncompatiblePartsError("All parts must describe the same functions")


def combine_forder(parts: Iterable[PartialOrdering]) -> pd.Series:
    """Merge partial orderings into the ordering over the union of their argument ranges."""

    parts = list(parts)
    if not parts:
        raise ValueError("No partial orderings to combine")
    _check_compatible(parts)

    first = parts[0]
    ops = measure_ops(first.measure)
    nr = sum(p.nr for p in parts)
    merged = ops.merge([p.data for p in parts], first.hist_n)
    values = ops.finalize(merged, nr, first.nfunc, first.alternative)
    logger.debug("Combined %d parts | measure=%s | nr=%d", len(parts), first.measure.value, nr)
    return pd.Series(values, index=list(first.names), name=first.measure.value)


def partitioned_forder(
    curve_set: CurveSet,
    blocks: Sequence[Sequence[int] | slice],
    config: EnvelopeConfig | None = None,
) -> pd.Series:
    """Order functions block by block over ``blocks`` of argument positions, then combine."""

    config = config or EnvelopeConfig()
    parts = [partial_forder(curve_set.select(block), config) for block in blocks]
    covered = sum(p.nr for p in parts)
    if covered != curve_set.nr:
        logger.warning("Blocks cover %d of %d argument positions", covered, curve_set.nr)
    return combine_forder(parts)
