"""Joint ordering over several curve sets describing the same functions."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping

import numpy as np
import pandas as pd

from curves.curve_set import CurveSet, create_curve_set
from ordering.measures import individual_forder, individual_measure
from utils.config import Alternative, EnvelopeConfig, Measure
from utils.errors import IncompatiblePartsError

logger = logging.getLogger(__name__)


def check_curve_set_dimensions(curve_sets: Mapping[str, CurveSet]) -> None:
    """Require every curve set to hold the same number of functions."""

    if not curve_sets:
        raise ValueError("No curve sets given")
    counts = {name: cs.nfunc for name, cs in curve_sets.items()}
    if len(set(counts.values())) != 1:
        raise IncompatiblePartsError(f"Curve sets differ in their number of functions: {counts}")


def combined_forder(curve_sets: Mapping[str, CurveSet], config: EnvelopeConfig | None = None) -> pd.Series:
    """Order functions jointly over named curve sets.

    Each set is ordered on its own; the per-set values then form a new curve
    table (argument = set index) which is ordered by extreme rank length.
    """

    config = config or EnvelopeConfig()
    check_curve_set_dimensions(curve_sets)

    k_mat = np.vstack([individual_measure(cs, config) for cs in curve_sets.values()])
    names = next(iter(curve_sets.values())).names
    stage_two = create_curve_set(r=np.arange(1, k_mat.shape[0] + 1), obs=k_mat, names=names)

    # Deviation measures grow with extremeness, the rank-based ones shrink.
    alt2 = Alternative.GREATER if config.measure.is_deviation else Alternative.LESS
    logger.debug("Combined ordering | sets=%s | second stage alternative=%s", list(curve_sets), alt2.value)
    return individual_forder(stage_two, replace(config, measure=Measure.ERL, alternative=alt2))


def forder(curve_sets: CurveSet | Mapping[str, CurveSet], config: EnvelopeConfig | None = None) -> pd.Series:
    """Extremity measure of every function, for one curve set or several named ones.

    Rank-based measures are smallest and deviation measures largest for the
    most extreme functions.
    """

    if isinstance(curve_sets, CurveSet):
        return individual_forder(curve_sets, config)
    return combined_forder(curve_sets, config)
