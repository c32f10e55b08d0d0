"""Rank envelope test.

A completely non-parametric test giving the 100(1-alpha)% global envelope
of the observed curve from its extreme rank among the simulations, with a
p-interval spanning the liberal and conservative p-values. In erl mode the
curves are ordered by extreme rank length instead and the envelope is the
hull of the least extreme curves.
"""

from __future__ import annotations

import logging
from dataclasses import replace

import numpy as np

from curves.curve_set import CurveSet
from envelopes.pvalue import critical_index, estimate_p_value
from envelopes.result import EnvelopeTest
from ordering.measures import individual_measure
from ordering.pointwise import pointwise_ranks
from utils.config import Alternative, EnvelopeConfig, Measure, Ties
from utils.errors import CurveSetError

logger = logging.getLogger(__name__)


def require_simulations(curve_set: CurveSet) -> None:
    if not curve_set.has_sim or curve_set.obs.ndim != 1:
        raise CurveSetError("Envelope tests need an observed vector and simulated curves")


def clip_band(lo: np.ndarray, hi: np.ndarray, alternative: Alternative) -> tuple[np.ndarray, np.ndarray]:
    """Open the band on the side a one-sided alternative does not test."""

    if alternative is Alternative.LESS:
        hi = np.full_like(hi, np.inf)
    elif alternative is Alternative.GREATER:
        lo = np.full_like(lo, -np.inf)
    return lo, hi


def rank_envelope(curve_set: CurveSet, config: EnvelopeConfig | None = None) -> EnvelopeTest:
    """Rank envelope test of the observed curve in ``curve_set``."""

    config = config or EnvelopeConfig()
    require_simulations(curve_set)
    alternative = config.alternative
    ties = config.ties
    funcs = curve_set.funcs
    nfunc = curve_set.nfunc
    central = curve_set.central(use_theo=config.use_theo)
    rng = np.random.default_rng(config.seed)
    idx = critical_index(config.alpha, nfunc)

    p = float("nan")
    if config.erl or ties is Ties.ERL:
        erl_config = replace(config, measure=Measure.ERL)
        distance_erl = individual_measure(curve_set, erl_config)
        u_erl = -distance_erl
        p = estimate_p_value(u_erl[0], u_erl[1:], Ties.CONSERVATIVE)

    if not config.erl:
        allranks = pointwise_ranks(funcs, Measure.RANK, alternative)
        distance = allranks.min(axis=0)
        u = -distance
        p_interval = (
            estimate_p_value(u[0], u[1:], Ties.LIBERAL),
            estimate_p_value(u[0], u[1:], Ties.CONSERVATIVE),
        )
        if ties is not Ties.ERL:
            p = estimate_p_value(u[0], u[1:], ties, rng=rng)

        k_alpha = float(np.sort(distance)[::-1][idx])
        # Averaged ranks select the order statistic below them.
        kpos = int(np.floor(k_alpha))
        ordered = np.sort(funcs, axis=1)
        lo = ordered[:, kpos - 1]
        hi = ordered[:, nfunc - kpos]
        k = distance
        ties_label = ties.value
    else:
        p_interval = None
        k_alpha = float(np.sort(distance_erl)[::-1][idx])
        inside = distance_erl >= k_alpha
        lo = funcs[:, inside].min(axis=1)
        hi = funcs[:, inside].max(axis=1)
        k = distance_erl
        ties_label = "extreme rank length"

    lo, hi = clip_band(lo.astype(float), hi.astype(float), alternative)
    logger.debug(
        "Rank envelope | nfunc=%d | nr=%d | k_alpha=%.4g | p=%.4g",
        nfunc,
        curve_set.nr,
        k_alpha,
        p,
    )
    return EnvelopeTest(
        r=curve_set.r,
        obs=curve_set.obs,
        central=central,
        lo=lo,
        hi=hi,
        method="Rank envelope test",
        alternative=alternative,
        p=p,
        k_alpha=k_alpha,
        p_interval=p_interval,
        k=k,
        ties=ties_label,
    )
