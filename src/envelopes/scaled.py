"""Deviation-based envelope tests: studentised, directional quantile and unscaled.

All three use the maximum absolute scaled residual as test statistic and are
two-sided. The band is ``central - t_alpha * lower_scale`` to
``central + t_alpha * upper_scale``.
"""

from __future__ import annotations

import logging

import numpy as np

from curves.curve_set import CurveSet
from envelopes.pvalue import critical_index, estimate_p_value
from envelopes.rank import require_simulations
from envelopes.result import EnvelopeTest
from ordering.deviation import curve_scale, deviation, residual_table
from utils.config import Alternative, EnvelopeConfig, Measure, Scaling, Ties

logger = logging.getLogger(__name__)


def _scaled_envelope(
    curve_set: CurveSet,
    config: EnvelopeConfig | None,
    scaling: Scaling,
    method: str,
) -> EnvelopeTest:
    config = config or EnvelopeConfig()
    require_simulations(curve_set)
    if config.alternative is not Alternative.TWO_SIDED:
        raise ValueError(f"{method} supports only the two.sided alternative")
    if config.ties is Ties.ERL:
        raise ValueError(f"Ties method 'erl' is not available for the {method.lower()}")

    central, residuals = residual_table(curve_set, use_theo=config.use_theo)
    scale = curve_scale(
        residuals[:, 1:],
        scaling,
        probs=config.probs,
        quantile_type=config.quantile_type,
    )
    distance = deviation(scale.apply(residuals), Measure.MAX)

    rng = np.random.default_rng(config.seed)
    p = estimate_p_value(distance[0], distance[1:], config.ties, rng=rng)
    t_alpha = float(np.sort(distance)[critical_index(config.alpha, curve_set.nfunc)])

    logger.debug("%s | nfunc=%d | t_alpha=%.4g | p=%.4g", method, curve_set.nfunc, t_alpha, p)
    return EnvelopeTest(
        r=curve_set.r,
        obs=curve_set.obs,
        central=central,
        lo=central - t_alpha * scale.lower,
        hi=central + t_alpha * scale.upper,
        method=method,
        alternative=Alternative.TWO_SIDED,
        p=p,
        k_alpha=t_alpha,
        k=distance if config.savedevs else None,
        ties=config.ties.value,
    )


def st_envelope(curve_set: CurveSet, config: EnvelopeConfig | None = None) -> EnvelopeTest:
    """Studentised envelope test: residuals divided by the pointwise standard deviation."""

    return _scaled_envelope(curve_set, config, Scaling.ST, "Studentised envelope test")


def qdir_envelope(curve_set: CurveSet, config: EnvelopeConfig | None = None) -> EnvelopeTest:
    """Directional quantile envelope test scaled by the ``config.probs`` quantiles of the simulations."""

    return _scaled_envelope(curve_set, config, Scaling.QDIR, "Directional quantile envelope test")


def unscaled_envelope(curve_set: CurveSet, config: EnvelopeConfig | None = None) -> EnvelopeTest:
    """Unscaled envelope test; the band has constant width ``2 * t_alpha``."""

    return _scaled_envelope(curve_set, config, Scaling.NONE, "Unscaled envelope test")
