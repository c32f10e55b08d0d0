"""Residuals, curve scaling and deviation measures (max, int, int2).

Deviation measures are largest for the most extreme curves, the opposite of
the rank-based measures.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from curves.curve_set import CurveSet
from utils.config import Measure, Scaling
from utils.errors import DegenerateInputError

# R-style quantile types mapped to numpy quantile methods.
QUANTILE_METHODS: dict[int, str] = {
    1: "inverted_cdf",
    2: "averaged_inverted_cdf",
    3: "closest_observation",
    4: "interpolated_inverted_cdf",
    5: "hazen",
    6: "weibull",
    7: "linear",
    8: "median_unbiased",
    9: "normal_unbiased",
}


@dataclass(frozen=True, slots=True)
class CurveScale:
    """Pointwise divisors for residuals below (``lower``) and above (``upper``) the central curve."""

    lower: np.ndarray
    upper: np.ndarray

    def apply(self, residuals: np.ndarray) -> np.ndarray:
        """Divide an ``(nr, m)`` residual table by the scale.

        Positions with a zero scale are allowed only where the residual is
        zero as well; they contribute zero.
        """

        res = np.asarray(residuals, dtype=float)
        if res.ndim == 1:
            res = res[:, None]
        divisor = np.where(res >= 0, self.upper[:, None], self.lower[:, None])
        bad = (divisor == 0) & (res != 0)
        if np.any(bad):
            positions = np.unique(np.nonzero(bad)[0])
            raise DegenerateInputError(
                f"Zero scale at argument positions {positions.tolist()} where residuals are non-zero"
            )
        return np.divide(res, divisor, out=np.zeros_like(res), where=divisor != 0)


def null_curves(curve_set: CurveSet) -> np.ndarray:
    """Curves describing the null distribution: the simulations, or all functions without them."""

    return curve_set.sim_m if curve_set.sim_m is not None else curve_set.funcs


def residual_table(curve_set: CurveSet, use_theo: bool = True) -> tuple[np.ndarray, np.ndarray]:
    """Return the central curve and the ``(nr, Nfunc)`` table of residuals from it."""

    central = curve_set.central(use_theo)
    return central, curve_set.funcs - central[:, None]


def curve_quantiles(
    values: np.ndarray,
    probs: tuple[float, float],
    quantile_type: int = 7,
) -> np.ndarray:
    """Pointwise quantiles of an ``(nr, m)`` table, shape ``(2, nr)``."""

    return np.quantile(values, probs, axis=1, method=QUANTILE_METHODS[int(quantile_type)])


def curve_scale(
    null_residuals: np.ndarray,
    scaling: Scaling,
    *,
    probs: tuple[float, float] = (0.025, 0.975),
    quantile_type: int = 7,
) -> CurveScale:
    """Estimate the pointwise scale from residuals of the null curves."""

    nr = null_residuals.shape[0]
    if scaling is Scaling.NONE:
        ones = np.ones(nr)
        return CurveScale(lower=ones, upper=ones)
    if scaling is Scaling.ST:
        if null_residuals.shape[1] < 2:
            raise DegenerateInputError("Studentised scaling needs at least two simulations")
        sd = np.std(null_residuals, axis=1, ddof=1)
        return CurveScale(lower=sd, upper=sd)
    quant = curve_quantiles(null_residuals, probs, quantile_type)
    if scaling is Scaling.Q:
        spread = quant[1] - quant[0]
        return CurveScale(lower=spread, upper=spread)
    return CurveScale(lower=np.abs(quant[0]), upper=np.abs(quant[1]))


def deviation(scaled: np.ndarray, measure: Measure) -> np.ndarray:
    """Reduce scaled residual curves (columns) to one deviation value per curve."""

    if measure is Measure.MAX:
        return np.max(np.abs(scaled), axis=0)
    if measure is Measure.INT:
        return np.sum(np.abs(scaled), axis=0)
    if measure is Measure.INT2:
        return np.sum(scaled**2, axis=0)
    raise ValueError(f"{measure.value!r} is not a deviation measure")


def deviation_measure(
    curve_set: CurveSet,
    measure: Measure,
    scaling: Scaling,
    *,
    use_theo: bool = True,
    probs: tuple[float, float] = (0.025, 0.975),
    quantile_type: int = 7,
) -> np.ndarray:
    """Deviation of every function in ``curve_set`` from the central curve."""

    central, residuals = residual_table(curve_set, use_theo)
    null_res = null_curves(curve_set) - central[:, None]
    scale = curve_scale(null_res, scaling, probs=probs, quantile_type=quantile_type)
    return deviation(scale.apply(residuals), measure)
