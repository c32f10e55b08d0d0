"""Monte Carlo p-value estimation with explicit tie handling."""

from __future__ import annotations

import numpy as np

from utils.config import Ties


def estimate_p_value(
    obs: float,
    sim_vec: np.ndarray,
    ties: Ties | str = Ties.MIDRANK,
    *,
    rng: np.random.Generator | None = None,
) -> float:
    """Estimate ``(1 + #{sim >= obs}) / (Nsim + 1)`` where larger values are more extreme.

    Simulated values tied with ``obs`` count fully (conservative), not at all
    (liberal), half (midrank) or a uniformly drawn number of them (random).
    """

    ties = Ties(ties)
    sims = np.asarray(sim_vec, dtype=float)
    n_greater = int(np.sum(sims > obs))
    n_equal = int(np.sum(sims == obs))

    if ties is Ties.CONSERVATIVE:
        counted = n_greater + n_equal
    elif ties is Ties.LIBERAL:
        counted = n_greater
    elif ties is Ties.MIDRANK:
        counted = n_greater + 0.5 * n_equal
    elif ties is Ties.RANDOM:
        rng = rng if rng is not None else np.random.default_rng()
        counted = n_greater + int(rng.integers(0, n_equal + 1))
    else:
        raise ValueError(f"Ties method {ties.value!r} does not apply to a single p-value")
    return float((1 + counted) / (sims.shape[0] + 1))


def critical_index(alpha: float, nfunc: int) -> int:
    """Zero-based position of the ``(1 - alpha)`` order statistic among ``nfunc`` values."""

    position = int(np.floor(round((1.0 - alpha) * nfunc, 9)))
    if position < 1:
        raise ValueError(f"alpha={alpha} is too large for {nfunc} functions")
    return position - 1
