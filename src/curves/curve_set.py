"""Curve set container: one observed function and its Monte Carlo simulations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd

from utils.errors import CurveSetError


@dataclass(frozen=True, slots=True)
class CurveSet:
    """Observed and simulated functions evaluated on a common argument sequence ``r``.

    ``obs`` is either a vector of length ``nr`` (then ``sim_m`` holds the
    ``nr x Nsim`` simulations) or an ``nr x k`` matrix holding all functions,
    in which case ``sim_m`` is ``None``.
    """

    r: np.ndarray
    obs: np.ndarray
    sim_m: np.ndarray | None
    theo: np.ndarray | None
    names: tuple[str, ...]

    @property
    def nr(self) -> int:
        return int(self.r.shape[0])

    @property
    def has_sim(self) -> bool:
        return self.sim_m is not None

    @property
    def nfunc(self) -> int:
        return int(self.funcs.shape[1])

    @property
    def funcs(self) -> np.ndarray:
        """Curve table of shape ``(nr, Nfunc)``; column 0 is the observed curve."""

        if self.sim_m is None:
            return self.obs
        return np.column_stack([self.obs, self.sim_m])

    def central(self, use_theo: bool = True) -> np.ndarray:
        """Theoretical curve if available and requested, else the pointwise mean of simulations."""

        if use_theo and self.theo is not None:
            return self.theo
        if self.sim_m is not None:
            return self.sim_m.mean(axis=1)
        return self.obs.mean(axis=1)

    def select(self, positions: Sequence[int] | slice | np.ndarray) -> "CurveSet":
        """Return the curve set restricted to a subset of argument positions."""

        idx = np.arange(self.nr)[positions]
        if idx.size == 0:
            raise CurveSetError("Selection contains no argument positions")
        return CurveSet(
            r=self.r[idx],
            obs=self.obs[idx],
            sim_m=None if self.sim_m is None else self.sim_m[idx],
            theo=None if self.theo is None else self.theo[idx],
            names=self.names,
        )

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self.funcs, index=pd.Index(self.r, name="r"), columns=list(self.names))
        if self.theo is not None:
            df["theo"] = self.theo
        return df


def _check_r(r: np.ndarray, nr: int) -> None:
    if r.ndim != 1 or r.shape[0] != nr:
        raise CurveSetError(f"r must be a vector of length {nr}")
    if not np.all(np.isfinite(r)):
        raise CurveSetError("r must contain finite values")
    if nr > 1:
        step = np.diff(r)
        if not (np.all(step > 0) or np.all(step < 0)):
            raise CurveSetError("r must be strictly ordered")


def create_curve_set(
    r: Sequence[float] | np.ndarray | None,
    obs: Sequence[float] | np.ndarray,
    sim_m: np.ndarray | None = None,
    theo: Sequence[float] | np.ndarray | None = None,
    names: Sequence[str] | None = None,
) -> CurveSet:
    """Validate inputs and build a :class:`CurveSet`.

    Raises
    ------
    CurveSetError
        If shapes disagree, fewer than two functions are given, ``r`` is not
        strictly ordered or the table holds a missing value.
    """

    obs_arr = np.asarray(obs, dtype=float)
    if obs_arr.ndim not in (1, 2):
        raise CurveSetError("obs must be a vector or a matrix")
    nr = obs_arr.shape[0]
    if nr == 0:
        raise CurveSetError("obs must contain at least one argument value")

    sim_arr: np.ndarray | None = None
    if sim_m is not None:
        if obs_arr.ndim != 1:
            raise CurveSetError("sim_m must be omitted when obs is a matrix")
        sim_arr = np.asarray(sim_m, dtype=float)
        if sim_arr.ndim == 1:
            sim_arr = sim_arr.reshape(nr, 1)
        if sim_arr.ndim != 2 or sim_arr.shape[0] != nr:
            raise CurveSetError(f"sim_m must have shape ({nr}, Nsim)")
    elif obs_arr.ndim == 1:
        raise CurveSetError("sim_m is required when obs is a vector")

    r_arr = np.arange(1, nr + 1, dtype=float) if r is None else np.asarray(r, dtype=float)
    _check_r(r_arr, nr)

    theo_arr: np.ndarray | None = None
    if theo is not None:
        theo_arr = np.asarray(theo, dtype=float)
        if theo_arr.ndim == 0:
            theo_arr = np.full(nr, float(theo_arr))
        if theo_arr.shape != (nr,):
            raise CurveSetError(f"theo must be a vector of length {nr}")
        if np.any(np.isnan(theo_arr)):
            raise CurveSetError("theo must not contain missing values")

    table = obs_arr if sim_arr is None else np.column_stack([obs_arr, sim_arr])
    nfunc = table.shape[1]
    if nfunc < 2:
        raise CurveSetError("A curve set needs at least two functions")
    # Ranks are undefined for missing values, so a single NaN is rejected.
    missing = np.isnan(table)
    if np.any(missing):
        bad = sorted({int(j) for j in np.nonzero(missing)[1]})
        raise CurveSetError(f"The curve set has missing values in function(s) {bad}")

    if names is None:
        if sim_arr is None:
            names = [f"f{i + 1}" for i in range(nfunc)]
        else:
            names = ["obs"] + [f"sim{i + 1}" for i in range(nfunc - 1)]
    names = tuple(str(n) for n in names)
    if len(names) != nfunc:
        raise CurveSetError(f"Expected {nfunc} function names, got {len(names)}")

    return CurveSet(r=r_arr, obs=obs_arr, sim_m=sim_arr, theo=theo_arr, names=names)


def curve_set_from_frame(df: pd.DataFrame, theo: Sequence[float] | None = None) -> CurveSet:
    """Build a curve set from a frame indexed by ``r`` whose first column is the observed curve."""

    if df.shape[1] < 2:
        raise CurveSetError("The frame needs an observed column and at least one simulation")
    values = df.to_numpy(dtype=float)
    return create_curve_set(
        r=df.index.to_numpy(dtype=float),
        obs=values[:, 0],
        sim_m=values[:, 1:],
        theo=theo,
        names=[str(c) for c in df.columns],
    )
