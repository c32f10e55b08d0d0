"""Envelope test result record."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from utils.config import Alternative


@dataclass(frozen=True, slots=True)
class EnvelopeTest:
    """Global envelope and p-value of one test.

    ``k`` holds the extremity value of every function (observed first) and
    ``k_alpha`` its critical value at the chosen level.
    """

    r: np.ndarray
    obs: np.ndarray
    central: np.ndarray
    lo: np.ndarray
    hi: np.ndarray
    method: str
    alternative: Alternative
    p: float
    k_alpha: float
    p_interval: tuple[float, float] | None = None
    k: np.ndarray | None = None
    ties: str | None = None

    def contains_obs(self) -> np.ndarray:
        """Pointwise flag for the observed curve lying inside the envelope."""

        return (self.obs >= self.lo) & (self.obs <= self.hi)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {
                "r": self.r,
                "obs": self.obs,
                "central": self.central,
                "lo": self.lo,
                "hi": self.hi,
            }
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "method": self.method,
            "alternative": self.alternative.value,
            "p": self.p,
            "p_interval": list(self.p_interval) if self.p_interval is not None else None,
            "k_alpha": self.k_alpha,
            "ties": self.ties,
            "r": self.r.tolist(),
            "obs": self.obs.tolist(),
            "central": self.central.tolist(),
            "lo": self.lo.tolist(),
            "hi": self.hi.tolist(),
            "k": self.k.tolist() if self.k is not None else None,
        }
