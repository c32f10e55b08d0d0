"""Configuration record for functional ordering and envelope tests.

All tunables live on :class:`EnvelopeConfig` with their defaults. Option
strings are parsed into enumerations once, when the record is built, so the
computational code never re-validates them.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from enum import Enum
from pathlib import Path
from typing import Any, Mapping

import yaml

logger = logging.getLogger(__name__)


class Measure(str, Enum):
    RANK = "rank"
    ERL = "erl"
    CONT = "cont"
    AREA = "area"
    MAX = "max"
    INT = "int"
    INT2 = "int2"

    @property
    def is_deviation(self) -> bool:
        """Deviation measures are largest for the most extreme curves."""

        return self in (Measure.MAX, Measure.INT, Measure.INT2)


class Alternative(str, Enum):
    TWO_SIDED = "two.sided"
    LESS = "less"
    GREATER = "greater"


class Ties(str, Enum):
    MIDRANK = "midrank"
    RANDOM = "random"
    CONSERVATIVE = "conservative"
    LIBERAL = "liberal"
    ERL = "erl"


class Scaling(str, Enum):
    NONE = "none"
    Q = "q"
    QDIR = "qdir"
    ST = "st"


class EnvelopeMethod(str, Enum):
    RANK = "rank"
    ST = "st"
    QDIR = "qdir"
    UNSCALED = "unscaled"


def _parse_option(enum_cls: type[Enum], value: Any, name: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(repr(m.value) for m in enum_cls)  # type: ignore[attr-defined]
        raise ValueError(f"Unreasonable {name} argument {value!r}; expected one of {choices}") from None


@dataclass(frozen=True, slots=True)
class EnvelopeConfig:
    """Options shared by ``forder``, the partial/combine helpers and the envelope tests."""

    alpha: float = 0.05
    alternative: Alternative = Alternative.TWO_SIDED
    ties: Ties = Ties.MIDRANK
    measure: Measure = Measure.ERL
    scaling: Scaling = Scaling.QDIR
    use_theo: bool = True
    probs: tuple[float, float] = (0.025, 0.975)
    quantile_type: int = 7
    erl_hist_n: int = 6
    erl_hist_threshold: int = 10 * 2**20
    erl: bool = False
    savedevs: bool = False
    seed: int | None = None
    method: EnvelopeMethod = EnvelopeMethod.RANK

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        set_(self, "alternative", _parse_option(Alternative, self.alternative, "alternative"))
        set_(self, "ties", _parse_option(Ties, self.ties, "ties"))
        set_(self, "measure", _parse_option(Measure, self.measure, "measure"))
        set_(self, "scaling", _parse_option(Scaling, self.scaling, "scaling"))
        set_(self, "method", _parse_option(EnvelopeMethod, self.method, "method"))

        alpha = float(self.alpha)
        if not (0.0 <= alpha <= 1.0):
            raise ValueError(f"Unreasonable value of alpha: {self.alpha}")
        set_(self, "alpha", alpha)

        probs = tuple(float(p) for p in self.probs)
        if len(probs) != 2 or not (0.0 <= probs[0] < probs[1] <= 1.0):
            raise ValueError("probs must be two increasing values within [0, 1]")
        set_(self, "probs", probs)

        if int(self.quantile_type) not in range(1, 10):
            raise ValueError("quantile_type must be an integer between 1 and 9")
        if int(self.erl_hist_n) < 0:
            raise ValueError("erl_hist_n must be non-negative")
        if int(self.erl_hist_threshold) < 0:
            raise ValueError("erl_hist_threshold must be non-negative")

        if not isinstance(self.savedevs, bool):
            logger.warning("savedevs should be a boolean; using the default False")
            set_(self, "savedevs", False)

    @classmethod
    def from_dict(cls, cfg: Mapping[str, Any]) -> "EnvelopeConfig":
        """Build a config from a mapping, reading a nested ``envelope`` section if present."""

        section = cfg.get("envelope", cfg) if isinstance(cfg, Mapping) else {}
        if not isinstance(section, Mapping):
            raise ValueError("envelope config section must be a mapping")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(section) - known)
        if unknown:
            raise ValueError(f"Unknown envelope config keys: {unknown}")
        kwargs = dict(section)
        if "probs" in kwargs:
            kwargs["probs"] = tuple(kwargs["probs"])
        return cls(**kwargs)


def load_config(path: str | Path) -> dict[str, Any]:
    """Load a JSON or YAML configuration file.

    Parameters
    ----------
    path:
        Path or string pointing to a ``.json`` or ``.yaml``/``.yml`` file.

    Returns
    -------
    dict[str, Any]
        Parsed configuration dictionary. Empty configs yield an empty dict.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If the suffix is unsupported.
    """

    cfg_path = Path(path)
    if not cfg_path.exists():
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    suffix = cfg_path.suffix.lower()
    with cfg_path.open("r", encoding="utf-8") as handle:
        if suffix == ".json":
            return json.load(handle)
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(handle)
            return data if isinstance(data, dict) else {}

    raise ValueError(f"Unsupported config format: {cfg_path.suffix}")


def load_envelope_config(path: str | Path) -> EnvelopeConfig:
    """Read a YAML/JSON file and build an :class:`EnvelopeConfig` from it."""

    return EnvelopeConfig.from_dict(load_config(path))
