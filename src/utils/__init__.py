"""Shared utilities for configuration, logging and error types."""

from .config import (
    Alternative,
    EnvelopeConfig,
    EnvelopeMethod,
    Measure,
    Scaling,
    Ties,
    load_config,
    load_envelope_config,
)
from .errors import CurveSetError, DegenerateInputError, IncompatiblePartsError

__all__ = [
    "Alternative",
    "EnvelopeConfig",
    "EnvelopeMethod",
    "Measure",
    "Scaling",
    "Ties",
    "load_config",
    "load_envelope_config",
    "CurveSetError",
    "DegenerateInputError",
    "IncompatiblePartsError",
]
