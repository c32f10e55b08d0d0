"""Global envelope tests and their result record."""

from .dispatch import ENVELOPE_BUILDERS, run_envelope_test
from .pvalue import estimate_p_value
from .rank import rank_envelope
from .result import EnvelopeTest
from .scaled import qdir_envelope, st_envelope, unscaled_envelope

__all__ = [
    "ENVELOPE_BUILDERS",
    "run_envelope_test",
    "estimate_p_value",
    "rank_envelope",
    "EnvelopeTest",
    "qdir_envelope",
    "st_envelope",
    "unscaled_envelope",
]
