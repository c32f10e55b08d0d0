"""Select an envelope test by name."""

from __future__ import annotations

from typing import Callable

from curves.curve_set import CurveSet
from envelopes.rank import rank_envelope
from envelopes.result import EnvelopeTest
from envelopes.scaled import qdir_envelope, st_envelope, unscaled_envelope
from utils.config import EnvelopeConfig, EnvelopeMethod

EnvelopeBuilder = Callable[[CurveSet, EnvelopeConfig], EnvelopeTest]

ENVELOPE_BUILDERS: dict[EnvelopeMethod, EnvelopeBuilder] = {
    EnvelopeMethod.RANK: rank_envelope,
    EnvelopeMethod.ST: st_envelope,
    EnvelopeMethod.QDIR: qdir_envelope,
    EnvelopeMethod.UNSCALED: unscaled_envelope,
}


def run_envelope_test(curve_set: CurveSet, config: EnvelopeConfig | None = None) -> EnvelopeTest:
    """Run the envelope test named by ``config.method``."""

    config = config or EnvelopeConfig()
    return ENVELOPE_BUILDERS[config.method](curve_set, config)
