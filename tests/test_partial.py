"""Tests for partial orderings and their combination."""

from __future__ import annotations

import numpy as np
import pytest

from curves.curve_set import CurveSet, create_curve_set
from ordering.combined import forder
from ordering.partial import combine_forder, partial_forder, partitioned_forder
from utils.config import EnvelopeConfig
from utils.errors import IncompatiblePartsError

MEASURES = ["rank", "cont", "erl", "area"]
ALTERNATIVES = ["two.sided", "less", "greater"]


def _random_set(seed: int = 0, nr: int = 6, nsim: int = 19) -> CurveSet:
    rng = np.random.default_rng(seed)
    return create_curve_set(r=np.arange(nr), obs=rng.normal(size=nr), sim_m=rng.normal(size=(nr, nsim)))


def _tied_set(seed: int = 1, nr: int = 6, nsim: int = 14) -> CurveSet:
    rng = np.random.default_rng(seed)
    values = rng.integers(0, 3, size=(nr, nsim + 1)).astype(float)
    values[2, :] = 1.0
    return create_curve_set(r=np.arange(nr), obs=values[:, 0], sim_m=values[:, 1:])


@pytest.mark.parametrize("measure", MEASURES)
@pytest.mark.parametrize("alternative", ALTERNATIVES)
@pytest.mark.parametrize("make_set", [_random_set, _tied_set])
def test_combined_parts_match_whole(measure, alternative, make_set) -> None:
    cs = make_set()
    cfg = EnvelopeConfig(measure=measure, alternative=alternative)
    whole = forder(cs, cfg).to_numpy()
    for blocks in ([slice(0, 2), slice(2, 6)], [[0], [1, 2, 3], [4, 5]]):
        parts = [partial_forder(cs.select(block), cfg) for block in blocks]
        np.testing.assert_allclose(combine_forder(parts).to_numpy(), whole)


@pytest.mark.parametrize("alternative", ALTERNATIVES)
@pytest.mark.parametrize("seed", [1, 7, 23])
def test_erl_without_histogram_is_exact_on_long_tables(alternative, seed) -> None:
    cs = _tied_set(seed=seed, nr=40)
    cfg = EnvelopeConfig(measure="erl", alternative=alternative, erl_hist_n=0)
    assert cs.nr > 2 * EnvelopeConfig().erl_hist_n
    whole = forder(cs, cfg).to_numpy()
    for blocks in ([slice(0, 20), slice(20, 40)], [slice(0, 7), slice(7, 31), slice(31, 40)]):
        parts = [partial_forder(cs.select(block), cfg) for block in blocks]
        assert all(part.hist_n == 0 for part in parts)
        np.testing.assert_allclose(combine_forder(parts).to_numpy(), whole)


def _paired_swap_set(nr: int = 40, nfunc: int = 15) -> CurveSet:
    # Odd rows swap neighbouring curves (0, 1), (2, 3), ..., so every curve
    # takes at most two distinct ranks over the whole table.
    values = np.tile(np.arange(nfunc, dtype=float), (nr, 1))
    swapped = np.arange(nfunc)
    pairs = swapped[: nfunc - nfunc % 2].reshape(-1, 2)
    swapped[: nfunc - nfunc % 2] = pairs[:, ::-1].ravel()
    values[1::2] = values[1::2][:, swapped]
    values *= np.linspace(1.0, 2.0, nr)[:, None]
    return create_curve_set(r=np.arange(nr), obs=values[:, 0], sim_m=values[:, 1:])


@pytest.mark.parametrize("alternative", ALTERNATIVES)
def test_erl_histogram_is_exact_when_curves_separate_early(alternative) -> None:
    cs = _paired_swap_set()
    cfg = EnvelopeConfig(measure="erl", alternative=alternative)
    assert cfg.erl_hist_n == 6 and cs.nr > 2 * cfg.erl_hist_n
    whole = forder(cs, cfg).to_numpy()
    assert len(np.unique(whole)) > 1
    parts = [partial_forder(cs.select(block), cfg) for block in (slice(0, 20), slice(20, 40))]
    assert all(part.data.shape[0] == 2 * cfg.erl_hist_n for part in parts)
    np.testing.assert_allclose(combine_forder(parts).to_numpy(), whole)


@pytest.mark.parametrize("measure", MEASURES)
def test_single_part_round_trip(measure) -> None:
    cs = _random_set(seed=4)
    cfg = EnvelopeConfig(measure=measure)
    combined = combine_forder([partial_forder(cs, cfg)])
    np.testing.assert_allclose(combined.to_numpy(), forder(cs, cfg).to_numpy())
    assert list(combined.index) == list(cs.names)


@pytest.mark.parametrize("measure", MEASURES)
def test_combine_is_order_independent(measure) -> None:
    cs = _tied_set(seed=9)
    cfg = EnvelopeConfig(measure=measure)
    parts = [partial_forder(cs.select(block), cfg) for block in ([0, 1], [2, 3], [4, 5])]
    np.testing.assert_allclose(
        combine_forder(parts).to_numpy(),
        combine_forder(parts[::-1]).to_numpy(),
    )


def test_partitioned_forder_matches_forder() -> None:
    cs = _random_set(seed=2)
    cfg = EnvelopeConfig(measure="area")
    result = partitioned_forder(cs, [slice(0, 3), slice(3, 6)], cfg)
    np.testing.assert_allclose(result.to_numpy(), forder(cs, cfg).to_numpy())


def test_area_part_without_global_minimum_adds_no_area() -> None:
    cs = _random_set(seed=6)
    cfg = EnvelopeConfig(measure="area")
    parts = [partial_forder(cs.select(block), cfg) for block in ([0, 1, 2], [3, 4, 5])]
    first, second = parts[0].data, parts[1].data
    combined = combine_forder(parts).to_numpy()
    for j in range(cs.nfunc):
        if first[0, j] < second[0, j]:
            expected = (first[0, j] - first[1, j] / cs.nr) / 10.0
            assert combined[j] == pytest.approx(expected)


def test_mismatched_parts_fail() -> None:
    cs = _random_set()
    erl = partial_forder(cs.select([0, 1]), EnvelopeConfig(measure="erl"))
    rank = partial_forder(cs.select([2, 3]), EnvelopeConfig(measure="rank"))
    with pytest.raises(IncompatiblePartsError):
        combine_forder([erl, rank])

    less = partial_forder(cs.select([2, 3]), EnvelopeConfig(measure="erl", alternative="less"))
    with pytest.raises(IncompatiblePartsError):
        combine_forder([erl, less])

    other = create_curve_set(r=[0.0, 1.0], obs=[0.0, 1.0], sim_m=np.zeros((2, 3)))
    with pytest.raises(IncompatiblePartsError):
        combine_forder([erl, partial_forder(other, EnvelopeConfig(measure="erl"))])


def test_partial_rejects_deviation_measures_and_empty_input() -> None:
    with pytest.raises(ValueError):
        partial_forder(_random_set(), EnvelopeConfig(measure="max"))
    with pytest.raises(ValueError):
        combine_forder([])
